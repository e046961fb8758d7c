# tracefuse/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all tracefuse exceptions."""


# ---- Validation / construction errors ----
class InvalidSample(CoreError):
    """Raised when a PowerSample is constructed with invalid inputs."""


class InvalidSeries(CoreError):
    """Raised when a PowerSeries receives out-of-order or invalid samples."""


class InvalidSlice(CoreError):
    """Raised when a Slice is constructed with invalid bounds."""


class InvalidRange(CoreError):
    """Raised when a Range is constructed with min > max."""


class InvalidOptions(CoreError):
    """Raised when ImportOptions / MetricOptions hold invalid values."""


class InvalidHistogram(CoreError):
    """Raised when a histogram is configured with an invalid range or bin count."""


class InvalidImporter(CoreError):
    """Raised when an importer class is registered twice or is not an Importer."""


# ---- State errors ----
class SliceGroupError(CoreError):
    """Raised on misuse of a SliceGroup (end without begin, push after finalize)."""


class ImportFailed(CoreError):
    """Raised when an import warning explicitly marked fatal is recorded."""


class DuplicateMetric(CoreError):
    """Raised when a metric name is registered twice."""


class RegistryFrozen(CoreError):
    """Raised when registering into a registry that has been frozen."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class ThreadNotFound(CoreError, KeyError):
    """Raised when a requested (pid, tid) is not present in the model."""


class MetricNotFound(CoreError, KeyError):
    """Raised when a requested metric name is not registered."""


class ValueNotFound(CoreError, KeyError):
    """Raised when a requested value name is not present in a ValueSet."""
