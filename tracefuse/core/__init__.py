# tracefuse/core/__init__.py
"""
Core domain objects for tracefuse.

This module defines the format-agnostic trace model:
- PowerSample / PowerSeries: device power readings in model time
- Slice / SliceGroup: per-thread forest of timed intervals
- ClockSyncManager: clock domains, sync markers and model-time transforms
- Model: composition root (device, threads, clock sync, import warnings)

The core layer is independent from trace formats and metrics.
"""

from .range import Range
from .sample import PowerSample
from .power_series import PowerSeries
from .slice import Slice
from .slice_group import SliceGroup
from .clock_sync import ClockDomainId, ClockSyncManager, ClockSyncMarker, ClockSyncTransform
from .warnings import ImportWarningKind, TraceWarning
from .options import ImportOptions, MetricOptions
from .model import Device, Model, Thread, ThreadRole
from .exceptions import (
    CoreError,
    InvalidSample,
    InvalidSeries,
    InvalidSlice,
    InvalidRange,
    InvalidOptions,
    InvalidHistogram,
    InvalidImporter,
    SliceGroupError,
    ImportFailed,
    DuplicateMetric,
    RegistryFrozen,
    ThreadNotFound,
    MetricNotFound,
    ValueNotFound,
)


__all__ = [
    # primitives
    "Range",
    "PowerSample",
    "PowerSeries",
    "Slice",
    "SliceGroup",

    # clock sync
    "ClockDomainId",
    "ClockSyncManager",
    "ClockSyncMarker",
    "ClockSyncTransform",

    # model
    "Device",
    "Model",
    "Thread",
    "ThreadRole",
    "ImportWarningKind",
    "TraceWarning",

    # options
    "ImportOptions",
    "MetricOptions",

    # exceptions
    "CoreError",
    "InvalidSample",
    "InvalidSeries",
    "InvalidSlice",
    "InvalidRange",
    "InvalidOptions",
    "InvalidHistogram",
    "InvalidImporter",
    "SliceGroupError",
    "ImportFailed",
    "DuplicateMetric",
    "RegistryFrozen",
    "ThreadNotFound",
    "MetricNotFound",
    "ValueNotFound",
]
