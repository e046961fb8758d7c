# tracefuse/core/options.py
from __future__ import annotations

from dataclasses import dataclass

from .clock_sync import ClockDomainId
from .exceptions import InvalidOptions
from .range import Range


@dataclass(frozen=True, slots=True)
class ImportOptions:
    """
    Options for one import session.

    - reference_domain: clock domain already in model time
    - mdf_voltage_channel / mdf_current_channel: channel names read from MDF power recordings
    - mdf_sync_channel: optional string channel holding sync ids
    - max_warnings: cap on recorded warnings (None = unlimited)
    """
    reference_domain: ClockDomainId = ClockDomainId.HOST_TRACE
    mdf_voltage_channel: str = "voltage"
    mdf_current_channel: str = "current"
    mdf_sync_channel: str | None = "sync_id"
    max_warnings: int | None = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "reference_domain", ClockDomainId(self.reference_domain))
        except ValueError as e:
            raise InvalidOptions(f"Unknown reference_domain {self.reference_domain!r}.") from e
        for attr in ("mdf_voltage_channel", "mdf_current_channel"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise InvalidOptions(f"ImportOptions.{attr} must be a non-empty string.")
        if self.max_warnings is not None and (
            not isinstance(self.max_warnings, int) or self.max_warnings <= 0
        ):
            raise InvalidOptions("ImportOptions.max_warnings must be a positive int or None.")


@dataclass(frozen=True, slots=True)
class MetricOptions:
    """Options passed to every metric function."""
    range_of_interest: Range | None = None

    def __post_init__(self) -> None:
        if self.range_of_interest is not None and not isinstance(self.range_of_interest, Range):
            raise InvalidOptions("MetricOptions.range_of_interest must be a Range or None.")
