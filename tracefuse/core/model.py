# tracefuse/core/model.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from .clock_sync import ClockSyncManager
from .exceptions import ImportFailed, ThreadNotFound
from .options import ImportOptions
from .power_series import PowerSeries
from .range import Range
from .slice_group import SliceGroup
from .warnings import ImportWarningKind, TraceWarning

logger = logging.getLogger(__name__)


class ThreadRole(str, Enum):
    RENDERER_MAIN = "renderer_main"
    BROWSER_MAIN = "browser_main"
    OTHER = "other"


_ROLE_BY_THREAD_NAME = {
    "CrRendererMain": ThreadRole.RENDERER_MAIN,
    "CrBrowserMain": ThreadRole.BROWSER_MAIN,
}


@dataclass(slots=True)
class Device:
    """Device-level data; the power series stays None until an importer fills it."""
    power_series: PowerSeries | None = None
    power_source: object | None = field(default=None, repr=False)

    def claim_power_source(self, owner: object) -> bool:
        """Reserve the device's power recording for ``owner``; the first claim wins."""
        if self.power_source is None and self.power_series is None:
            self.power_source = owner
        return self.power_source is owner


@dataclass(slots=True)
class Thread:
    pid: int | str
    tid: int | str
    name: str | None = None
    process_name: str | None = None
    slice_group: SliceGroup = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.slice_group = SliceGroup(id_prefix=f"{self.pid}.{self.tid}")

    @property
    def key(self) -> tuple[int | str, int | str]:
        return (self.pid, self.tid)

    @property
    def role(self) -> ThreadRole:
        return _ROLE_BY_THREAD_NAME.get(self.name or "", ThreadRole.OTHER)


class Model:
    """
    In-memory result of one import session.

    The model is mutated only during import (by importers, in priority
    order). After finalize_import() slice groups are frozen and metrics
    treat the model as read-only.
    """

    def __init__(self, options: ImportOptions | None = None) -> None:
        self.options = options or ImportOptions()
        self.device = Device()
        self.clock_sync_manager = ClockSyncManager(
            on_warning=self.import_warning,
            reference_domain=self.options.reference_domain,
        )
        self._threads: dict[tuple[int | str, int | str], Thread] = {}
        self._warnings: list[TraceWarning] = []
        self.suppressed_warnings = 0
        self._finalized = False

    # ---- warnings ----
    def import_warning(
        self, kind: ImportWarningKind | str, message: str, *, fatal: bool = False
    ) -> None:
        """Append a warning to the log; raise ImportFailed if it is marked fatal."""
        warning = TraceWarning(kind=kind, message=message, fatal=fatal)

        cap = self.options.max_warnings
        if cap is not None and len(self._warnings) >= cap and not fatal:
            if self.suppressed_warnings == 0:
                self._warnings.append(
                    TraceWarning(
                        kind=ImportWarningKind.IMPORT_ERROR,
                        message=f"Too many import warnings; only the first {cap} are kept.",
                    )
                )
            self.suppressed_warnings += 1
            return

        self._warnings.append(warning)
        logger.warning("Import warning %s", warning)

        if fatal:
            raise ImportFailed(str(warning))

    @property
    def import_warnings(self) -> tuple[TraceWarning, ...]:
        return tuple(self._warnings)

    @property
    def has_warnings(self) -> bool:
        return bool(self._warnings)

    # ---- threads ----
    def get_or_create_thread(self, pid: int | str, tid: int | str) -> Thread:
        key = (pid, tid)
        thread = self._threads.get(key)
        if thread is None:
            thread = Thread(pid=pid, tid=tid)
            self._threads[key] = thread
        return thread

    def get_thread(self, pid: int | str, tid: int | str) -> Thread:
        try:
            return self._threads[(pid, tid)]
        except KeyError as e:
            raise ThreadNotFound((pid, tid)) from e

    def __len__(self) -> int:
        return len(self._threads)

    def __iter__(self) -> Iterator[Thread]:
        return iter(self._threads.values())

    @property
    def threads(self) -> tuple[Thread, ...]:
        return tuple(self._threads.values())

    def threads_with_role(self, role: ThreadRole | str) -> Iterable[Thread]:
        role = ThreadRole(role)
        return [t for t in self._threads.values() if t.role is role]

    def set_process_name(self, pid: int | str, name: str) -> None:
        for thread in self._threads.values():
            if thread.pid == pid:
                thread.process_name = name

    # ---- lifecycle ----
    def finalize_import(self) -> None:
        if self._finalized:
            return
        for thread in self._threads.values():
            group = thread.slice_group
            if group.open_slice_count:
                self.import_warning(
                    ImportWarningKind.IMPORT_ERROR,
                    f"{group.open_slice_count} slice(s) on thread {thread.pid}:{thread.tid} "
                    f"never ended and were closed at the end of the trace.",
                )
            group.finalize()
            for slc in group.improperly_nested:
                self.import_warning(
                    ImportWarningKind.IMPORT_ERROR,
                    f"Slice '{slc.title}' [{slc.start}, {slc.end}) on thread "
                    f"{thread.pid}:{thread.tid} overlaps a sibling without nesting.",
                )
        self._finalized = True

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def bounds(self) -> Range | None:
        ranges = [t.slice_group.bounds for t in self._threads.values()]
        series = self.device.power_series
        if series is not None and series.n:
            ranges.append(Range(min=series.t_start, max=series.t_end))
        out: Range | None = None
        for r in ranges:
            if r is None:
                continue
            out = r if out is None else out.union(r)
        return out
