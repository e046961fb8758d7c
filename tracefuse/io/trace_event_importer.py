from __future__ import annotations

import json
import logging
import math
from typing import Any

from tracefuse.core import ClockDomainId, ImportWarningKind, Model
from tracefuse.core.exceptions import InvalidSlice, SliceGroupError
from tracefuse.io.importer import Importer

logger = logging.getLogger(__name__)


_US_PER_MS = 1000.0

# Phases that are valid trace events but carry nothing this model keeps
# (instants, counters, flows, async and object events, samples).
_IGNORED_PHASES = frozenset("IiCstfbenSTFpNODPRvVa")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_clock_sync(event: dict) -> bool:
    return event.get("ph") == "c" or event.get("name") == "clock_sync"


class TraceEventImporter(Importer):
    """Imports Trace Event Format payloads (the primary CPU/task trace).

    Accepts a list of events, a ``{"traceEvents": [...]}`` object, or the
    JSON text of either. Timestamps are microseconds in the source and are
    stored in milliseconds. Complete (``X``) and begin/end (``B``/``E``)
    events become slices on their thread; ``clock_sync`` events become
    markers of the host trace clock domain.
    """

    import_priority = 1

    def __init__(self, model: Model, events: Any):
        super().__init__(model, events)
        self._process_names: dict[Any, str] = {}
        self.events = self._decode(events)

    @classmethod
    def can_import(cls, events) -> bool:
        if isinstance(events, dict):
            return isinstance(events.get("traceEvents"), list)
        if isinstance(events, list):
            return bool(events) and isinstance(events[0], dict) and "ph" in events[0]
        if isinstance(events, str):
            head = events[:4096].lstrip()
            if head.startswith("["):
                return True
            return head.startswith("{") and '"traceEvents"' in head
        return False

    def _decode(self, events: Any) -> list:
        if isinstance(events, str):
            try:
                events = json.loads(events)
            except ValueError as e:
                self.model.import_warning(
                    ImportWarningKind.PARSE_ERROR,
                    f"Trace event payload is not valid JSON: {e}",
                )
                return []

        if isinstance(events, dict):
            events = events.get("traceEvents", [])

        if not isinstance(events, list):
            self.model.import_warning(
                ImportWarningKind.PARSE_ERROR,
                f"Trace event payload must be a list of events, got {type(events).__name__}.",
            )
            return []
        return events

    # ------------------------------------------------------------------
    # Phase 1: clock sync markers
    # ------------------------------------------------------------------
    def import_clock_sync_markers(self) -> None:
        manager = self.model.clock_sync_manager
        for event in self.events:
            if not isinstance(event, dict) or not _is_clock_sync(event):
                continue
            args = event.get("args") or {}
            sync_id = args.get("sync_id") if isinstance(args, dict) else None
            ts = event.get("ts")
            if sync_id is None or not _is_number(ts):
                self.model.import_warning(
                    ImportWarningKind.PARSE_ERROR,
                    f"Clock sync event without sync_id or numeric ts: {event!r}",
                )
                continue
            manager.add_clock_sync_marker(ClockDomainId.HOST_TRACE, str(sync_id), ts / _US_PER_MS)

    # ------------------------------------------------------------------
    # Phase 2: events
    # ------------------------------------------------------------------
    def import_events(self) -> None:
        to_model_time = self.model.clock_sync_manager.get_model_time_transformer(
            ClockDomainId.HOST_TRACE
        )

        slice_events: list[dict] = []
        for event in self.events:
            if not isinstance(event, dict):
                self._parse_error(f"Trace event is not an object: {event!r}")
                continue

            ph = event.get("ph")
            if _is_clock_sync(event):
                continue
            if ph == "M":
                self._import_metadata(event)
            elif ph in ("X", "B", "E"):
                if not _is_number(event.get("ts")):
                    self._parse_error(f"Trace event without a numeric ts: {event!r}")
                    continue
                slice_events.append(event)
            elif ph in _IGNORED_PHASES:
                continue
            else:
                self._parse_error(f"Unrecognized event phase {ph!r}: {event!r}")

        # Begin/end pairing needs time order; sort is stable for equal ts.
        slice_events.sort(key=lambda e: e["ts"])
        for event in slice_events:
            self._import_slice_event(event, to_model_time)

        logger.debug("Imported %d slice events on %d threads", len(slice_events), len(self.model))

    def _parse_error(self, message: str) -> None:
        self.model.import_warning(ImportWarningKind.PARSE_ERROR, message)

    def _import_metadata(self, event: dict) -> None:
        args = event.get("args") or {}
        name = args.get("name") if isinstance(args, dict) else None
        if not isinstance(name, str):
            return
        if event.get("name") == "thread_name":
            thread = self.model.get_or_create_thread(event.get("pid", 0), event.get("tid", 0))
            thread.name = name
        elif event.get("name") == "process_name":
            self._process_names[event.get("pid", 0)] = name

    def _import_slice_event(self, event: dict, to_model_time) -> None:
        thread = self.model.get_or_create_thread(event.get("pid", 0), event.get("tid", 0))
        group = thread.slice_group
        ts = to_model_time(event["ts"] / _US_PER_MS)
        title = str(event.get("name", ""))
        category = str(event.get("cat", ""))
        args = event.get("args") if isinstance(event.get("args"), dict) else {}
        ph = event["ph"]

        try:
            if ph == "X":
                dur = event.get("dur")
                if not _is_number(dur):
                    self._parse_error(f"Complete event without a numeric dur: {event!r}")
                    return
                end = to_model_time((event["ts"] + dur) / _US_PER_MS)
                group.push_complete_slice(category, title, ts, end - ts, args)
            elif ph == "B":
                group.begin_slice(category, title, ts, args)
            else:
                group.end_slice(ts, args)
        except InvalidSlice as e:
            self._parse_error(f"Invalid slice event {event!r}: {e}")
        except SliceGroupError as e:
            self.model.import_warning(
                ImportWarningKind.IMPORT_ERROR,
                f"Thread {thread.pid}:{thread.tid}: {e}",
            )

    # ------------------------------------------------------------------
    # Phase 3
    # ------------------------------------------------------------------
    def finalize_import(self) -> None:
        for pid, name in self._process_names.items():
            self.model.set_process_name(pid, name)
