from __future__ import annotations

from typing import Any, Iterable, Iterator

from tracefuse.core import ImportWarningKind, Model
from tracefuse.core.exceptions import InvalidImporter


class Importer:
    """Base class for format importers.

    Subclasses implement a cheap ``can_import`` detector and the two-phase
    import contract. Importers for the same model run in ascending
    ``import_priority``: every ``import_clock_sync_markers`` first, then every
    ``import_events``, then every ``finalize_import``.
    """

    import_priority: int = 0

    def __init__(self, model: Model, events: Any):
        self._model = model
        self._events = events
        self._refused = False

    @classmethod
    def can_import(cls, events: Any) -> bool:
        return False

    @property
    def importer_name(self) -> str:
        return type(self).__name__

    @property
    def model(self) -> Model:
        return self._model

    def import_clock_sync_markers(self) -> None:
        """Feed embedded sync markers to the model's ClockSyncManager."""

    def import_events(self) -> None:
        raise NotImplementedError

    def finalize_import(self) -> None:
        """Hook run after every importer has imported its events."""

    def claim_power_source(self, what: str) -> bool:
        """
        Power importers call this before touching clock sync or the series.
        A refused importer records one CONFLICTING_SOURCE warning and must
        contribute nothing, its sync markers included.
        """
        if self._model.device.claim_power_source(self):
            return True
        if not self._refused:
            self._refused = True
            self._model.import_warning(
                ImportWarningKind.CONFLICTING_SOURCE,
                f"Power series already exists, can not import {what}.",
            )
        return False


class ImporterRegistry:
    """Ordered list of importer classes; detection picks the first match."""

    def __init__(self, importers: Iterable[type[Importer]] = ()):
        self._importers: list[type[Importer]] = []
        for cls in importers:
            self.register(cls)

    def register(self, cls: type[Importer]) -> type[Importer]:
        if not (isinstance(cls, type) and issubclass(cls, Importer)):
            raise InvalidImporter(f"{cls!r} is not an Importer subclass.")
        if cls in self._importers:
            raise InvalidImporter(f"Importer {cls.__name__} is already registered.")
        self._importers.append(cls)
        return cls

    def __iter__(self) -> Iterator[type[Importer]]:
        return iter(self._importers)

    def __len__(self) -> int:
        return len(self._importers)

    def find_importer(self, events: Any) -> type[Importer] | None:
        for cls in self._importers:
            if cls.can_import(events):
                return cls
        return None


def default_importers() -> ImporterRegistry:
    """Registry holding the built-in trace formats."""
    from tracefuse.io.trace_event_importer import TraceEventImporter
    from tracefuse.io.battor_importer import BattorImporter
    from tracefuse.io.mdf_importer import MdfPowerImporter

    return ImporterRegistry([TraceEventImporter, BattorImporter, MdfPowerImporter])
