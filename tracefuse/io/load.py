from __future__ import annotations

import logging
from typing import Any

from tracefuse.core import ImportOptions, ImportWarningKind, Model
from tracefuse.io.importer import Importer, ImporterRegistry, default_importers

logger = logging.getLogger(__name__)


def import_traces(
    *traces: Any,
    options: ImportOptions | None = None,
    importers: ImporterRegistry | None = None,
) -> Model:
    """Import already-materialized trace payloads into a single Model.

    Each payload is matched to the first importer that claims it. Importers
    then run in ascending priority, phase by phase: clock sync markers,
    events, finalize. A payload nobody can import is recorded as an import
    warning and skipped.
    """
    model = Model(options=options)
    registry = importers if importers is not None else default_importers()

    selected: list[Importer] = []
    for index, trace in enumerate(traces):
        cls = registry.find_importer(trace)
        if cls is None:
            model.import_warning(
                ImportWarningKind.IMPORT_ERROR,
                f"Could not find an importer for trace #{index} ({type(trace).__name__}).",
            )
            continue
        logger.debug("Trace #%d handled by %s", index, cls.__name__)
        selected.append(cls(model, trace))

    # Stable: importers with equal priority keep input order.
    selected.sort(key=lambda imp: imp.import_priority)

    for importer in selected:
        importer.import_clock_sync_markers()
    for importer in selected:
        importer.import_events()
    for importer in selected:
        importer.finalize_import()

    model.finalize_import()
    logger.info(
        "Imported %d trace(s): %d thread(s), %d warning(s)",
        len(selected),
        len(model),
        len(model.import_warnings),
    )
    return model
