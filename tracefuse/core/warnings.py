# tracefuse/core/warnings.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ImportWarningKind(str, Enum):
    PARSE_ERROR = "parse_error"
    IMPORT_ERROR = "import_error"
    CONFLICTING_SOURCE = "conflicting_source"
    MISSING_SYNC = "missing_sync"


@dataclass(frozen=True, slots=True)
class TraceWarning:
    """Non-fatal diagnostic recorded on the Model during import."""
    kind: ImportWarningKind
    message: str
    fatal: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ImportWarningKind(self.kind))

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"
