"""
Structured warnings collected during a conversion.

Each recoverable condition (skipped tile, dropped layer, degraded rotation)
becomes a :class:`ConversionWarning` that is returned alongside the result
and mirrored to the module logger.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from .logging_config import get_logger

logger = get_logger('diagnostics')


class Severity(Enum):
    """How much a warning degrades the output."""
    INFO = "info"
    WARNING = "warning"


class WarningCode(Enum):
    """Kinds of recoverable problems."""
    MALFORMED_TILE = "malformed_tile"
    UNSUPPORTED_TILESET = "unsupported_tileset"
    TILESET_NOT_FOUND = "tileset_not_found"
    ROTATION_UNSUPPORTED = "rotation_unsupported"
    ATLAS_OUT_OF_BOUNDS = "atlas_out_of_bounds"
    OLD_LDTK_VERSION = "old_ldtk_version"
    UNSUPPORTED_TILESETS_PRESENT = "unsupported_tilesets_present"
    EXTERNAL_LEVELS = "external_levels"


@dataclass(frozen=True)
class ConversionWarning:
    """A single recoverable problem."""
    severity: Severity
    code: WarningCode
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class Diagnostics:
    """Collects warnings for one conversion run."""

    def __init__(self):
        self.warnings: List[ConversionWarning] = []

    def warn(
        self,
        code: WarningCode,
        message: str,
        severity: Severity = Severity.WARNING,
        **context: Any
    ) -> ConversionWarning:
        """
        Record a warning and log it.

        Args:
            code: Warning kind
            message: Human-readable description
            severity: Severity of the problem
            **context: Extra fields (layer, position, tileset, ...) for callers to inspect

        Returns:
            The recorded warning
        """
        warning = ConversionWarning(severity, code, message, dict(context))
        self.warnings.append(warning)
        if severity == Severity.WARNING:
            logger.warning(message)
        else:
            logger.info(message)
        return warning

    def count(self, code: Optional[WarningCode] = None) -> int:
        """Number of warnings, optionally restricted to one code."""
        if code is None:
            return len(self.warnings)
        return sum(1 for w in self.warnings if w.code == code)

    def by_code(self, code: WarningCode) -> List[ConversionWarning]:
        return [w for w in self.warnings if w.code == code]

    def summary(self) -> Dict[str, int]:
        """Warning counts keyed by code value."""
        return dict(Counter(w.code.value for w in self.warnings))

    def __len__(self) -> int:
        return len(self.warnings)

    def __iter__(self):
        return iter(self.warnings)

    def __bool__(self) -> bool:
        return bool(self.warnings)
