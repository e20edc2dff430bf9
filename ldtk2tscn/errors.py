"""
Exception types raised by the conversion pipeline.

Fatal conditions raise one of these; recoverable ones are recorded as
warnings in :class:`ldtk2tscn.diagnostics.Diagnostics` instead.
"""

from typing import Iterable, List


class Ldtk2TscnError(Exception):
    """Base class for all conversion errors."""


class InputFileError(Ldtk2TscnError):
    """The input file is missing, too large or has the wrong extension."""


class LdtkFormatError(Ldtk2TscnError):
    """The document is not a usable LDtk project."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__(f"Invalid LDtk file: {', '.join(self.errors)}")


class LevelNotFoundError(Ldtk2TscnError):
    """The requested level identifier does not exist in the project."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Level not found: {identifier}")


class NoLayersError(Ldtk2TscnError):
    """No convertible layers remain after filtering."""


class UnsupportedTilesetError(Ldtk2TscnError):
    """A layer references a tileset the converter cannot map."""

    def __init__(self, tileset_name: str, supported: Iterable[str]):
        self.tileset_name = tileset_name
        self.supported = list(supported)
        super().__init__(
            f"Unsupported tileset: {tileset_name}. "
            f"Supported tilesets: {', '.join(self.supported)}"
        )


class ConversionError(Ldtk2TscnError):
    """The assembled conversion data failed validation."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__(f"Conversion validation failed: {', '.join(self.errors)}")
