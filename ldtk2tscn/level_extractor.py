"""
Level extractor - reads an LDtk project and selects the layers to convert.

This module holds the file I/O and document validation so the transcoder
and assembler only ever see validated, in-memory data.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from .constants import (
    COLLISIONS_LAYER,
    SHADOWS_LAYER,
    BACKGROUND_LAYER,
    RECOGNIZED_LAYERS,
    DEFAULT_GRID_SIZE,
    LDTK_FILE_TYPE,
    SUPPORTED_EXTENSIONS,
    SUPPORTED_TILESET,
    IGNORED_TILESETS,
    MAX_FILE_SIZE
)
from .diagnostics import Diagnostics, Severity, WarningCode
from .errors import InputFileError, LdtkFormatError, LevelNotFoundError
from .logging_config import get_logger
from .models import ConversionOptions, Layer, LevelInfo
from .tileset_mapper import TilesetRegistry
from .utils import file_extension, format_file_size, load_json

logger = get_logger('level_extractor')

# Layer identifier -> ConversionOptions field that switches it off
LAYER_OPTIONS = {
    COLLISIONS_LAYER: "include_collisions",
    SHADOWS_LAYER: "include_shadows",
    BACKGROUND_LAYER: "include_background",
}


def validate_input_file(path: Path, max_size: int = MAX_FILE_SIZE) -> None:
    """
    Check that a file can be loaded as an LDtk project.

    Raises:
        InputFileError: If the file is missing, has an unsupported extension or is too large
    """
    if not path.is_file():
        raise InputFileError(f"File not found: {path}")

    extension = file_extension(path.name)
    if extension not in SUPPORTED_EXTENSIONS:
        raise InputFileError(
            f"Unsupported file type: {extension or '(none)'}. "
            f"Supported types: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    size = path.stat().st_size
    if size > max_size:
        raise InputFileError(
            f"File too large: {format_file_size(size)}. "
            f"Maximum size: {format_file_size(max_size)}"
        )


def validate_project(data: Any) -> None:
    """
    Structural validation of a parsed LDtk document.

    Raises:
        LdtkFormatError: Listing every structural problem found
    """
    if not isinstance(data, dict):
        raise LdtkFormatError(["Document is not a JSON object"])

    errors = []
    header = data.get("__header__")
    if not isinstance(header, dict) or header.get("fileType") != LDTK_FILE_TYPE:
        errors.append("Missing or incorrect header")

    levels = data.get("levels")
    if not isinstance(levels, list):
        errors.append("Missing levels array")
    elif not levels:
        errors.append("No levels found in the file")

    defs = data.get("defs")
    tilesets = defs.get("tilesets") if isinstance(defs, dict) else None
    if not isinstance(tilesets, list):
        errors.append("Missing tileset definitions")
    elif not any(t.get("identifier") == SUPPORTED_TILESET for t in tilesets if isinstance(t, dict)):
        errors.append(f"No supported tilesets found. Supported: {SUPPORTED_TILESET}")

    if errors:
        raise LdtkFormatError(errors)


def load_project(path: Path) -> Dict[str, Any]:
    """
    Read and validate an LDtk project file.

    Args:
        path: Path to the .ldtk file

    Returns:
        Parsed project document

    Raises:
        InputFileError: If the file cannot be used
        LdtkFormatError: If the content is not a valid LDtk project
    """
    path = Path(path)
    validate_input_file(path)
    logger.info(f"Loading file: {path.name} ({format_file_size(path.stat().st_size)})")

    try:
        data = load_json(str(path))
    except json.JSONDecodeError as e:
        raise LdtkFormatError([f"Invalid JSON: {e}"]) from e
    except UnicodeDecodeError as e:
        raise LdtkFormatError([f"File is not UTF-8 text: {e}"]) from e

    validate_project(data)
    logger.info("LDtk file parsed successfully")
    return data


def check_compatibility(data: Dict[str, Any], diagnostics: Diagnostics) -> None:
    """Record non-fatal compatibility warnings for a validated project."""
    version = data.get("__header__", {}).get("appVersion")
    if version:
        try:
            major = int(str(version).split(".")[0])
        except ValueError:
            major = None
        if major is not None and major < 1:
            diagnostics.warn(
                WarningCode.OLD_LDTK_VERSION,
                f"Old LDtk version detected ({version}). Some features may not work correctly.",
                version=version
            )

    if data.get("externalLevels"):
        diagnostics.warn(
            WarningCode.EXTERNAL_LEVELS,
            "External levels are not supported; only levels stored in the project are read"
        )

    unsupported = [
        t.get("identifier", "")
        for t in data.get("defs", {}).get("tilesets", [])
        if t.get("identifier") != SUPPORTED_TILESET and t.get("identifier") not in IGNORED_TILESETS
    ]
    if unsupported:
        diagnostics.warn(
            WarningCode.UNSUPPORTED_TILESETS_PRESENT,
            f"Unsupported tilesets will be skipped: {', '.join(unsupported)}",
            severity=Severity.INFO,
            tilesets=unsupported
        )


def _layer_from_instance(instance: Dict[str, Any], registry: TilesetRegistry) -> Layer:
    identifier = instance.get("__identifier", "")
    opacity = instance.get("__opacity", instance.get("opacity", 1))
    return Layer(
        identifier=identifier,
        tileset_uid=instance.get("__tilesetDefUid"),
        opacity=float(opacity) if isinstance(opacity, (int, float)) else 1.0,
        visible=instance.get("visible") is not False,
        config=registry.layer_config(identifier),
        grid_size=instance.get("__gridSize") or DEFAULT_GRID_SIZE,
        layer_type=instance.get("__type", "Tiles"),
        raw_tiles=list(instance.get("gridTiles") or [])
    )


def select_layers(
    level: Dict[str, Any],
    recognized: Iterable[str],
    options: ConversionOptions,
    registry: TilesetRegistry
) -> List[Layer]:
    """
    Pick the layers of a level that should be converted.

    A layer is kept when its identifier is recognized and its inclusion option
    is not switched off. Order follows the level's layerInstances.

    Args:
        level: Raw LDtk level dict
        recognized: Layer identifiers the converter understands
        options: Inclusion switches
        registry: Registry providing each layer's presentation config

    Returns:
        Selected layers
    """
    recognized = set(recognized)
    selected = []
    for instance in level.get("layerInstances") or []:
        identifier = instance.get("__identifier")
        if identifier not in recognized:
            continue
        option = LAYER_OPTIONS.get(identifier)
        if option is not None and getattr(options, option) is False:
            logger.debug(f"Layer {identifier} excluded by options")
            continue
        selected.append(_layer_from_instance(instance, registry))
    return selected


class LdtkProject:
    """Read-only view over a validated LDtk project document."""

    def __init__(self, data: Dict[str, Any], registry: Optional[TilesetRegistry] = None):
        """
        Initialize LdtkProject.

        Args:
            data: Parsed LDtk document (validated with validate_project)
            registry: Tileset registry (defaults to the built-in one)
        """
        self.data = data
        self.registry = registry if registry is not None else TilesetRegistry.default()

    @classmethod
    def from_file(cls, path: Path, registry: Optional[TilesetRegistry] = None) -> "LdtkProject":
        return cls(load_project(path), registry)

    @property
    def levels(self) -> List[Dict[str, Any]]:
        return self.data.get("levels") or []

    def list_levels(self) -> List[Dict[str, Any]]:
        """Short description of every level."""
        return [
            {
                "identifier": level.get("identifier"),
                "iid": level.get("iid"),
                "uid": level.get("uid"),
                "worldX": level.get("worldX", 0),
                "worldY": level.get("worldY", 0),
                "pxWid": level.get("pxWid", 0),
                "pxHei": level.get("pxHei", 0),
                "layerCount": len(level.get("layerInstances") or []),
            }
            for level in self.levels
        ]

    def get_level(self, identifier: str) -> Dict[str, Any]:
        """
        Raw level dict by identifier.

        Raises:
            LevelNotFoundError: If no level has that identifier
        """
        for level in self.levels:
            if level.get("identifier") == identifier:
                return level
        raise LevelNotFoundError(identifier)

    def level_info(self, identifier: str) -> LevelInfo:
        level = self.get_level(identifier)
        return LevelInfo(
            identifier=level.get("identifier", identifier),
            px_wid=level.get("pxWid", 0),
            px_hei=level.get("pxHei", 0),
            iid=level.get("iid"),
            uid=level.get("uid"),
            world_x=level.get("worldX", 0),
            world_y=level.get("worldY", 0)
        )

    def get_tilesets(self) -> List[Dict[str, Any]]:
        return self.data.get("defs", {}).get("tilesets") or []

    def tilesets_by_uid(self) -> Dict[int, Dict[str, Any]]:
        return {t["uid"]: t for t in self.get_tilesets() if "uid" in t}

    def get_tileset_by_uid(self, uid: int) -> Optional[Dict[str, Any]]:
        return self.tilesets_by_uid().get(uid)

    def select_layers(
        self,
        identifier: str,
        options: Optional[ConversionOptions] = None
    ) -> List[Layer]:
        """Recognized, enabled layers of a level (see :func:`select_layers`)."""
        return select_layers(
            self.get_level(identifier),
            RECOGNIZED_LAYERS,
            options if options is not None else ConversionOptions(),
            self.registry
        )

    def level_stats(self, identifier: str) -> Dict[str, Any]:
        """Tile counts of the recognized layers of a level."""
        info = self.level_info(identifier)
        layers = self.select_layers(identifier)
        layer_stats = {
            layer.identifier: {
                "tileCount": len(layer.raw_tiles),
                "opacity": layer.opacity,
                "visible": layer.visible,
            }
            for layer in layers
        }
        return {
            "identifier": info.identifier,
            "dimensions": f"{info.px_wid}x{info.px_hei}px",
            "gridDimensions": f"{info.grid_wid}x{info.grid_hei}",
            "totalTiles": sum(s["tileCount"] for s in layer_stats.values()),
            "layerCount": len(layers),
            "layers": layer_stats,
        }
