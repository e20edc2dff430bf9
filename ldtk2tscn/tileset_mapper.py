"""
Tileset atlas mapping - LDtk source pixels to Godot atlas cells and resources.

The registry is built once at start-up and passed by reference to the
transcoder and the scene assembler; nothing in it is mutated afterwards.
"""

from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple
from PIL import Image
from .codec import FlipFlags, NO_FLIP
from .constants import (
    SOURCE_COLUMN_STRIDE,
    SUPPORTED_TILESET,
    SUNNY_LAND_GEOMETRY,
    RESOURCE_PATHS,
    DEFAULT_TILESET_PATH,
    DEFAULT_TEXTURE_PATH,
    ROTATED_VARIANTS,
    LAYER_CONFIGS
)
from .diagnostics import Diagnostics, WarningCode
from .errors import UnsupportedTilesetError
from .logging_config import get_logger
from .models import LayerConfig, TilesetProfile

logger = get_logger('tileset_mapper')

RotationKey = Tuple[int, int, bool, bool]


def resolve_atlas_cell(source_pixel: Sequence[int], tileset: TilesetProfile) -> Tuple[int, int]:
    """Atlas cell (column, row) of an LDtk ``src`` pixel coordinate."""
    size = tileset.tile_grid_size
    return (source_pixel[0] // size, source_pixel[1] // size)


def encode_source(atlas_x: int) -> int:
    """
    Encode the atlas column into Godot's source integer.

    This target profile packs only the column here; the row travels in the
    low bits of the alternative value.
    """
    return atlas_x * SOURCE_COLUMN_STRIDE


def alternative_index(atlas_y: int, tileset: TilesetProfile) -> int:
    """
    Alternative index carried in the low 16 bits of the alternative value.

    The consuming TileSet keys its per-row alternatives by the row's pixel
    offset, so row 1 of a 16px grid is alternative 16.
    """
    return atlas_y * tileset.tile_grid_size


def measure_texture(texture_path: Path, tile_grid_size: int) -> Tuple[int, int, int, int]:
    """
    Read a tileset image and derive its grid geometry.

    Args:
        texture_path: Path to the tileset PNG
        tile_grid_size: Cell size in pixels

    Returns:
        Tuple of (pixel_width, pixel_height, columns, rows); partial cells are not counted
    """
    with Image.open(texture_path) as img:
        width, height = img.size
    return (width, height, width // tile_grid_size, height // tile_grid_size)


class TilesetRegistry:
    """Immutable lookup tables for tilesets, resources and layers."""

    def __init__(
        self,
        profiles: Sequence[TilesetProfile],
        supported: Sequence[str] = (SUPPORTED_TILESET,),
        resource_paths: Optional[Mapping[str, Tuple[str, str]]] = None,
        layer_configs: Optional[Mapping[str, LayerConfig]] = None,
        rotated_variants: Optional[Mapping[RotationKey, Tuple[int, int]]] = None
    ):
        self._by_identifier: Mapping[str, TilesetProfile] = MappingProxyType(
            {p.identifier: p for p in profiles}
        )
        self._by_uid: Mapping[int, TilesetProfile] = MappingProxyType(
            {p.uid: p for p in profiles}
        )
        self.supported: Tuple[str, ...] = tuple(supported)
        self._resource_paths = MappingProxyType(dict(resource_paths or RESOURCE_PATHS))
        if layer_configs is None:
            layer_configs = {
                identifier: LayerConfig(name, z_index, modulate)
                for identifier, (name, z_index, modulate) in LAYER_CONFIGS.items()
            }
        self._layer_configs = MappingProxyType(dict(layer_configs))
        self._rotated_variants = MappingProxyType(dict(
            ROTATED_VARIANTS if rotated_variants is None else rotated_variants
        ))

    @classmethod
    def default(cls) -> "TilesetRegistry":
        """Registry for the SunnyLand tileset with its known geometry."""
        return cls([cls._sunny_land_profile()])

    @classmethod
    def from_texture(cls, texture_path: Path) -> "TilesetRegistry":
        """
        Registry whose SunnyLand geometry is measured from the actual texture.

        Args:
            texture_path: Path to the tileset PNG on disk
        """
        base = cls._sunny_land_profile()
        width, height, columns, rows = measure_texture(Path(texture_path), base.tile_grid_size)
        if (columns, rows) != (base.columns, base.rows):
            logger.info(
                f"Texture {texture_path} is {columns}x{rows} cells, "
                f"expected {base.columns}x{base.rows}"
            )
        profile = TilesetProfile(
            identifier=base.identifier,
            uid=base.uid,
            tile_grid_size=base.tile_grid_size,
            columns=columns,
            rows=rows,
            pixel_width=width,
            pixel_height=height,
            tileset_path=base.tileset_path,
            texture_path=base.texture_path
        )
        return cls([profile])

    @staticmethod
    def _sunny_land_profile() -> TilesetProfile:
        tileset_path, texture_path = RESOURCE_PATHS[SUPPORTED_TILESET]
        return TilesetProfile(
            tileset_path=tileset_path,
            texture_path=texture_path,
            **SUNNY_LAND_GEOMETRY
        )

    def get(self, identifier: str) -> Optional[TilesetProfile]:
        return self._by_identifier.get(identifier)

    def get_by_uid(self, uid: Optional[int]) -> Optional[TilesetProfile]:
        if uid is None:
            return None
        return self._by_uid.get(uid)

    def is_supported(self, identifier: str) -> bool:
        return identifier in self.supported

    def resource_paths(self, identifier: str) -> Tuple[str, str]:
        """(tileset path, texture path); unknown identifiers get the placeholder pair."""
        return self._resource_paths.get(identifier, (DEFAULT_TILESET_PATH, DEFAULT_TEXTURE_PATH))

    def layer_config(self, identifier: str) -> LayerConfig:
        """Node name, z index and modulate for a layer identifier."""
        config = self._layer_configs.get(identifier)
        if config is None:
            return LayerConfig(name=identifier)
        return config

    def rotated_variant(self, key: RotationKey) -> Optional[Tuple[int, int]]:
        return self._rotated_variants.get(key)


class TilesetMapper:
    """Maps LDtk tileset references onto the registry's Godot tilesets."""

    def __init__(self, registry: TilesetRegistry, flip_transforms: bool = True):
        """
        Initialize TilesetMapper.

        Args:
            registry: Shared tileset registry
            flip_transforms: Whether the target TileSet accepts flip bits in the
                alternative value. When False, flipped tiles need a pre-rotated
                atlas variant or are emitted unrotated.
        """
        self.registry = registry
        self.flip_transforms = flip_transforms

    def validate_tileset(self, identifier: str) -> TilesetProfile:
        """
        Check that a tileset can be mapped.

        Args:
            identifier: LDtk tileset identifier

        Returns:
            The matching profile

        Raises:
            UnsupportedTilesetError: If the tileset is not the supported one
        """
        profile = self.registry.get(identifier)
        if profile is None or not self.registry.is_supported(identifier):
            raise UnsupportedTilesetError(identifier, self.registry.supported)
        return profile

    def resource_paths(self, identifier: str) -> Tuple[str, str]:
        return self.registry.resource_paths(identifier)

    def resolve_flipped_tile(
        self,
        atlas_cell: Tuple[int, int],
        flags: FlipFlags,
        diagnostics: Diagnostics,
        layer: str = "",
        grid_cell: Optional[Tuple[int, int]] = None
    ) -> Tuple[Tuple[int, int], FlipFlags]:
        """
        Decide how a (possibly flipped) tile is represented.

        Args:
            atlas_cell: Atlas (column, row) of the tile
            flags: Requested flips
            diagnostics: Collector for the degraded-fidelity warning
            layer: Layer identifier, for the warning context
            grid_cell: Grid cell of the tile, for the warning context

        Returns:
            Tuple of (atlas cell to emit, flips to encode)
        """
        if not flags.any or self.flip_transforms:
            return atlas_cell, flags

        atlas_x, atlas_y = atlas_cell
        variant = self.registry.rotated_variant((atlas_x, atlas_y, flags.flip_h, flags.flip_v))
        if variant is not None:
            return variant, NO_FLIP

        diagnostics.warn(
            WarningCode.ROTATION_UNSUPPORTED,
            f"Tile at atlas({atlas_x},{atlas_y}) with flip flags "
            f"(H:{flags.flip_h}, V:{flags.flip_v}) cannot be rotated. Using unrotated version.",
            layer=layer,
            atlas=atlas_cell,
            cell=grid_cell
        )
        return atlas_cell, NO_FLIP

    def check_atlas_bounds(
        self,
        atlas_cell: Tuple[int, int],
        tileset: TilesetProfile,
        diagnostics: Diagnostics,
        layer: str = ""
    ) -> bool:
        """Record a warning when an atlas cell lies outside the tileset grid."""
        atlas_x, atlas_y = atlas_cell
        if 0 <= atlas_x < tileset.columns and 0 <= atlas_y < tileset.rows:
            return True
        diagnostics.warn(
            WarningCode.ATLAS_OUT_OF_BOUNDS,
            f"Atlas cell ({atlas_x},{atlas_y}) is outside {tileset.identifier} "
            f"({tileset.columns}x{tileset.rows})",
            layer=layer,
            atlas=atlas_cell
        )
        return False

    def layer_config(self, identifier: str) -> LayerConfig:
        return self.registry.layer_config(identifier)
