"""
Constants for the LDtk and Godot TSCN formats.

This module contains all magic numbers and fixed tables used throughout the codebase
to make the code more maintainable and self-documenting.
"""

# Grid constants
DEFAULT_GRID_SIZE = 16  # 16x16 pixels

# Godot packs (x, y) cell coordinates into one int32: y in the high half, x in the low half
POSITION_ROW_STRIDE = 65536
SOURCE_COLUMN_STRIDE = 65536

# Bit masks for the Godot alternative tile value
ALTERNATIVE_ID_MASK = 0x0000FFFF  # Bits 0-15: Alternative tile index
TRANSFORM_FLIP_H = 1 << 28
TRANSFORM_FLIP_V = 1 << 29
TRANSFORM_TRANSPOSE = 1 << 30

# LDtk flip flags ("f" field of a grid tile)
LDTK_FLIP_X = 0x01
LDTK_FLIP_Y = 0x02

# =============================================================================
# Supported tileset
# =============================================================================

SUPPORTED_TILESET = "SunnyLand_by_Ansimuz"

# Tilesets that may appear in a project without being reported as unsupported
IGNORED_TILESETS = ("Internal_Icons",)

SUNNY_LAND_GEOMETRY = {
    "identifier": SUPPORTED_TILESET,
    "uid": 2,
    "tile_grid_size": 16,
    "pixel_width": 368,
    "pixel_height": 336,
    "columns": 23,  # 368 / 16
    "rows": 21,  # 336 / 16
}

# Tileset identifier -> (tileset resource path, texture resource path)
RESOURCE_PATHS: dict[str, tuple[str, str]] = {
    "SunnyLand_by_Ansimuz": (
        "res://Tiles/SunnyLandTileset.tres",
        "res://Tiles/SunnyLand_by_Ansimuz-extended.png",
    ),
    "ClassicAutoTiles": (
        "res://Tiles/ClassicAutoTiles.tres",
        "res://Tiles/ClassicAutoTiles.png",
    ),
}
DEFAULT_TILESET_PATH = "res://Tiles/TilesDefault.tres"
DEFAULT_TEXTURE_PATH = "res://Tiles/Green.png"

# (atlas_x, atlas_y, flip_h, flip_v) -> (atlas_x, atlas_y) of a pre-rotated copy in the tileset.
# SunnyLand ships no pre-rotated variants.
ROTATED_VARIANTS: dict[tuple[int, int, bool, bool], tuple[int, int]] = {}

# =============================================================================
# Layers
# =============================================================================

COLLISIONS_LAYER = "Collisions_baked"
SHADOWS_LAYER = "Wall_shadows_baked"
BACKGROUND_LAYER = "Bg_textures_baked"

RECOGNIZED_LAYERS = (COLLISIONS_LAYER, SHADOWS_LAYER, BACKGROUND_LAYER)

DEFAULT_MODULATE = "Color(1, 1, 1, 1)"

# Layer identifier -> (node name, z index, modulate)
LAYER_CONFIGS: dict[str, tuple[str, int, str]] = {
    BACKGROUND_LAYER: ("Background", 0, DEFAULT_MODULATE),
    SHADOWS_LAYER: ("WallShadows", 1, "Color(1, 1, 1, 0.17)"),  # Semi-transparent
    COLLISIONS_LAYER: ("Collisions", 2, DEFAULT_MODULATE),
}

# =============================================================================
# Input files
# =============================================================================

LDTK_FILE_TYPE = "LDtk Project JSON"
SUPPORTED_EXTENSIONS = (".ldtk", ".json")
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50MB

# =============================================================================
# Output size estimate (bytes)
# =============================================================================

ESTIMATE_HEADER_BYTES = 200  # Header and external resources
ESTIMATE_LAYER_BYTES = 150  # Each TileMap node
ESTIMATE_TILE_BYTES = 15  # Each tile triplet in text form
