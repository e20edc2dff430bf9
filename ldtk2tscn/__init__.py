"""
ldtk2tscn - LDtk to Godot TSCN Converter

Converts LDtk project levels into Godot 4 scenes, writing one TileMap node
per baked tile layer with Godot-encoded tile_data triplets.
"""

__version__ = "0.1.0"

from .converter import LdtkConverter
from .errors import (
    Ldtk2TscnError,
    InputFileError,
    LdtkFormatError,
    LevelNotFoundError,
    NoLayersError,
    UnsupportedTilesetError,
    ConversionError,
)
from .level_extractor import LdtkProject, load_project
from .models import ConversionOptions, ConversionResult
from .tileset_mapper import TilesetRegistry
