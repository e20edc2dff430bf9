"""
Data model for a single LDtk -> TSCN conversion.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from .constants import DEFAULT_GRID_SIZE, DEFAULT_MODULATE
from .diagnostics import ConversionWarning


@dataclass(frozen=True)
class ConversionOptions:
    """Which recognized layers to include. Every layer is included unless switched off."""
    include_collisions: bool = True
    include_shadows: bool = True
    include_background: bool = True


@dataclass(frozen=True)
class TilesetProfile:
    """Fixed geometry and resource paths of a tileset."""
    identifier: str
    uid: int
    tile_grid_size: int
    columns: int
    rows: int
    pixel_width: int
    pixel_height: int
    tileset_path: str
    texture_path: str


@dataclass(frozen=True)
class LayerConfig:
    """Presentation of a layer in the scene."""
    name: str
    z_index: int = 0
    modulate: str = DEFAULT_MODULATE


@dataclass(frozen=True)
class GridTile:
    """One validated LDtk grid tile."""
    pixel_position: Tuple[int, int]
    source_pixel: Tuple[int, int]
    flip_mask: int
    tile_id: Optional[int] = None
    alpha: float = 1.0


@dataclass
class Layer:
    """A recognized LDtk tile layer, tiles still in raw LDtk form."""
    identifier: str
    tileset_uid: Optional[int]
    opacity: float
    visible: bool
    config: LayerConfig
    grid_size: int = DEFAULT_GRID_SIZE
    layer_type: str = "Tiles"
    raw_tiles: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class TileDataTriplet:
    """One placed tile in Godot's tile_data encoding."""
    position: int
    source: int
    alternative: int
    grid_x: int
    grid_y: int

    def as_ints(self) -> Tuple[int, int, int]:
        return (self.position, self.source, self.alternative)

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.grid_y, self.grid_x)


@dataclass
class TranscodedLayer:
    """A layer after transcoding, ready for scene assembly."""
    layer: Layer
    tileset: TilesetProfile
    triplets: List[TileDataTriplet] = field(default_factory=list)

    @property
    def identifier(self) -> str:
        return self.layer.identifier

    @property
    def config(self) -> LayerConfig:
        return self.layer.config

    @property
    def tile_count(self) -> int:
        return len(self.triplets)

    def flat_tile_data(self) -> List[int]:
        """Triplets flattened in emission order: p1, s1, a1, p2, s2, a2, ..."""
        data: List[int] = []
        for triplet in self.triplets:
            data.extend(triplet.as_ints())
        return data


@dataclass
class LevelInfo:
    """Level metadata carried into the scene."""
    identifier: str
    px_wid: int = 0
    px_hei: int = 0
    iid: Optional[str] = None
    uid: Optional[int] = None
    world_x: int = 0
    world_y: int = 0

    @property
    def grid_wid(self) -> int:
        return math.ceil(self.px_wid / DEFAULT_GRID_SIZE)

    @property
    def grid_hei(self) -> int:
        return math.ceil(self.px_hei / DEFAULT_GRID_SIZE)


@dataclass
class ConversionResult:
    """Everything produced by one conversion request."""
    level: LevelInfo
    layers: List[TranscodedLayer] = field(default_factory=list)
    warnings: List[ConversionWarning] = field(default_factory=list)
    scene_text: str = ""
    filename: str = ""

    @property
    def total_tiles(self) -> int:
        return sum(layer.tile_count for layer in self.layers)


@dataclass
class LayerPreview:
    name: str
    tile_count: int
    opacity: float
    visible: bool
    tileset: str


@dataclass
class ScenePreview:
    """Human-readable summary of a conversion."""
    level_name: str
    dimensions: str
    total_tiles: int
    layer_count: int
    layers: List[LayerPreview] = field(default_factory=list)
    estimated_bytes: int = 0
    estimated_file_size: str = ""
