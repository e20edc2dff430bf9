"""
Scene assembler - builds Godot 4 TSCN text from transcoded layers.

Output layout:

    [gd_scene load_steps=N format=3 uid="uid://b..."]

    [ext_resource type="Texture2D" ... id="1_texture"]
    [ext_resource type="TileSet" ... id="1_tileset"]

    [node name="Level" type="Node2D"]
    [node name="Collisions" type="TileMap" parent="."]
    ...
"""

import random
import re
from typing import List, Optional
from .constants import (
    DEFAULT_MODULATE,
    ESTIMATE_HEADER_BYTES,
    ESTIMATE_LAYER_BYTES,
    ESTIMATE_TILE_BYTES
)
from .errors import ConversionError, NoLayersError
from .logging_config import get_logger
from .models import (
    ConversionResult,
    LayerPreview,
    LevelInfo,
    ScenePreview,
    TilesetProfile,
    TranscodedLayer
)
from .tileset_mapper import TilesetRegistry
from .utils import format_file_size, generate_uid, sanitize_filename

logger = get_logger('scene_assembler')


def sanitize_node_name(name: str) -> str:
    """Restrict a node name to [A-Za-z0-9_] and make it start with a letter or '_'."""
    sanitized = re.sub(r'[^a-zA-Z0-9_]', '_', name)
    if not re.match(r'^[a-zA-Z_]', sanitized):
        sanitized = '_' + sanitized
    return sanitized


def generate_filename(level_identifier: str) -> str:
    """Output filename for a level, e.g. 'Level 1' -> 'Level_1.tscn'."""
    return f"{sanitize_filename(level_identifier)}.tscn"


def estimate_file_size(total_tiles: int, layer_count: int) -> int:
    """Rough output size in bytes (header + per-layer + per-tile cost)."""
    return (
        ESTIMATE_HEADER_BYTES
        + ESTIMATE_LAYER_BYTES * layer_count
        + ESTIMATE_TILE_BYTES * total_tiles
    )


class SceneAssembler:
    """Builds TSCN scene text."""

    def __init__(self, registry: TilesetRegistry, rng: Optional[random.Random] = None):
        """
        Initialize SceneAssembler.

        Args:
            registry: Shared tileset registry (resource paths)
            rng: Random source for resource uids; pass a seeded instance for
                reproducible output
        """
        self.registry = registry
        self.rng = rng

    def _uid(self, prefix: str) -> str:
        return f"uid://{prefix}{generate_uid(self.rng)}"

    @staticmethod
    def distinct_tilesets(layers: List[TranscodedLayer]) -> List[TilesetProfile]:
        """Tilesets in first-use order, each listed once."""
        seen = set()
        tilesets = []
        for layer in layers:
            if layer.tileset.identifier in seen:
                continue
            seen.add(layer.tileset.identifier)
            tilesets.append(layer.tileset)
        return tilesets

    def generate_header(self, layers: List[TranscodedLayer]) -> str:
        # One texture and one tileset resource per tileset, plus the scene itself
        load_steps = len(self.distinct_tilesets(layers)) * 2 + 1
        return f'[gd_scene load_steps={load_steps} format=3 uid="{self._uid("b")}"]'

    def generate_external_resources(self, layers: List[TranscodedLayer]) -> List[str]:
        """Texture and TileSet ext_resource lines, numbered from 1 per tileset."""
        resources = []
        for resource_id, tileset in enumerate(self.distinct_tilesets(layers), start=1):
            tileset_path, texture_path = self.registry.resource_paths(tileset.identifier)
            resources.append(
                f'[ext_resource type="Texture2D" uid="{self._uid("b")}" '
                f'path="{texture_path}" id="{resource_id}_texture"]'
            )
            resources.append(
                f'[ext_resource type="TileSet" uid="{self._uid("d")}" '
                f'path="{tileset_path}" id="{resource_id}_tileset"]'
            )
        return resources

    def generate_root_node(self, level: LevelInfo) -> str:
        return f'[node name="{sanitize_node_name(level.identifier)}" type="Node2D"]'

    def generate_tilemap_node(self, layer: TranscodedLayer) -> str:
        """
        Build the TileMap node block for one layer.

        Args:
            layer: Transcoded layer

        Returns:
            Node block; tile_data is omitted when the layer has no tiles
        """
        config = layer.config
        node_name = sanitize_node_name(config.name or layer.identifier)

        lines = [
            f'[node name="{node_name}" type="TileMap" parent="."]',
            'texture_filter = 1',
            'tile_set = ExtResource("1_tileset")',  # Every layer uses the first tileset
            'format = 2'
        ]

        if config.modulate and config.modulate != DEFAULT_MODULATE:
            lines.append(f'modulate = {config.modulate}')

        if config.z_index != 0:
            lines.append(f'z_index = {config.z_index}')

        tile_data = layer.flat_tile_data()
        if tile_data:
            values = ', '.join(str(value) for value in tile_data)
            lines.append(f'layer_0/tile_data = PackedInt32Array({values})')

        return '\n'.join(lines)

    def assemble(self, level: LevelInfo, layers: List[TranscodedLayer]) -> str:
        """
        Build the complete scene text.

        Layers are written in the order given; sort them beforehand for a
        particular stacking order.

        Args:
            level: Level metadata (root node name)
            layers: Transcoded layers

        Returns:
            TSCN document text

        Raises:
            NoLayersError: If there is nothing to write
        """
        if not layers:
            raise NoLayersError("No layers to convert")

        logger.info(f"Generating TSCN for level: {level.identifier}")

        parts = [
            self.generate_header(layers),
            '',
            *self.generate_external_resources(layers),
            '',
            self.generate_root_node(level),
            *(self.generate_tilemap_node(layer) for layer in layers)
        ]
        return '\n'.join(parts)

    @staticmethod
    def validate(result: ConversionResult) -> None:
        """
        Check a conversion result before assembling it.

        Raises:
            ConversionError: Listing every problem found
        """
        errors = []
        if result.level is None:
            errors.append('Missing level data')
        if not result.layers:
            errors.append('No layers to convert')
        for layer in result.layers:
            if layer.tileset is None:
                errors.append(f'Layer {layer.identifier} missing tileset data')
            if layer.triplets is None:
                errors.append(f'Layer {layer.identifier} missing tile data')
        if errors:
            raise ConversionError(errors)

    @staticmethod
    def generate_preview(result: ConversionResult) -> ScenePreview:
        """Summarize a conversion: tile counts and estimated output size."""
        level = result.level
        layer_previews = [
            LayerPreview(
                name=layer.identifier,
                tile_count=layer.tile_count,
                opacity=layer.layer.opacity,
                visible=layer.layer.visible,
                tileset=layer.tileset.identifier
            )
            for layer in result.layers
        ]
        total_tiles = sum(p.tile_count for p in layer_previews)
        estimated = estimate_file_size(total_tiles, len(layer_previews))

        return ScenePreview(
            level_name=level.identifier,
            dimensions=(
                f"{level.px_wid}x{level.px_hei}px "
                f"({level.grid_wid}x{level.grid_hei} tiles)"
            ),
            total_tiles=total_tiles,
            layer_count=len(layer_previews),
            layers=layer_previews,
            estimated_bytes=estimated,
            estimated_file_size=format_file_size(estimated)
        )
