"""
Layer transcoder - turns LDtk grid tiles into Godot tile_data triplets.
"""

from typing import Any, Dict, List, Mapping, Optional
from .codec import pixel_to_grid, encode_position, extract_flip_flags, encode_alternative
from .diagnostics import Diagnostics, WarningCode
from .errors import UnsupportedTilesetError
from .logging_config import get_logger
from .models import GridTile, Layer, TileDataTriplet, TilesetProfile, TranscodedLayer
from .tileset_mapper import TilesetMapper, resolve_atlas_cell, encode_source, alternative_index

logger = get_logger('layer_transcoder')

REQUIRED_TILE_FIELDS = ("px", "src", "f")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_pair(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) >= 2
        and _is_int(value[0])
        and _is_int(value[1])
    )


def parse_grid_tile(record: Dict[str, Any]) -> Optional[GridTile]:
    """
    Validate one raw LDtk ``gridTiles`` entry.

    Args:
        record: Raw tile dict with ``px``, ``src`` and ``f`` (``t`` and ``a`` optional)

    Returns:
        GridTile, or None if a required field is missing or malformed
    """
    if not isinstance(record, dict):
        return None
    if any(record.get(name) is None for name in REQUIRED_TILE_FIELDS):
        return None
    px, src, flip = record["px"], record["src"], record["f"]
    if not (_is_pair(px) and _is_pair(src) and _is_int(flip)):
        return None

    tile_id = record.get("t")
    alpha = record.get("a", 1)
    return GridTile(
        pixel_position=(px[0], px[1]),
        source_pixel=(src[0], src[1]),
        flip_mask=flip,
        tile_id=tile_id if _is_int(tile_id) else None,
        alpha=float(alpha) if isinstance(alpha, (int, float)) else 1.0
    )


def transcode_layer(
    layer: Layer,
    tileset: TilesetProfile,
    mapper: TilesetMapper,
    diagnostics: Diagnostics
) -> List[TileDataTriplet]:
    """
    Encode every valid tile of a layer.

    Malformed records are skipped with a warning. The result is sorted by
    (grid y, grid x); Godot treats tile_data as a sparse map, so the order only
    matters for reproducible output.

    Args:
        layer: Layer with raw LDtk tiles
        tileset: Resolved tileset profile
        mapper: Atlas mapper (rotation policy, bounds checks)
        diagnostics: Warning collector

    Returns:
        Sorted list of triplets, one per valid tile
    """
    triplets: List[TileDataTriplet] = []

    for index, record in enumerate(layer.raw_tiles):
        tile = parse_grid_tile(record)
        if tile is None:
            diagnostics.warn(
                WarningCode.MALFORMED_TILE,
                f"Invalid tile data in {layer.identifier} at index {index}: {record!r}",
                layer=layer.identifier,
                index=index
            )
            continue

        grid_x, grid_y = pixel_to_grid(tile.pixel_position, layer.grid_size)
        atlas_cell = resolve_atlas_cell(tile.source_pixel, tileset)
        atlas_cell, flags = mapper.resolve_flipped_tile(
            atlas_cell,
            extract_flip_flags(tile.flip_mask),
            diagnostics,
            layer=layer.identifier,
            grid_cell=(grid_x, grid_y)
        )
        mapper.check_atlas_bounds(atlas_cell, tileset, diagnostics, layer=layer.identifier)

        atlas_x, atlas_y = atlas_cell
        triplets.append(TileDataTriplet(
            position=encode_position(grid_x, grid_y),
            source=encode_source(atlas_x),
            alternative=encode_alternative(
                alternative_index(atlas_y, tileset), flags.flip_h, flags.flip_v
            ),
            grid_x=grid_x,
            grid_y=grid_y
        ))

    # Stable sort: tiles stacked on the same cell keep their LDtk order
    triplets.sort(key=lambda t: t.sort_key)
    logger.debug(f"Transcoded {len(triplets)}/{len(layer.raw_tiles)} tiles in {layer.identifier}")
    return triplets


class LayerTranscoder:
    """Transcodes the selected layers of a level, dropping the ones it cannot map."""

    def __init__(self, mapper: TilesetMapper):
        """
        Initialize LayerTranscoder.

        Args:
            mapper: TilesetMapper shared with the rest of the pipeline
        """
        self.mapper = mapper

    def resolve_tileset(
        self,
        layer: Layer,
        ldtk_tilesets: Mapping[int, Dict[str, Any]],
        diagnostics: Diagnostics
    ) -> Optional[TilesetProfile]:
        """
        Find the Godot tileset profile for a layer.

        Args:
            layer: Layer to resolve
            ldtk_tilesets: LDtk tileset definitions keyed by uid
            diagnostics: Warning collector

        Returns:
            TilesetProfile, or None if the layer must be skipped
        """
        definition = ldtk_tilesets.get(layer.tileset_uid) if layer.tileset_uid is not None else None
        if definition is None:
            diagnostics.warn(
                WarningCode.TILESET_NOT_FOUND,
                f"Tileset not found for layer {layer.identifier} (UID: {layer.tileset_uid})",
                layer=layer.identifier,
                tileset_uid=layer.tileset_uid
            )
            return None

        identifier = definition.get("identifier", "")
        try:
            return self.mapper.validate_tileset(identifier)
        except UnsupportedTilesetError as e:
            diagnostics.warn(
                WarningCode.UNSUPPORTED_TILESET,
                f"Skipping layer {layer.identifier}: {e}",
                layer=layer.identifier,
                tileset=e.tileset_name
            )
            return None

    def transcode(
        self,
        layers: List[Layer],
        ldtk_tilesets: Mapping[int, Dict[str, Any]],
        diagnostics: Diagnostics
    ) -> List[TranscodedLayer]:
        """
        Transcode layers in the order given.

        Args:
            layers: Layers selected by the level extractor
            ldtk_tilesets: LDtk tileset definitions keyed by uid
            diagnostics: Warning collector

        Returns:
            Transcoded layers; unmappable layers are left out
        """
        result: List[TranscodedLayer] = []
        for layer in layers:
            tileset = self.resolve_tileset(layer, ldtk_tilesets, diagnostics)
            if tileset is None:
                continue
            triplets = transcode_layer(layer, tileset, self.mapper, diagnostics)
            result.append(TranscodedLayer(layer=layer, tileset=tileset, triplets=triplets))
            logger.info(f"Layer {layer.identifier}: {len(triplets)} tiles")
        return result
