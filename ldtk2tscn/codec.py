"""
Coordinate and bit-field encoding between LDtk and Godot tile data.

Godot stores a TileMap layer as a flat PackedInt32Array of triplets:

- position: cell y in the high 16 bits, cell x in the low 16 bits
- source: atlas column in the high 16 bits
- alternative: bits 0-15 alternative index (atlas row offset in this profile),
  bit 28 flip H, bit 29 flip V, bit 30 transpose

LDtk stores pixel positions and an ``f`` bitmask (bit 0 flip X, bit 1 flip Y).
"""

from typing import NamedTuple, Sequence, Tuple
from .constants import (
    DEFAULT_GRID_SIZE,
    POSITION_ROW_STRIDE,
    ALTERNATIVE_ID_MASK,
    TRANSFORM_FLIP_H,
    TRANSFORM_FLIP_V,
    TRANSFORM_TRANSPOSE,
    LDTK_FLIP_X,
    LDTK_FLIP_Y
)


class FlipFlags(NamedTuple):
    """Flip state of a tile. LDtk never sets transpose."""
    flip_h: bool
    flip_v: bool

    @property
    def any(self) -> bool:
        return self.flip_h or self.flip_v


class AlternativeFields(NamedTuple):
    """Decoded Godot alternative value."""
    alt_id: int
    flip_h: bool
    flip_v: bool
    transpose: bool


NO_FLIP = FlipFlags(False, False)


def pixel_to_grid(px: Sequence[int], grid_size: int = DEFAULT_GRID_SIZE) -> Tuple[int, int]:
    """Convert a pixel coordinate to a grid cell (floors toward negative infinity)."""
    return (px[0] // grid_size, px[1] // grid_size)


def encode_position(grid_x: int, grid_y: int) -> int:
    """
    Pack a grid cell into Godot's position integer.

    No overflow check is done; callers must keep grid_x below 65536 and
    grid_y small enough for the result to fit in a signed int32.
    """
    return grid_y * POSITION_ROW_STRIDE + grid_x


def decode_position(position: int) -> Tuple[int, int]:
    """Inverse of :func:`encode_position` for non-negative cells."""
    return (position % POSITION_ROW_STRIDE, position // POSITION_ROW_STRIDE)


def extract_flip_flags(mask: int) -> FlipFlags:
    """Split an LDtk ``f`` value into horizontal/vertical flip flags."""
    return FlipFlags(
        flip_h=(mask & LDTK_FLIP_X) != 0,
        flip_v=(mask & LDTK_FLIP_Y) != 0
    )


def encode_alternative(atlas_row: int, flip_h: bool = False, flip_v: bool = False) -> int:
    """
    Build a Godot alternative value.

    Args:
        atlas_row: Alternative index stored in the low 16 bits (negative values clamp to 0)
        flip_h: Set the horizontal flip bit (28)
        flip_v: Set the vertical flip bit (29)

    Returns:
        Encoded alternative; the transpose bit (30) is never set
    """
    value = max(0, atlas_row) & ALTERNATIVE_ID_MASK
    if flip_h:
        value |= TRANSFORM_FLIP_H
    if flip_v:
        value |= TRANSFORM_FLIP_V
    return value


def decode_alternative(value: int) -> AlternativeFields:
    """Split an alternative value into its index and transform bits."""
    return AlternativeFields(
        alt_id=value & ALTERNATIVE_ID_MASK,
        flip_h=(value & TRANSFORM_FLIP_H) != 0,
        flip_v=(value & TRANSFORM_FLIP_V) != 0,
        transpose=(value & TRANSFORM_TRANSPOSE) != 0
    )
