from ldtk_builders import OTHER_TILESET_DEF, SUNNY_LAND_DEF, tile

from ldtk2tscn.codec import decode_position
from ldtk2tscn.diagnostics import WarningCode
from ldtk2tscn.layer_transcoder import LayerTranscoder, parse_grid_tile, transcode_layer
from ldtk2tscn.models import Layer

FLIP_BITS = (1 << 28) | (1 << 29)

TILESETS = {2: SUNNY_LAND_DEF, 3: OTHER_TILESET_DEF}


def make_layer(registry, raw_tiles, identifier="Collisions_baked", tileset_uid=2):
    return Layer(
        identifier=identifier,
        tileset_uid=tileset_uid,
        opacity=1.0,
        visible=True,
        config=registry.layer_config(identifier),
        raw_tiles=raw_tiles,
    )


def test_parse_grid_tile():
    parsed = parse_grid_tile({"px": [16, 32], "src": [48, 0], "f": 2, "t": 3, "a": 0.5})
    assert parsed.pixel_position == (16, 32)
    assert parsed.source_pixel == (48, 0)
    assert parsed.flip_mask == 2
    assert parsed.tile_id == 3
    assert parsed.alpha == 0.5


def test_parse_grid_tile_rejects_malformed():
    assert parse_grid_tile({"src": [0, 0], "f": 0}) is None
    assert parse_grid_tile({"px": [0, 0], "src": [0, 0]}) is None
    assert parse_grid_tile({"px": [0], "src": [0, 0], "f": 0}) is None
    assert parse_grid_tile({"px": ["0", 0], "src": [0, 0], "f": 0}) is None
    assert parse_grid_tile({"px": [0, 0], "src": [0, 0], "f": None}) is None
    assert parse_grid_tile("not a tile") is None


def test_tiles_sorted_y_major(registry, sunny_land, mapper, diagnostics):
    layer = make_layer(registry, [
        tile((0, 16), (0, 0)),
        tile((16, 0), (0, 0)),
        tile((0, 0), (0, 0)),
    ])
    triplets = transcode_layer(layer, sunny_land, mapper, diagnostics)
    assert [decode_position(t.position) for t in triplets] == [(0, 0), (1, 0), (0, 1)]
    assert len(diagnostics) == 0


def test_one_triplet_per_tile(registry, sunny_land, mapper, diagnostics):
    layer = make_layer(registry, [tile((x * 16, 0), (16, 16)) for x in range(5)])
    triplets = transcode_layer(layer, sunny_land, mapper, diagnostics)
    flat = [value for t in triplets for value in t.as_ints()]
    assert len(flat) == 15


def test_source_and_alternative_encoding(registry, sunny_land, mapper, diagnostics):
    layer = make_layer(registry, [tile((17, 33), (32, 32))])
    [triplet] = transcode_layer(layer, sunny_land, mapper, diagnostics)
    assert (triplet.grid_x, triplet.grid_y) == (1, 2)
    assert triplet.position == 2 * 65536 + 1
    assert triplet.source == 131072
    assert triplet.alternative == 32


def test_both_flips_set_both_bits(registry, sunny_land, mapper, diagnostics):
    flipped = make_layer(registry, [tile((0, 0), (32, 48), f=3)])
    plain = make_layer(registry, [tile((0, 0), (32, 48), f=0)])
    [a] = transcode_layer(flipped, sunny_land, mapper, diagnostics)
    [b] = transcode_layer(plain, sunny_land, mapper, diagnostics)
    assert a.alternative & (1 << 28)
    assert a.alternative & (1 << 29)
    assert a.alternative ^ b.alternative == FLIP_BITS
    assert a.source == b.source


def test_malformed_tiles_skipped(registry, sunny_land, mapper, diagnostics):
    layer = make_layer(registry, [
        tile((0, 0), (0, 0)),
        {"px": [16, 0], "src": [0, 0]},
        {"src": [0, 0], "f": 0},
        tile((32, 0), (0, 0)),
    ])
    triplets = transcode_layer(layer, sunny_land, mapper, diagnostics)
    assert len(triplets) == 2
    warnings = diagnostics.by_code(WarningCode.MALFORMED_TILE)
    assert [w.context["index"] for w in warnings] == [1, 2]


def test_stacked_tiles_keep_input_order(registry, sunny_land, mapper, diagnostics):
    layer = make_layer(registry, [tile((0, 0), (16, 0)), tile((0, 0), (32, 0))])
    triplets = transcode_layer(layer, sunny_land, mapper, diagnostics)
    assert [t.source for t in triplets] == [65536, 131072]


def test_transcoder_drops_unsupported_layer(registry, mapper, diagnostics):
    layers = [
        make_layer(registry, [tile((0, 0), (0, 0))], "Collisions_baked", 2),
        make_layer(registry, [tile((0, 0), (0, 0))], "Wall_shadows_baked", 3),
        make_layer(registry, [tile((0, 0), (0, 0))], "Bg_textures_baked", 2),
    ]
    result = LayerTranscoder(mapper).transcode(layers, TILESETS, diagnostics)
    assert [t.identifier for t in result] == ["Collisions_baked", "Bg_textures_baked"]
    [warning] = diagnostics.by_code(WarningCode.UNSUPPORTED_TILESET)
    assert warning.context["tileset"] == "Cavernas_by_Adam_Saltsman"
    assert warning.context["layer"] == "Wall_shadows_baked"


def test_transcoder_drops_layer_with_unknown_tileset_uid(registry, mapper, diagnostics):
    layers = [
        make_layer(registry, [tile((0, 0), (0, 0))], "Collisions_baked", 99),
        make_layer(registry, [tile((0, 0), (0, 0))], "Bg_textures_baked", None),
    ]
    result = LayerTranscoder(mapper).transcode(layers, TILESETS, diagnostics)
    assert result == []
    assert diagnostics.count(WarningCode.TILESET_NOT_FOUND) == 2
