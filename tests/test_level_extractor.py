import pytest
from ldtk_builders import OTHER_TILESET_DEF, SUNNY_LAND_DEF, layer, level, project, three_layer_level, tile

from ldtk2tscn.constants import RECOGNIZED_LAYERS
from ldtk2tscn.diagnostics import Diagnostics, WarningCode
from ldtk2tscn.errors import InputFileError, LdtkFormatError, LevelNotFoundError
from ldtk2tscn.level_extractor import (
    LdtkProject,
    check_compatibility,
    load_project,
    select_layers,
    validate_input_file,
    validate_project,
)
from ldtk2tscn.models import ConversionOptions


def test_select_layers_defaults_to_all_recognized(registry):
    layers = select_layers(three_layer_level(), RECOGNIZED_LAYERS, ConversionOptions(), registry)
    assert [l.identifier for l in layers] == [
        "Collisions_baked",
        "Wall_shadows_baked",
        "Bg_textures_baked",
    ]


def test_select_layers_respects_options(registry):
    options = ConversionOptions(include_shadows=False, include_background=False)
    layers = select_layers(three_layer_level(), RECOGNIZED_LAYERS, options, registry)
    assert [l.identifier for l in layers] == ["Collisions_baked"]


def test_select_layers_reads_layer_fields(registry):
    raw = level(layers=[layer("Wall_shadows_baked", [tile((0, 0), (0, 0))], opacity=0.17, visible=False)])
    [selected] = select_layers(raw, RECOGNIZED_LAYERS, ConversionOptions(), registry)
    assert selected.opacity == 0.17
    assert selected.visible is False
    assert selected.tileset_uid == 2
    assert selected.config.name == "WallShadows"
    assert len(selected.raw_tiles) == 1


def test_select_layers_ignores_unrecognized(registry):
    raw = level(layers=[layer("Decorations"), layer("Collisions_baked")])
    layers = select_layers(raw, RECOGNIZED_LAYERS, ConversionOptions(), registry)
    assert [l.identifier for l in layers] == ["Collisions_baked"]


def test_get_level_missing():
    ldtk = LdtkProject(project([three_layer_level("Level_0")]))
    with pytest.raises(LevelNotFoundError) as excinfo:
        ldtk.get_level("Level_9")
    assert excinfo.value.identifier == "Level_9"


def test_project_queries():
    ldtk = LdtkProject(project(
        [three_layer_level("Level_0"), level("Level_1", px_wid=100, px_hei=40)],
        tilesets=[SUNNY_LAND_DEF, OTHER_TILESET_DEF],
    ))
    assert [l["identifier"] for l in ldtk.list_levels()] == ["Level_0", "Level_1"]
    assert ldtk.list_levels()[0]["layerCount"] == 4
    assert ldtk.get_tileset_by_uid(3)["identifier"] == "Cavernas_by_Adam_Saltsman"
    assert ldtk.get_tileset_by_uid(42) is None

    info = ldtk.level_info("Level_1")
    assert (info.px_wid, info.px_hei, info.grid_wid, info.grid_hei) == (100, 40, 7, 3)


def test_level_stats():
    stats = LdtkProject(project([three_layer_level()])).level_stats("Level_0")
    assert stats["totalTiles"] == 4
    assert stats["layerCount"] == 3
    assert stats["dimensions"] == "256x128px"
    assert stats["gridDimensions"] == "16x8"
    assert stats["layers"]["Collisions_baked"]["tileCount"] == 2


def test_validate_project_accepts_valid_document():
    validate_project(project([three_layer_level()]))


def test_validate_project_collects_errors():
    with pytest.raises(LdtkFormatError) as excinfo:
        validate_project({"levels": "nope"})
    assert excinfo.value.errors == [
        "Missing or incorrect header",
        "Missing levels array",
        "Missing tileset definitions",
    ]


def test_validate_project_requires_levels_and_supported_tileset():
    document = project([], tilesets=[OTHER_TILESET_DEF])
    with pytest.raises(LdtkFormatError) as excinfo:
        validate_project(document)
    assert "No levels found in the file" in excinfo.value.errors
    assert any("No supported tilesets" in e for e in excinfo.value.errors)


def test_load_project(write_project):
    path = write_project(project([three_layer_level()]))
    assert load_project(path)["levels"][0]["identifier"] == "Level_0"


def test_load_project_invalid_json(tmp_path):
    path = tmp_path / "broken.ldtk"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(LdtkFormatError, match="Invalid JSON"):
        load_project(path)


def test_load_project_wrong_extension(write_project):
    path = write_project(project([three_layer_level()]), name="World.txt")
    with pytest.raises(InputFileError, match="Unsupported file type"):
        load_project(path)


def test_load_project_missing_file(tmp_path):
    with pytest.raises(InputFileError, match="File not found"):
        load_project(tmp_path / "missing.ldtk")


def test_input_file_size_ceiling(write_project):
    path = write_project(project([three_layer_level()]))
    with pytest.raises(InputFileError, match="File too large"):
        validate_input_file(path, max_size=10)


def test_compatibility_warnings():
    document = project(
        [three_layer_level()],
        tilesets=[SUNNY_LAND_DEF, OTHER_TILESET_DEF, {"identifier": "Internal_Icons", "uid": 9}],
        app_version="0.9.3",
    )
    document["externalLevels"] = True
    diagnostics = Diagnostics()
    check_compatibility(document, diagnostics)
    assert diagnostics.summary() == {
        "old_ldtk_version": 1,
        "external_levels": 1,
        "unsupported_tilesets_present": 1,
    }
    [unsupported] = diagnostics.by_code(WarningCode.UNSUPPORTED_TILESETS_PRESENT)
    assert unsupported.context["tilesets"] == ["Cavernas_by_Adam_Saltsman"]


def test_compatible_project_has_no_warnings():
    diagnostics = Diagnostics()
    check_compatibility(project([three_layer_level()]), diagnostics)
    assert len(diagnostics) == 0
