"""Builders for minimal LDtk project documents used across the tests."""

from typing import Any, Dict, List, Optional, Sequence

SUNNY_LAND_DEF = {
    "identifier": "SunnyLand_by_Ansimuz",
    "uid": 2,
    "relPath": "SunnyLand_by_Ansimuz-extended.png",
    "pxWid": 368,
    "pxHei": 336,
    "tileGridSize": 16,
    "__cWid": 23,
    "__cHei": 21,
}

OTHER_TILESET_DEF = {
    "identifier": "Cavernas_by_Adam_Saltsman",
    "uid": 3,
    "relPath": "cavernas.png",
    "pxWid": 128,
    "pxHei": 128,
    "tileGridSize": 8,
    "__cWid": 16,
    "__cHei": 16,
}


def tile(px: Sequence[int], src: Sequence[int], f: int = 0) -> Dict[str, Any]:
    return {"px": list(px), "src": list(src), "f": f, "t": 0, "d": [0]}


def layer(
    identifier: str,
    tiles: Optional[List[Dict[str, Any]]] = None,
    tileset_uid: Optional[int] = 2,
    opacity: float = 1,
    visible: bool = True,
) -> Dict[str, Any]:
    return {
        "__identifier": identifier,
        "__type": "Tiles",
        "__gridSize": 16,
        "__opacity": opacity,
        "__tilesetDefUid": tileset_uid,
        "visible": visible,
        "gridTiles": tiles or [],
    }


def level(
    identifier: str = "Level_0",
    layers: Optional[List[Dict[str, Any]]] = None,
    px_wid: int = 256,
    px_hei: int = 128,
) -> Dict[str, Any]:
    return {
        "identifier": identifier,
        "iid": f"iid-{identifier}",
        "uid": 0,
        "worldX": 0,
        "worldY": 0,
        "pxWid": px_wid,
        "pxHei": px_hei,
        "layerInstances": layers or [],
    }


def project(
    levels: List[Dict[str, Any]],
    tilesets: Optional[List[Dict[str, Any]]] = None,
    app_version: str = "1.5.3",
) -> Dict[str, Any]:
    return {
        "__header__": {"fileType": "LDtk Project JSON", "app": "LDtk", "appVersion": app_version},
        "externalLevels": False,
        "defs": {"tilesets": tilesets if tilesets is not None else [dict(SUNNY_LAND_DEF)]},
        "levels": levels,
    }


def three_layer_level(identifier: str = "Level_0") -> Dict[str, Any]:
    """A level with the three baked layers, one or two tiles each, plus an entity layer."""
    return level(identifier, [
        {"__identifier": "Entities", "__type": "Entities", "entityInstances": []},
        layer("Collisions_baked", [tile((0, 0), (32, 32)), tile((16, 0), (32, 64))]),
        layer("Wall_shadows_baked", [tile((0, 16), (0, 32), f=1)], opacity=0.17),
        layer("Bg_textures_baked", [tile((32, 32), (128, 96))]),
    ])
