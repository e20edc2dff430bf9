import json
import random

import pytest

from ldtk2tscn.diagnostics import Diagnostics
from ldtk2tscn.tileset_mapper import TilesetMapper, TilesetRegistry


@pytest.fixture
def registry():
    return TilesetRegistry.default()


@pytest.fixture
def sunny_land(registry):
    return registry.get("SunnyLand_by_Ansimuz")


@pytest.fixture
def mapper(registry):
    return TilesetMapper(registry)


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def write_project(tmp_path):
    """Write an LDtk document to disk and return its path."""
    def _write(document, name="World.ldtk"):
        path = tmp_path / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path
    return _write
