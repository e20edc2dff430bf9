"""
Compare TileMap tile_data between two TSCN files.

Cells are matched per layer (node name) and position; source, alternative
index and the H/V/T transform bits must agree.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
from .codec import AlternativeFields, decode_alternative
from .logging_config import get_logger

logger = get_logger('tscn_diff')

TILEMAP_NODE_RE = re.compile(r'^\[node\s+name="([^"]+)"\s+type="TileMap"')
TILE_DATA_RE = re.compile(r'PackedInt32Array\(([^)]*)\)')

MAX_SHOWN_PER_LAYER = 20


@dataclass(frozen=True)
class CellData:
    source: int
    alternative: int

    @property
    def fields(self) -> AlternativeFields:
        return decode_alternative(self.alternative)

    def flags_text(self) -> str:
        f = self.fields
        return f"{'H' if f.flip_h else '-'}{'V' if f.flip_v else '-'}{'T' if f.transpose else '-'}"


@dataclass(frozen=True)
class CellDiff:
    layer: str
    position: int
    kind: str  # "presence" or "mismatch"
    left: Optional[CellData]
    right: Optional[CellData]

    def describe(self) -> str:
        if self.kind == "presence":
            side = "LEFT" if self.left is not None else "RIGHT"
            return f"pos={self.position}: only in {side}"

        l, r = self.left, self.right
        lf, rf = l.fields, r.fields
        parts = []
        if l.source != r.source:
            parts.append(f"src {l.source} vs {r.source}")
        if lf.alt_id != rf.alt_id:
            parts.append(f"altId {lf.alt_id} vs {rf.alt_id}")
        if lf.flip_h != rf.flip_h:
            parts.append(f"H {lf.flip_h} vs {rf.flip_h}")
        if lf.flip_v != rf.flip_v:
            parts.append(f"V {lf.flip_v} vs {rf.flip_v}")
        if lf.transpose != rf.transpose:
            parts.append(f"T {lf.transpose} vs {rf.transpose}")
        return (
            f"pos={self.position}: {{{', '.join(parts)}}}  "
            f"[L alt={l.alternative:#x} {l.flags_text()}] "
            f"[R alt={r.alternative:#x} {r.flags_text()}]"
        )


def parse_tscn_text(text: str) -> Dict[str, Dict[int, CellData]]:
    """
    Extract tile_data cells from scene text.

    Returns:
        Dict mapping TileMap node name -> {position: CellData}
    """
    layers: Dict[str, Dict[int, CellData]] = {}
    current: Optional[str] = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        node_match = TILEMAP_NODE_RE.match(line)
        if node_match:
            current = node_match.group(1)
            layers.setdefault(current, {})
            continue
        if line.startswith('[node'):
            current = None
            continue
        if current is None or not line.startswith('layer_0/tile_data'):
            continue

        data_match = TILE_DATA_RE.search(line)
        if not data_match:
            continue
        values = [int(v) for v in (s.strip() for s in data_match.group(1).split(',')) if v]
        for i in range(0, len(values) - 2, 3):
            layers[current][values[i]] = CellData(values[i + 1], values[i + 2])

    return layers


def parse_tscn(path: Path) -> Dict[str, Dict[int, CellData]]:
    with open(path, 'r', encoding='utf-8') as f:
        return parse_tscn_text(f.read())


def compare_layers(
    left: Dict[str, Dict[int, CellData]],
    right: Dict[str, Dict[int, CellData]]
) -> List[CellDiff]:
    """Differences between two parsed scenes, ordered by layer name then position."""
    diffs: List[CellDiff] = []
    for name in sorted(set(left) | set(right)):
        l_cells = left.get(name, {})
        r_cells = right.get(name, {})
        for position in sorted(set(l_cells) | set(r_cells)):
            lc = l_cells.get(position)
            rc = r_cells.get(position)
            if lc is None or rc is None:
                diffs.append(CellDiff(name, position, "presence", lc, rc))
                continue
            lf, rf = lc.fields, rc.fields
            if lc.source != rc.source or lf != rf:
                diffs.append(CellDiff(name, position, "mismatch", lc, rc))
    return diffs


def format_report(diffs: List[CellDiff], max_shown: int = MAX_SHOWN_PER_LAYER) -> List[str]:
    """Report lines grouped by layer, at most ``max_shown`` per layer."""
    if not diffs:
        return ["OK: No differences found."]

    by_layer: Dict[str, List[CellDiff]] = {}
    for diff in diffs:
        by_layer.setdefault(diff.layer, []).append(diff)

    lines = [f"Found {len(diffs)} differences across {len(by_layer)} TileMap layer(s)."]
    for layer, layer_diffs in by_layer.items():
        lines.append("")
        lines.append(f"Layer: {layer}  (diffs: {len(layer_diffs)})")
        for diff in layer_diffs[:max_shown]:
            lines.append(f"  {diff.describe()}")
        if len(layer_diffs) > max_shown:
            lines.append(f"  ...and {len(layer_diffs) - max_shown} more in this layer.")
    return lines


def diff_files(left_path: Path, right_path: Path) -> List[CellDiff]:
    """Parse and compare two TSCN files."""
    logger.info(f"Comparing {left_path} (baseline) with {right_path}")
    return compare_layers(parse_tscn(left_path), parse_tscn(right_path))
