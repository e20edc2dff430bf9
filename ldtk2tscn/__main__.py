"""
Main entry point for the ldtk2tscn converter.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional
from .converter import LdtkConverter
from .errors import Ldtk2TscnError
from .level_extractor import LdtkProject
from .logging_config import setup_logging
from .models import ConversionOptions, ConversionResult
from .scene_assembler import SceneAssembler
from .tileset_mapper import TilesetRegistry
from .tscn_diff import diff_files, format_report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ldtk2tscn",
        description="Convert LDtk levels to Godot 4 TileMap scenes (.tscn)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed progress information"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Show debug information (implies verbose)"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show errors"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert a level to .tscn")
    convert.add_argument("input", help="Input .ldtk project file")
    convert.add_argument(
        "--level", "-l",
        default=None,
        help="Level identifier to convert (default: first level)"
    )
    convert.add_argument(
        "--output", "-o",
        default=".",
        help="Output directory, or a path ending in .tscn (default: current directory)"
    )
    convert.add_argument(
        "--no-collisions",
        action="store_true",
        help="Skip the Collisions_baked layer"
    )
    convert.add_argument(
        "--no-shadows",
        action="store_true",
        help="Skip the Wall_shadows_baked layer"
    )
    convert.add_argument(
        "--no-background",
        action="store_true",
        help="Skip the Bg_textures_baked layer"
    )
    convert.add_argument(
        "--texture",
        default=None,
        help="Tileset PNG to measure for atlas bounds checks (default: built-in geometry)"
    )
    convert.add_argument(
        "--preview",
        action="store_true",
        help="Print a conversion summary"
    )

    levels = subparsers.add_parser("levels", help="List the levels of a project")
    levels.add_argument("input", help="Input .ldtk project file")

    diff = subparsers.add_parser("diff", help="Compare tile_data of two .tscn files")
    diff.add_argument("left", help="Baseline .tscn file")
    diff.add_argument("right", help=".tscn file to check")

    return parser


def print_preview(result: ConversionResult) -> None:
    preview = SceneAssembler.generate_preview(result)
    print(f"Level: {preview.level_name}")
    print(f"  Dimensions: {preview.dimensions}")
    print(f"  Layers: {preview.layer_count}, tiles: {preview.total_tiles}")
    for layer in preview.layers:
        hidden = "" if layer.visible else ", hidden"
        print(
            f"    - {layer.name}: {layer.tile_count} tiles "
            f"(opacity {layer.opacity:g}{hidden}, tileset {layer.tileset})"
        )
    print(f"  Estimated size: {preview.estimated_file_size}")
    if result.warnings:
        print(f"  Warnings: {len(result.warnings)}")
        for warning in result.warnings:
            print(f"    {warning}")


def run_convert(args: argparse.Namespace, logger) -> int:
    registry = TilesetRegistry.from_texture(Path(args.texture)) if args.texture else TilesetRegistry.default()
    options = ConversionOptions(
        include_collisions=not args.no_collisions,
        include_shadows=not args.no_shadows,
        include_background=not args.no_background
    )
    converter = LdtkConverter(registry)
    result = converter.convert_file(Path(args.input), Path(args.output), args.level, options)

    if args.preview:
        print_preview(result)
    if result.warnings:
        logger.warning(f"Conversion finished with {len(result.warnings)} warnings")
    logger.info(f"Saved {result.filename}")
    return 0


def run_levels(args: argparse.Namespace) -> int:
    project = LdtkProject.from_file(Path(args.input))
    levels = project.list_levels()
    print(f"Found {len(levels)} levels:")
    for level in levels:
        stats = project.level_stats(level["identifier"])
        print(
            f"  {level['identifier']}: {stats['dimensions']} ({stats['gridDimensions']} tiles), "
            f"{stats['totalTiles']} tiles in {stats['layerCount']} convertible layers"
        )
    return 0


def run_diff(args: argparse.Namespace) -> int:
    diffs = diff_files(Path(args.left), Path(args.right))
    for line in format_report(diffs):
        print(line)
    return 1 if diffs else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger = setup_logging(args.verbose, args.debug, args.quiet)

    try:
        if args.command == "convert":
            return run_convert(args, logger)
        if args.command == "levels":
            return run_levels(args)
        return run_diff(args)
    except Ldtk2TscnError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"File error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
