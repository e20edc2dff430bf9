"""
Main converter - converts one LDtk level to a Godot TSCN scene.
"""

import random
from pathlib import Path
from typing import Optional
from .diagnostics import Diagnostics
from .errors import NoLayersError
from .level_extractor import LdtkProject, check_compatibility
from .layer_transcoder import LayerTranscoder
from .logging_config import get_logger
from .models import ConversionOptions, ConversionResult
from .scene_assembler import SceneAssembler, generate_filename
from .tileset_mapper import TilesetMapper, TilesetRegistry
from .utils import save_text

logger = get_logger('converter')


class LdtkConverter:
    """Converts LDtk levels to Godot TileMap scenes."""

    def __init__(
        self,
        registry: Optional[TilesetRegistry] = None,
        rng: Optional[random.Random] = None,
        flip_transforms: bool = True
    ):
        """
        Initialize LdtkConverter.

        Args:
            registry: Tileset registry shared by all components (built-in default if None)
            rng: Random source for resource uids
            flip_transforms: Encode flips as alternative transform bits (see TilesetMapper)
        """
        self.registry = registry if registry is not None else TilesetRegistry.default()
        self.mapper = TilesetMapper(self.registry, flip_transforms=flip_transforms)
        self.transcoder = LayerTranscoder(self.mapper)
        self.assembler = SceneAssembler(self.registry, rng=rng)

    def convert(
        self,
        project: LdtkProject,
        level_identifier: str,
        options: Optional[ConversionOptions] = None
    ) -> ConversionResult:
        """
        Convert one level.

        Args:
            project: Loaded LDtk project
            level_identifier: Level to convert
            options: Layer inclusion switches

        Returns:
            ConversionResult with scene text, filename and collected warnings

        Raises:
            LevelNotFoundError: If the level does not exist
            NoLayersError: If no layer survives filtering and tileset checks
        """
        options = options if options is not None else ConversionOptions()
        diagnostics = Diagnostics()
        check_compatibility(project.data, diagnostics)

        level = project.level_info(level_identifier)
        layers = project.select_layers(level_identifier, options)
        if not layers:
            raise NoLayersError(f"Level {level_identifier} has no layers to convert")

        transcoded = self.transcoder.transcode(layers, project.tilesets_by_uid(), diagnostics)
        if not transcoded:
            raise NoLayersError(
                f"Level {level_identifier}: all {len(layers)} layers were skipped"
            )

        result = ConversionResult(level=level, layers=transcoded, warnings=diagnostics.warnings)
        self.assembler.validate(result)
        result.scene_text = self.assembler.assemble(level, transcoded)
        result.filename = generate_filename(level.identifier)

        logger.info(
            f"Converted level {level_identifier} with {len(transcoded)} layers, "
            f"{result.total_tiles} tiles, {len(diagnostics)} warnings"
        )
        return result

    def convert_file(
        self,
        input_path: Path,
        output_path: Path,
        level_identifier: Optional[str] = None,
        options: Optional[ConversionOptions] = None
    ) -> ConversionResult:
        """
        Load a project, convert a level and write the scene.

        Args:
            input_path: Path to the .ldtk file
            output_path: Output directory, or explicit .tscn file path
            level_identifier: Level to convert (first level if None)
            options: Layer inclusion switches

        Returns:
            ConversionResult (scene already written to disk)
        """
        project = LdtkProject.from_file(Path(input_path), self.registry)
        if level_identifier is None:
            level_identifier = project.levels[0].get("identifier", "")
            logger.info(f"No level given, using first level: {level_identifier}")

        result = self.convert(project, level_identifier, options)

        output_path = Path(output_path)
        target = output_path if output_path.suffix.lower() == ".tscn" else output_path / result.filename
        save_text(result.scene_text, str(target))
        logger.info(f"Wrote {target}")
        return result
