"""
Core terrain generation pipeline.

FaultGenerator -> Normalizer -> NormalEstimator -> MeshBuilder, run to
completion in sequence. Each call owns its HeightField and Mesh.
"""

import argparse
import json
import logging
import time
from typing import Iterable, Optional

import numpy as np

from ..config import FAULT_STEP, NORMALIZED_SCALE
from ..engine.heightfield import HeightField
from ..engine.heightmap_analyzer import HeightmapAnalyzer
from ..engine.mesh_builder import COLOR_MODES, Mesh, MeshBuilder
from ..logging_config import setup_logging
from .grammar import parse_generation_request
from .modules.faults import Fault, FaultGenerator
from .modules.normalize import Normalizer
from .modules.normals import NormalEstimator

logger = logging.getLogger(__name__)


class TerrainEngine:
    """
    Main terrain generation engine that orchestrates the pipeline stages.

    This engine:
    - Builds a raw height field from random faults
    - Normalizes it into a fixed, centered range
    - Estimates per-vertex normals
    - Emits a triangle mesh for rendering
    """

    def __init__(
        self,
        step: float = FAULT_STEP,
        scale: float = NORMALIZED_SCALE,
        cell_size: float = 1.0,
        height_scale: float = 1.0,
        color_mode: str = "height"
    ):
        self.step = step
        self.normalizer = Normalizer(scale=scale)
        self.normal_estimator = NormalEstimator(cell_size=cell_size, height_scale=height_scale)
        self.mesh_builder = MeshBuilder(
            cell_size=cell_size,
            height_scale=height_scale,
            color_mode=color_mode,
            normalized_scale=scale
        )

    def generate_heightfield(
        self,
        gridsize: int,
        fault_count: int,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        faults: Optional[Iterable[Fault]] = None
    ) -> HeightField:
        """
        Generate a normalized height field with normals.

        Args:
            gridsize: Grid size N (N x N vertices), at least 2
            fault_count: Number of random faults to apply
            seed: Seed for a fresh random source (ignored when rng is given)
            rng: Injected random source
            faults: Explicit fault sequence replacing random sampling

        Returns:
            HeightField ready for mesh building
        """

        start_time = time.perf_counter()

        generator = FaultGenerator(step=self.step, rng=rng, seed=seed)
        field = generator.generate(gridsize, fault_count, faults=faults)
        self.normalizer.normalize(field)
        self.normal_estimator.estimate(field)

        logger.debug(
            "Generated %dx%d height field with %s faults in %.4fs",
            gridsize, gridsize, fault_count if faults is None else "explicit",
            time.perf_counter() - start_time
        )
        return field

    def build_mesh(self, field: HeightField) -> Mesh:
        return self.mesh_builder.build(field)

    def generate_mesh(
        self,
        gridsize: int,
        fault_count: int,
        seed: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        faults: Optional[Iterable[Fault]] = None
    ) -> Mesh:
        """Run the full pipeline and return a new Mesh."""

        field = self.generate_heightfield(gridsize, fault_count, seed=seed, rng=rng, faults=faults)
        mesh = self.build_mesh(field)
        logger.info("Terrain mesh ready: %r", mesh)
        return mesh


def generate_terrain_mesh(
    gridsize: int,
    fault_count: int,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    faults: Optional[Iterable[Fault]] = None
) -> Mesh:
    """
    Generate a terrain mesh with default engine settings.

    Raises:
        InvalidParameterError: gridsize < 2 or fault_count < 0
    """
    return TerrainEngine().generate_mesh(gridsize, fault_count, seed=seed, rng=rng, faults=faults)


def main():
    """CLI entry point: generate a terrain and print its statistics."""

    parser = argparse.ArgumentParser(description="Fault-line terrain generator")
    parser.add_argument("--gridsize", default=None, help="Grid size N (N x N vertices)")
    parser.add_argument("--faults", default=None, help="Number of faults to apply")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--color-mode", choices=COLOR_MODES, default="height", help="Vertex coloring")
    parser.add_argument("--log-level", default=None, help="Logging level")
    parser.add_argument("--log-file", default=None, help="Optional log file")

    args = parser.parse_args()
    setup_logging(args.log_level, args.log_file)

    request = parse_generation_request(args.gridsize, args.faults)
    print(f"Generating {request.gridsize}x{request.gridsize} terrain with {request.faults} faults...")

    engine = TerrainEngine(color_mode=args.color_mode)
    start_time = time.perf_counter()
    field = engine.generate_heightfield(request.gridsize, request.faults, seed=args.seed)
    mesh = engine.build_mesh(field)
    elapsed = time.perf_counter() - start_time

    stats = HeightmapAnalyzer().analyze(field)

    print(f"Vertices: {mesh.vertex_count}")
    print(f"Triangles: {mesh.triangle_count}")
    print(f"Generation time: {elapsed:.3f}s")
    if mesh.degenerate:
        print("Terrain is flat (degenerate); nothing to draw")
    print(json.dumps(stats, indent=2))
    return 0


if __name__ == "__main__":
    exit(main())
