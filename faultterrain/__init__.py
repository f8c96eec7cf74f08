"""
Fault-line terrain generation.

This package provides:
- Height field synthesis from repeated random faults
- Normalization and finite-difference normal estimation
- Triangle mesh generation for rendering
- A generation service and a real-time viewer
"""

from .engine import HeightField, Mesh, MeshBuilder, HeightmapAnalyzer
from .errors import TerrainError, InvalidParameterError
from .procgen import (
    TerrainEngine, generate_terrain_mesh, parse_generation_request,
    Fault, FaultGenerator, Normalizer, NormalEstimator
)

__version__ = "0.1.0"

__all__ = [
    "HeightField", "Mesh", "MeshBuilder", "HeightmapAnalyzer",
    "TerrainError", "InvalidParameterError",
    "TerrainEngine", "generate_terrain_mesh", "parse_generation_request",
    "Fault", "FaultGenerator", "Normalizer", "NormalEstimator",
]
