"""
Fault-line terrain generation pipeline.

FaultGenerator -> Normalizer -> NormalEstimator -> MeshBuilder
"""

from .core import TerrainEngine, generate_terrain_mesh
from .grammar import ParameterSpec, GenerationRequest, parse_generation_request
from .modules import Fault, FaultGenerator, Normalizer, NormalEstimator

__all__ = [
    "TerrainEngine",
    "generate_terrain_mesh",
    "ParameterSpec",
    "GenerationRequest",
    "parse_generation_request",
    "Fault",
    "FaultGenerator",
    "Normalizer",
    "NormalEstimator",
]
