"""
Terrain pipeline stages.

- faults: Random fault-line perturbation of a height field
- normalize: Rescaling elevations into a fixed centered range
- normals: Per-vertex finite-difference normals
"""

from .faults import Fault, FaultGenerator
from .normalize import Normalizer
from .normals import NormalEstimator, clamped_neighbors

__all__ = ["Fault", "FaultGenerator", "Normalizer", "NormalEstimator", "clamped_neighbors"]
