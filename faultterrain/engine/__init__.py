"""
Terrain data structures and mesh output.
"""

from .heightfield import HeightField
from .mesh_builder import Mesh, MeshBuilder
from .heightmap_analyzer import HeightmapAnalyzer

__all__ = ["HeightField", "Mesh", "MeshBuilder", "HeightmapAnalyzer"]
