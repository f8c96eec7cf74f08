"""
Checks at the boundary between generation and rendering.
"""

from .mesh_validator import MeshValidator

__all__ = ["MeshValidator"]
