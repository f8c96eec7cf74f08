"""
Typed failures raised by the terrain pipeline.
"""


class TerrainError(Exception):
    """Base class for terrain generation failures."""


class InvalidParameterError(TerrainError, ValueError):
    """Raised for generation parameters that cannot form a triangle grid."""
