"""
Height field container for the terrain pipeline.

A HeightField owns an N x N grid of elevations and, once estimated,
an N x N x 3 grid of unit normals. It is passed explicitly through every
pipeline stage instead of living in shared globals.
"""

from typing import Optional, Tuple

import numpy as np

from ..config import MIN_GRIDSIZE
from ..errors import InvalidParameterError, TerrainError


class HeightField:
    """
    Square grid of terrain elevations with derived per-vertex normals.

    Lifecycle:
    - allocated zero-filled via ``HeightField.zeros``
    - elevations mutated in place while faults are applied
    - frozen once normalized (``freeze``)
    - normals assigned exactly once, after normalization
    """

    def __init__(self, elevation: np.ndarray):
        elevation = np.array(elevation, dtype=np.float64)

        if elevation.ndim != 2 or elevation.shape[0] != elevation.shape[1]:
            raise InvalidParameterError(
                f"Height field must be a square 2D grid, got shape {elevation.shape}"
            )
        if elevation.shape[0] < MIN_GRIDSIZE:
            raise InvalidParameterError(
                f"Grid size must be at least {MIN_GRIDSIZE}, got {elevation.shape[0]}"
            )

        self.elevation = elevation
        self.normals: Optional[np.ndarray] = None
        self.degenerate = False
        self._normalized = False

    @classmethod
    def zeros(cls, size: int) -> "HeightField":
        """Allocate a flat size x size field."""

        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise InvalidParameterError(f"Grid size must be an integer, got {size!r}")
        if size < MIN_GRIDSIZE:
            raise InvalidParameterError(
                f"Grid size must be at least {MIN_GRIDSIZE}, got {size}"
            )

        return cls(np.zeros((int(size), int(size)), dtype=np.float64))

    @property
    def size(self) -> int:
        return self.elevation.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.elevation.shape

    @property
    def is_normalized(self) -> bool:
        return self._normalized

    @property
    def has_normals(self) -> bool:
        return self.normals is not None

    def min(self) -> float:
        return float(self.elevation.min())

    def max(self) -> float:
        return float(self.elevation.max())

    def value_range(self) -> float:
        return self.max() - self.min()

    def freeze(self):
        """Mark elevations as final; later writes raise ValueError."""
        self.elevation.setflags(write=False)
        self._normalized = True

    def set_normals(self, normals: np.ndarray):
        """Attach per-vertex normals. Allowed once, after normalization."""

        if not self._normalized:
            raise TerrainError("Normals can only be set on a normalized height field")
        if self.normals is not None:
            raise TerrainError("Normals have already been computed for this height field")

        normals = np.asarray(normals, dtype=np.float64)
        if normals.shape != (self.size, self.size, 3):
            raise TerrainError(
                f"Normals must have shape {(self.size, self.size, 3)}, got {normals.shape}"
            )

        normals.setflags(write=False)
        self.normals = normals

    def copy(self) -> "HeightField":
        """Independent, writable copy of the elevations (normals are not copied)."""
        return HeightField(self.elevation)

    def __repr__(self) -> str:
        return (
            f"HeightField(size={self.size}, normalized={self._normalized}, "
            f"normals={self.has_normals}, degenerate={self.degenerate})"
        )
