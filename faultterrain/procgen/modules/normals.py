"""
Per-vertex normal estimation from finite differences.

Uses the four axis neighbours of each vertex. Neighbours that fall outside
the grid are clamped to the vertex itself, so edges never read out of range.
"""

from typing import Tuple

import numpy as np

from ...engine.heightfield import HeightField
from ...errors import TerrainError


def clamped_neighbors(elevation: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Return the north, south, west and east neighbour grids of ``elevation``.

    north = (i-1, j), south = (i+1, j), west = (i, j-1), east = (i, j+1);
    edge padding makes an out-of-grid neighbour equal to the vertex itself.
    """

    padded = np.pad(elevation, 1, mode="edge")
    north = padded[:-2, 1:-1]
    south = padded[2:, 1:-1]
    west = padded[1:-1, :-2]
    east = padded[1:-1, 2:]
    return north, south, west, east


class NormalEstimator:
    """
    Estimates smooth-shading normals for a normalized height field.

    The tangent along i is (cell, 0, h * (south - north)) and along j is
    (0, cell, h * (east - west)); their cross product points toward +z,
    matching the counter-clockwise winding emitted by MeshBuilder.
    """

    def __init__(self, cell_size: float = 1.0, height_scale: float = 1.0):
        if not cell_size > 0:
            raise TerrainError(f"Cell size must be positive, got {cell_size}")
        self.cell_size = float(cell_size)
        self.height_scale = float(height_scale)

    def compute(self, elevation: np.ndarray) -> np.ndarray:
        """Return an (N, N, 3) array of unit normals for ``elevation``."""

        north, south, west, east = clamped_neighbors(elevation)
        d_i = self.height_scale * (south - north)
        d_j = self.height_scale * (east - west)

        # (cell, 0, d_i) x (0, cell, d_j)
        normals = np.stack([
            -self.cell_size * d_i,
            -self.cell_size * d_j,
            np.full_like(d_i, self.cell_size * self.cell_size),
        ], axis=-1)

        lengths = np.linalg.norm(normals, axis=-1, keepdims=True)
        return normals / lengths

    def estimate(self, field: HeightField) -> HeightField:
        """Fill ``field.normals``. The field must already be normalized."""

        if not field.is_normalized:
            raise TerrainError("Normals must be estimated after normalization")

        field.set_normals(self.compute(field.elevation))
        return field
