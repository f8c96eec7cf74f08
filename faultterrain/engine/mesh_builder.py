"""
Triangle mesh generation from finished height fields.

Converts a normalized HeightField with normals into flat vertex attribute
arrays and a triangle index list ready for GPU upload.
"""

from typing import Any, Dict

import numpy as np

from ..config import HIGH_COLOR, LOW_COLOR, NORMALIZED_SCALE, TERRAIN_COLOR
from ..errors import TerrainError
from .heightfield import HeightField


COLOR_MODES = ("height", "constant")


class Mesh:
    """
    Renderable terrain mesh.

    Vertex (i, j) of an N x N grid lives at index i * N + j in every
    attribute array. The mesh keeps its own read-only copies of the arrays
    it is given.
    """

    def __init__(
        self,
        positions: np.ndarray,
        colors: np.ndarray,
        normals: np.ndarray,
        triangles: np.ndarray,
        size: int,
        degenerate: bool = False
    ):
        self.positions = np.array(positions, dtype=np.float32)
        self.colors = np.array(colors, dtype=np.float32)
        self.normals = np.array(normals, dtype=np.float32)
        self.triangles = np.array(triangles, dtype=np.uint32)
        self.size = size
        self.degenerate = degenerate

        for array in (self.positions, self.colors, self.normals, self.triangles):
            array.setflags(write=False)

    @property
    def vertex_count(self) -> int:
        return self.positions.shape[0]

    @property
    def triangle_count(self) -> int:
        return self.triangles.shape[0]

    def flat_indices(self) -> np.ndarray:
        """Triangle indices as a flat array (3 per triangle)."""
        return self.triangles.reshape(-1)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "size": self.size,
            "degenerate": self.degenerate,
            "positions": self.positions.tolist(),
            "colors": self.colors.tolist(),
            "normals": self.normals.tolist(),
            "triangles": self.triangles.tolist(),
        }

    def __repr__(self) -> str:
        return (
            f"Mesh(size={self.size}, vertices={self.vertex_count}, "
            f"triangles={self.triangle_count}, degenerate={self.degenerate})"
        )


def grid_triangles(size: int) -> np.ndarray:
    """
    Index triples for an N x N vertex grid, two per cell.

    Every cell is split along the (i+1, j)-(i, j+1) diagonal and both
    triangles wind counter-clockwise when viewed from +z.
    """

    i, j = np.mgrid[0:size - 1, 0:size - 1]

    v00 = (i * size + j).ravel()
    v10 = ((i + 1) * size + j).ravel()
    v01 = (i * size + (j + 1)).ravel()
    v11 = ((i + 1) * size + (j + 1)).ravel()

    first = np.stack([v00, v10, v01], axis=1)
    second = np.stack([v10, v11, v01], axis=1)

    # Interleave so both triangles of a cell are adjacent
    triangles = np.empty((first.shape[0] * 2, 3), dtype=np.uint32)
    triangles[0::2] = first
    triangles[1::2] = second
    return triangles


class MeshBuilder:
    """Emits a Mesh from a normalized HeightField with normals."""

    def __init__(
        self,
        cell_size: float = 1.0,
        height_scale: float = 1.0,
        color_mode: str = "height",
        normalized_scale: float = NORMALIZED_SCALE
    ):
        if color_mode not in COLOR_MODES:
            raise TerrainError(f"Unknown color mode {color_mode!r}, expected one of {COLOR_MODES}")

        self.cell_size = float(cell_size)
        self.height_scale = float(height_scale)
        self.color_mode = color_mode
        self.normalized_scale = float(normalized_scale)

    def build(self, field: HeightField) -> Mesh:
        if not field.is_normalized:
            raise TerrainError("Mesh can only be built from a normalized height field")
        if not field.has_normals:
            raise TerrainError("Mesh can only be built once normals are estimated")

        size = field.size
        positions = self._positions(field.elevation)
        colors = self._colors(field.elevation)
        normals = field.normals.reshape(-1, 3).astype(np.float32)

        return Mesh(
            positions=positions,
            colors=colors,
            normals=normals,
            triangles=grid_triangles(size),
            size=size,
            degenerate=field.degenerate
        )

    def _positions(self, elevation: np.ndarray) -> np.ndarray:
        size = elevation.shape[0]
        coords = np.arange(size, dtype=np.float64) * self.cell_size
        ii, jj = np.meshgrid(coords, coords, indexing="ij")

        positions = np.stack([
            ii.ravel(),
            jj.ravel(),
            elevation.ravel() * self.height_scale
        ], axis=1)
        return positions.astype(np.float32)

    def _colors(self, elevation: np.ndarray) -> np.ndarray:
        count = elevation.size

        if self.color_mode == "constant":
            return np.tile(np.asarray(TERRAIN_COLOR, dtype=np.float32), (count, 1))

        # Height-based: low ground dark, high ground light
        t = np.clip(elevation.ravel() / self.normalized_scale + 0.5, 0.0, 1.0)[:, None]
        low = np.asarray(LOW_COLOR, dtype=np.float64)
        high = np.asarray(HIGH_COLOR, dtype=np.float64)
        return (low + t * (high - low)).astype(np.float32)
