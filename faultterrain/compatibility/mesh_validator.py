"""
Mesh validator for the render boundary.

Ensures generated meshes match what the renderer expects before upload.
"""

import numpy as np
from typing import List, Optional, Tuple

from ..engine.mesh_builder import Mesh


class MeshValidator:
    """
    Validates terrain meshes for renderer compatibility.

    Checks counts, attribute lengths, index ranges, finiteness,
    normal lengths and triangle winding.
    """

    def __init__(self, normal_tolerance: float = 1e-4, area_epsilon: float = 1e-12):
        self.normal_tolerance = normal_tolerance
        self.area_epsilon = area_epsilon

    def validate(self, mesh: Mesh, gridsize: Optional[int] = None) -> Tuple[bool, List[str]]:
        """
        Validate a mesh.

        Args:
            mesh: Mesh to validate
            gridsize: Expected grid size; defaults to ``mesh.size``

        Returns:
            Tuple of (is_valid, error_messages)
        """

        errors = []
        size = mesh.size if gridsize is None else gridsize

        errors.extend(self._validate_counts(mesh, size))
        if errors:
            return False, errors

        errors.extend(self._validate_values(mesh))
        errors.extend(self._validate_indices(mesh))
        if not errors:
            errors.extend(self._validate_winding(mesh))

        return len(errors) == 0, errors

    def _validate_counts(self, mesh: Mesh, size: int) -> List[str]:
        """Validate vertex, attribute and triangle counts."""

        errors = []

        expected_vertices = size * size
        expected_triangles = (size - 1) * (size - 1) * 2

        if mesh.vertex_count != expected_vertices:
            errors.append(f"Expected {expected_vertices} positions, got {mesh.vertex_count}")

        for name in ("positions", "colors", "normals"):
            array = getattr(mesh, name)
            if array.ndim != 2 or array.shape[1] != 3:
                errors.append(f"{name} must have shape (n, 3), got {array.shape}")
            elif array.shape[0] != mesh.vertex_count:
                errors.append(f"{name} length ({array.shape[0]}) must match positions ({mesh.vertex_count})")

        if mesh.triangles.ndim != 2 or mesh.triangles.shape[1] != 3:
            errors.append(f"triangles must have shape (n, 3), got {mesh.triangles.shape}")
        elif mesh.triangle_count != expected_triangles:
            errors.append(f"Expected {expected_triangles} triangles, got {mesh.triangle_count}")

        return errors

    def _validate_values(self, mesh: Mesh) -> List[str]:
        """Validate attribute values are finite and normals are unit length."""

        errors = []

        for name in ("positions", "colors", "normals"):
            if not np.all(np.isfinite(getattr(mesh, name))):
                errors.append(f"{name} contains non-finite values")

        if mesh.colors.size and (mesh.colors.min() < 0.0 or mesh.colors.max() > 1.0):
            errors.append("colors must lie in [0, 1]")

        lengths = np.linalg.norm(mesh.normals, axis=1)
        if np.any(np.abs(lengths - 1.0) > self.normal_tolerance):
            errors.append("normals must be unit length")

        return errors

    def _validate_indices(self, mesh: Mesh) -> List[str]:
        """Validate every index refers to an existing vertex."""

        errors = []

        if mesh.triangles.size == 0:
            return errors

        if mesh.triangles.min() < 0:
            errors.append("triangle indices must be non-negative")
        if mesh.triangles.max() >= mesh.vertex_count:
            errors.append(
                f"triangle index {int(mesh.triangles.max())} out of range for {mesh.vertex_count} vertices"
            )

        return errors

    def _validate_winding(self, mesh: Mesh) -> List[str]:
        """Validate every triangle winds counter-clockwise seen from +z with non-zero area."""

        errors = []

        corners = mesh.positions.astype(np.float64)[mesh.triangles.astype(np.int64)]
        face_normals = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])

        areas = np.linalg.norm(face_normals, axis=1)
        degenerate = int(np.sum(areas <= self.area_epsilon))
        if degenerate:
            errors.append(f"{degenerate} zero-area triangles")

        clockwise = int(np.sum(face_normals[:, 2] <= 0.0))
        if clockwise:
            errors.append(f"{clockwise} triangles do not wind counter-clockwise")

        return errors
