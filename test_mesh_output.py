"""
Tests for mesh building, mesh validation and height field analysis.
"""

import numpy as np
import pytest

from faultterrain.compatibility import MeshValidator
from faultterrain.config import HIGH_COLOR, LOW_COLOR, TERRAIN_COLOR
from faultterrain.engine import HeightField, HeightmapAnalyzer, Mesh, MeshBuilder
from faultterrain.engine.mesh_builder import grid_triangles
from faultterrain.errors import TerrainError
from faultterrain.procgen import Fault, TerrainEngine


def _cliff_field(size=4):
    """Two plateaus split along i = 1.5."""
    return TerrainEngine().generate_heightfield(size, 1, faults=[Fault(point=(1.5, 1.5), angle=0.0)])


def test_grid_triangles_layout():
    triangles = grid_triangles(3)

    assert triangles.shape == (8, 3)
    assert triangles.dtype == np.uint32
    # Cell (0, 0): v00=0, v10=3, v01=1, v11=4
    assert triangles[0].tolist() == [0, 3, 1]
    assert triangles[1].tolist() == [3, 4, 1]
    # Cell (1, 1): v00=4, v10=7, v01=5, v11=8
    assert triangles[6].tolist() == [4, 7, 5]
    assert triangles[7].tolist() == [7, 8, 5]


def test_positions_follow_grid():
    field = _cliff_field()
    mesh = MeshBuilder().build(field)

    # Vertex (i, j) lives at index i * N + j
    assert mesh.positions[2 * 4 + 1].tolist() == [2.0, 1.0, 0.5]
    assert mesh.positions[0].tolist() == [0.0, 0.0, -0.5]


def test_positions_affine_mapping():
    field = _cliff_field()
    mesh = MeshBuilder(cell_size=2.0, height_scale=10.0).build(field)

    assert mesh.positions[3 * 4 + 3].tolist() == [6.0, 6.0, 5.0]


def test_mesh_does_not_alias_field():
    field = _cliff_field()
    mesh = MeshBuilder().build(field)

    assert not np.shares_memory(mesh.normals, field.normals)
    assert not np.shares_memory(mesh.positions, field.elevation)


def test_mesh_arrays_read_only():
    mesh = MeshBuilder().build(_cliff_field())

    with pytest.raises(ValueError):
        mesh.positions[0, 0] = 1.0
    with pytest.raises(ValueError):
        mesh.triangles[0, 0] = 1


def test_mesh_copies_input_arrays():
    mesh = MeshBuilder().build(_cliff_field())
    positions = mesh.positions.copy()
    triangles = mesh.triangles.copy()
    rebuilt = Mesh(positions, mesh.colors, mesh.normals, triangles, mesh.size)

    assert positions.flags.writeable
    assert triangles.flags.writeable
    assert not np.shares_memory(rebuilt.positions, positions)
    assert not rebuilt.positions.flags.writeable


def test_constant_colors():
    mesh = MeshBuilder(color_mode="constant").build(_cliff_field())

    assert np.allclose(mesh.colors, TERRAIN_COLOR)


def test_height_colors():
    mesh = MeshBuilder(color_mode="height").build(_cliff_field())

    # Low plateau at -0.5, high plateau at +0.5
    assert np.allclose(mesh.colors[0], LOW_COLOR)
    assert np.allclose(mesh.colors[-1], HIGH_COLOR)


def test_colors_are_deterministic():
    field = _cliff_field(6)
    first = MeshBuilder().build(field)
    second = MeshBuilder().build(field)

    assert np.array_equal(first.colors, second.colors)


def test_unknown_color_mode():
    with pytest.raises(TerrainError):
        MeshBuilder(color_mode="rainbow")


def test_build_requires_normals():
    field = HeightField.zeros(3)

    with pytest.raises(TerrainError):
        MeshBuilder().build(field)


def test_to_dict_lists():
    mesh = TerrainEngine().generate_mesh(3, 4, seed=2)
    data = mesh.to_dict()

    assert data["size"] == 3
    assert len(data["positions"]) == 9
    assert len(data["triangles"]) == 8
    assert len(data["triangles"][0]) == 3


# Validation

@pytest.mark.parametrize("gridsize, faults", [(2, 0), (2, 3), (5, 10), (17, 200)])
def test_generated_meshes_validate(gridsize, faults):
    mesh = TerrainEngine().generate_mesh(gridsize, faults, seed=gridsize)
    is_valid, errors = MeshValidator().validate(mesh, gridsize)

    assert is_valid, errors


def test_validator_detects_flipped_winding():
    mesh = TerrainEngine().generate_mesh(4, 5, seed=1)
    flipped = Mesh(
        positions=mesh.positions.copy(),
        colors=mesh.colors.copy(),
        normals=mesh.normals.copy(),
        triangles=mesh.triangles[:, ::-1].copy(),
        size=mesh.size
    )

    is_valid, errors = MeshValidator().validate(flipped)

    assert not is_valid
    assert any("counter-clockwise" in error for error in errors)


def test_validator_detects_bad_index():
    mesh = TerrainEngine().generate_mesh(3, 2, seed=1)
    triangles = mesh.triangles.copy()
    triangles[0, 0] = 99
    broken = Mesh(mesh.positions.copy(), mesh.colors.copy(), mesh.normals.copy(), triangles, mesh.size)

    is_valid, errors = MeshValidator().validate(broken)

    assert not is_valid
    assert any("out of range" in error for error in errors)


def test_validator_detects_wrong_size():
    mesh = TerrainEngine().generate_mesh(3, 2, seed=1)
    is_valid, errors = MeshValidator().validate(mesh, gridsize=4)

    assert not is_valid
    assert errors


def test_validator_detects_non_unit_normals():
    mesh = TerrainEngine().generate_mesh(3, 2, seed=1)
    broken = Mesh(mesh.positions.copy(), mesh.colors.copy(), mesh.normals * 2.0, mesh.triangles.copy(), mesh.size)

    is_valid, errors = MeshValidator().validate(broken)

    assert not is_valid
    assert "normals must be unit length" in errors


# Analysis

def test_analyzer_on_flat_terrain():
    field = TerrainEngine().generate_heightfield(6, 0)
    analysis = HeightmapAnalyzer().analyze(field)

    assert analysis["degenerate"]
    assert analysis["elevation_stats"]["range"] == 0.0
    assert analysis["peaks"] == 0
    assert analysis["slope_analysis"]["max_slope"] == 0.0
    assert analysis["normal_stats"]["mean_tilt_deg"] == pytest.approx(0.0)


def test_analyzer_on_cliff():
    analysis = HeightmapAnalyzer().analyze(_cliff_field())

    assert analysis["elevation_stats"]["min"] == pytest.approx(-0.5)
    assert analysis["elevation_stats"]["max"] == pytest.approx(0.5)
    assert analysis["elevation_stats"]["range"] == pytest.approx(1.0)
    assert analysis["slope_analysis"]["max_slope"] > 0.0
    assert analysis["normal_stats"]["max_tilt_deg"] == pytest.approx(45.0)


def test_analyzer_raw_field_has_no_normal_stats():
    field = HeightField.zeros(4)
    analysis = HeightmapAnalyzer().analyze(field)

    assert "normal_stats" not in analysis


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
