"""
Tests for the individual pipeline stages: faults, normalization, normals.
"""

import math

import numpy as np
import pytest

from faultterrain.engine import HeightField
from faultterrain.errors import InvalidParameterError, TerrainError
from faultterrain.procgen.modules import (
    Fault, FaultGenerator, NormalEstimator, Normalizer, clamped_neighbors
)
from faultterrain.procgen.modules.faults import signed_distance


def _normalized(elevation):
    field = HeightField(np.array(elevation, dtype=np.float64))
    return Normalizer().normalize(field)


# Heightfield

def test_zeros_allocates_flat_grid():
    field = HeightField.zeros(5)

    assert field.size == 5
    assert field.shape == (5, 5)
    assert np.all(field.elevation == 0.0)
    assert not field.has_normals
    assert not field.is_normalized


@pytest.mark.parametrize("size", [1, 0, -2, 2.5, "4", True])
def test_zeros_rejects_bad_size(size):
    with pytest.raises(InvalidParameterError):
        HeightField.zeros(size)


def test_heightfield_requires_square_grid():
    with pytest.raises(InvalidParameterError):
        HeightField(np.zeros((3, 4)))


def test_heightfield_owns_its_elevations():
    raw = np.array([[0.0, 0.02], [0.04, 0.06]])
    field = HeightField(raw)
    Normalizer().normalize(field)

    assert not np.shares_memory(field.elevation, raw)
    assert raw.tolist() == [[0.0, 0.02], [0.04, 0.06]]
    assert raw.flags.writeable


# Faults

def test_fault_normal_vector():
    fault = Fault(point=(0.0, 0.0), angle=math.pi / 2)
    nx, ny = fault.normal_vector

    assert nx == pytest.approx(0.0, abs=1e-12)
    assert ny == pytest.approx(1.0)


def test_sampled_faults_within_bounds():
    generator = FaultGenerator(seed=5)

    for _ in range(200):
        fault = generator.sample_fault(10)
        assert 0.0 <= fault.point[0] < 10.0
        assert 0.0 <= fault.point[1] < 10.0
        assert 0.0 <= fault.angle < 2 * math.pi


def test_apply_fault_raises_and_lowers():
    generator = FaultGenerator(step=0.01)
    field = HeightField.zeros(4)

    generator.apply_fault(field, Fault(point=(0.5, 0.0), angle=0.0))

    assert np.all(field.elevation[0] == -0.01)
    assert np.all(field.elevation[1:] == 0.01)


def test_vertices_on_fault_line_unchanged():
    generator = FaultGenerator(step=0.01)
    field = HeightField.zeros(3)

    # Line i = 1 passes exactly through the middle row
    generator.apply_fault(field, Fault(point=(1.0, 0.0), angle=0.0))

    assert np.all(field.elevation[0] == -0.01)
    assert np.all(field.elevation[1] == 0.0)
    assert np.all(field.elevation[2] == 0.01)


def test_signed_distance_matches_dot_product():
    fault = Fault(point=(1.25, 2.5), angle=1.1)
    val = signed_distance(4, fault)
    nx, ny = fault.normal_vector

    for i in range(4):
        for j in range(4):
            expected = (i - 1.25) * nx + (j - 2.5) * ny
            assert val[i, j] == pytest.approx(expected)


def test_fault_step_is_constant():
    generator = FaultGenerator(step=0.01, seed=0)
    field = generator.generate(6, 30)

    # Each vertex moved by a whole number of steps
    steps = field.elevation / 0.01
    assert np.allclose(steps, np.round(steps), atol=1e-9)
    assert np.abs(field.elevation).max() <= 30 * 0.01 + 1e-12


def test_generate_zero_faults_is_flat():
    field = FaultGenerator(seed=1).generate(5, 0)
    assert np.all(field.elevation == 0.0)


def _cancelling_faults():
    # Both rows end one step up, reached in a different order
    return [
        Fault(point=(0.5, 0.0), angle=math.pi),
        Fault(point=(0.5, 0.0), angle=math.pi),
        Fault(point=(1.5, 0.0), angle=math.pi),
        Fault(point=(0.5, 0.0), angle=0.0),
        Fault(point=(0.5, 0.0), angle=0.0),
    ]


def test_equal_step_counts_give_equal_elevations():
    field = FaultGenerator(step=0.01).generate(2, 5, faults=_cancelling_faults())

    assert len(np.unique(field.elevation)) == 1
    assert field.elevation[0, 0] == 0.01


def test_cancelling_faults_normalize_to_flat():
    field = FaultGenerator(step=0.01).generate(2, 5, faults=_cancelling_faults())
    Normalizer().normalize(field)

    assert field.degenerate
    assert np.all(field.elevation == 0.0)


@pytest.mark.parametrize("seed", range(0, 300, 7))
def test_step_counts_are_exact_multiples(seed):
    field = FaultGenerator(step=0.01, seed=seed).generate(2, 9)
    steps = np.round(field.elevation / 0.01).astype(np.int64)

    assert np.array_equal(field.elevation, steps * 0.01)


@pytest.mark.parametrize("count", [-1, 2.5, "3", None])
def test_generate_rejects_bad_fault_count(count):
    with pytest.raises(InvalidParameterError):
        FaultGenerator(seed=1).generate(4, count)


def test_explicit_faults_still_check_fault_count():
    with pytest.raises(InvalidParameterError):
        FaultGenerator().generate(4, -1, faults=[Fault(point=(1.5, 1.5), angle=0.0)])


def test_generate_rejects_small_grid():
    with pytest.raises(InvalidParameterError):
        FaultGenerator(seed=1).generate(1, 3)


def test_invalid_step():
    with pytest.raises(InvalidParameterError):
        FaultGenerator(step=0.0)


# Normalizer

def test_normalize_centers_and_scales():
    field = _normalized([[0.0, 0.02], [0.04, 0.06]])

    assert field.min() == pytest.approx(-0.5)
    assert field.max() == pytest.approx(0.5)
    assert field.elevation[0, 1] == pytest.approx(-1.0 / 6.0)
    assert field.is_normalized
    assert not field.degenerate


def test_normalize_custom_scale():
    field = HeightField(np.array([[1.0, 2.0], [3.0, 5.0]]))
    Normalizer(scale=2.0).normalize(field)

    assert field.min() == pytest.approx(-1.0)
    assert field.max() == pytest.approx(1.0)


def test_normalize_flat_field_guard():
    field = _normalized([[0.03, 0.03], [0.03, 0.03]])

    assert field.degenerate
    assert np.all(field.elevation == 0.0)
    assert np.all(np.isfinite(field.elevation))


def test_normalized_field_is_frozen():
    field = _normalized([[0.0, 1.0], [2.0, 3.0]])

    with pytest.raises(ValueError):
        field.elevation[0, 0] = 10.0


def test_normalize_twice_fails():
    field = _normalized([[0.0, 1.0], [2.0, 3.0]])

    with pytest.raises(TerrainError):
        Normalizer().normalize(field)


def test_normalize_rejects_non_finite():
    field = HeightField(np.array([[np.nan, 0.0], [0.0, 1.0]]))

    with pytest.raises(TerrainError):
        Normalizer().normalize(field)


# Normals

def test_clamped_neighbors_on_two_by_two():
    elevation = np.array([[1.0, 2.0], [3.0, 4.0]])
    north, south, west, east = clamped_neighbors(elevation)

    assert north.tolist() == [[1.0, 2.0], [1.0, 2.0]]
    assert south.tolist() == [[3.0, 4.0], [3.0, 4.0]]
    assert west.tolist() == [[1.0, 1.0], [3.0, 3.0]]
    assert east.tolist() == [[2.0, 2.0], [4.0, 4.0]]


def test_normals_are_unit_and_point_up():
    field = FaultGenerator(seed=21).generate(10, 50)
    Normalizer().normalize(field)
    NormalEstimator().estimate(field)

    lengths = np.linalg.norm(field.normals, axis=-1)
    assert np.allclose(lengths, 1.0)
    assert np.all(field.normals[..., 2] > 0.0)


def test_normal_of_inclined_plane():
    # e = j / 3 - 0.5 rises along j with slope 1/3
    elevation = np.tile(np.arange(4, dtype=np.float64) / 3.0 - 0.5, (4, 1))
    field = _normalized(elevation)
    NormalEstimator().estimate(field)

    # Interior: east - west spans two steps
    expected = np.array([0.0, -2.0 / 3.0, 1.0])
    expected /= np.linalg.norm(expected)
    assert np.allclose(field.normals[1, 1], expected)

    # Edge: clamped, so only one step
    expected_edge = np.array([0.0, -1.0 / 3.0, 1.0])
    expected_edge /= np.linalg.norm(expected_edge)
    assert np.allclose(field.normals[1, 0], expected_edge)


def test_normals_require_normalized_field():
    field = HeightField.zeros(3)

    with pytest.raises(TerrainError):
        NormalEstimator().estimate(field)


def test_normals_computed_once():
    field = _normalized([[0.0, 1.0], [2.0, 3.0]])
    estimator = NormalEstimator()
    estimator.estimate(field)

    with pytest.raises(TerrainError):
        estimator.estimate(field)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
