"""
Fault-line terrain synthesis.

Each fault is a random line through the grid; vertices on one side are
raised by a fixed step and vertices on the other side lowered by it.
Repeating this many times builds up plateaus and cliffs.
"""

import logging
import math
from typing import Iterable, NamedTuple, Optional, Tuple

import numpy as np

from ...config import FAULT_STEP, TWO_PI
from ...engine.heightfield import HeightField
from ...errors import InvalidParameterError

logger = logging.getLogger(__name__)


class Fault(NamedTuple):
    """A fault line through ``point`` whose normal points along ``angle``."""

    point: Tuple[float, float]
    angle: float

    @property
    def normal_vector(self) -> Tuple[float, float]:
        return (math.cos(self.angle), math.sin(self.angle))


def signed_distance(size: int, fault: Fault) -> np.ndarray:
    """Signed distance of every vertex (i, j) from the fault line."""

    coords = np.arange(size, dtype=np.float64)
    ii, jj = np.meshgrid(coords, coords, indexing="ij")
    nx, ny = fault.normal_vector
    px, py = fault.point
    return (ii - px) * nx + (jj - py) * ny


class FaultGenerator:
    """
    Builds raw height fields by repeated fault perturbation.

    Randomness comes from an injectable ``numpy.random.Generator`` so that
    generation is reproducible under a seed.
    """

    def __init__(
        self,
        step: float = FAULT_STEP,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None
    ):
        if not step > 0 or not math.isfinite(step):
            raise InvalidParameterError(f"Fault step must be a positive finite number, got {step}")

        self.step = float(step)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample_fault(self, size: int) -> Fault:
        """Sample a fault with a continuous point in the grid and a uniform angle."""

        x, y = self.rng.uniform(0.0, size, size=2)
        theta = self.rng.uniform(0.0, TWO_PI)
        return Fault(point=(float(x), float(y)), angle=float(theta))

    def fault_signs(self, size: int, fault: Fault) -> np.ndarray:
        """Per-vertex step direction of a fault: +1, -1, or 0 on the line."""
        return np.sign(signed_distance(size, fault)).astype(np.int64)

    def apply_fault(self, field: HeightField, fault: Fault) -> HeightField:
        """Raise the positive side of the fault and lower the negative side in place."""

        field.elevation += self.step * self.fault_signs(field.size, fault)
        return field

    def generate(
        self,
        size: int,
        fault_count: int,
        faults: Optional[Iterable[Fault]] = None
    ) -> HeightField:
        """
        Generate a raw height field.

        Steps are counted per vertex in integers and scaled once at the end,
        so vertices with equal net step counts get bit-equal elevations.

        Args:
            size: Grid size N (N x N vertices), at least 2
            fault_count: Number of faults to sample and apply
            faults: Explicit fault sequence; when given it replaces sampling

        Returns:
            HeightField with un-normalized elevations
        """

        field = HeightField.zeros(size)

        if isinstance(fault_count, bool) or not isinstance(fault_count, (int, np.integer)):
            raise InvalidParameterError(f"Fault count must be an integer, got {fault_count!r}")
        if fault_count < 0:
            raise InvalidParameterError(f"Fault count must be non-negative, got {fault_count}")

        if faults is None:
            faults = (self.sample_fault(size) for _ in range(int(fault_count)))

        counts = np.zeros(field.shape, dtype=np.int64)
        applied = 0
        for fault in faults:
            counts += self.fault_signs(size, fault)
            applied += 1

        field.elevation[...] = counts * self.step
        logger.debug("Applied %d faults to %dx%d grid", applied, size, size)
        return field
