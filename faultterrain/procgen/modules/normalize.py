"""
Elevation normalization.

Rescales raw fault elevations into a centered range of fixed width.
"""

import logging

import numpy as np

from ...config import NORMALIZED_SCALE
from ...engine.heightfield import HeightField
from ...errors import TerrainError

logger = logging.getLogger(__name__)


class Normalizer:
    """Centers and scales a height field so that max - min == scale."""

    def __init__(self, scale: float = NORMALIZED_SCALE):
        if not scale > 0 or not np.isfinite(scale):
            raise TerrainError(f"Normalization scale must be positive and finite, got {scale}")
        self.scale = float(scale)

    def normalize(self, field: HeightField) -> HeightField:
        """Normalize elevations in place and freeze the field."""

        if field.is_normalized:
            raise TerrainError("Height field is already normalized")

        elevation = field.elevation
        if not np.all(np.isfinite(elevation)):
            raise TerrainError("Height field contains non-finite elevations")

        hmax = float(elevation.max())
        hmin = float(elevation.min())

        if hmax == hmin:
            # Flat field: nothing to rescale
            elevation.fill(0.0)
            field.degenerate = True
            logger.info("Degenerate %dx%d height field (all elevations %.4f); flattened to 0",
                        field.size, field.size, hmax)
        else:
            mid = (hmax + hmin) / 2.0
            elevation -= mid
            elevation /= (hmax - hmin)
            if self.scale != 1.0:
                elevation *= self.scale

        field.freeze()
        return field
