"""
Height field analysis.

Summarizes generated terrain for service responses and CLI output.
"""

import numpy as np
from typing import Any, Dict
from scipy.ndimage import maximum_filter

from .heightfield import HeightField


class HeightmapAnalyzer:
    """
    Computes summary statistics of a height field.

    Provides elevation, slope, peak and surface-normal statistics.
    """

    def __init__(self, peak_neighborhood: int = 3):
        self.peak_neighborhood = peak_neighborhood

    def analyze(self, field: HeightField) -> Dict[str, Any]:
        """
        Analyze a height field.

        Args:
            field: Height field, normalized or raw

        Returns:
            Dictionary of elevation, slope, peak and normal statistics
        """

        elevation = field.elevation

        result = {
            "size": field.size,
            "degenerate": field.degenerate,
            "elevation_stats": self._analyze_elevation(elevation),
            "slope_analysis": self._analyze_slopes(elevation),
            "peaks": self._count_peaks(elevation),
        }

        if field.has_normals:
            result["normal_stats"] = self._analyze_normals(field.normals)

        return result

    def _analyze_elevation(self, elevation: np.ndarray) -> Dict[str, float]:
        """Analyze elevation statistics."""

        flat = elevation.ravel()

        return {
            "min": float(np.min(flat)),
            "max": float(np.max(flat)),
            "mean": float(np.mean(flat)),
            "median": float(np.median(flat)),
            "std": float(np.std(flat)),
            "range": float(np.max(flat) - np.min(flat)),
        }

    def _analyze_slopes(self, elevation: np.ndarray) -> Dict[str, float]:
        """Analyze slope magnitudes from central differences."""

        grad_i, grad_j = np.gradient(elevation)
        slope = np.sqrt(grad_i ** 2 + grad_j ** 2)

        return {
            "max_slope": float(np.max(slope)),
            "mean_slope": float(np.mean(slope)),
            "slope_std": float(np.std(slope)),
        }

    def _count_peaks(self, elevation: np.ndarray) -> int:
        """Count local maxima above the median elevation."""

        if np.all(elevation == elevation.flat[0]):
            return 0

        local_max = maximum_filter(elevation, size=self.peak_neighborhood, mode="nearest") == elevation
        significant = local_max & (elevation > np.median(elevation))
        return int(np.sum(significant))

    def _analyze_normals(self, normals: np.ndarray) -> Dict[str, float]:
        # Tilt of each normal away from straight up, in degrees
        tilt = np.degrees(np.arccos(np.clip(normals[..., 2], -1.0, 1.0)))

        return {
            "mean_tilt_deg": float(np.mean(tilt)),
            "max_tilt_deg": float(np.max(tilt)),
        }
