"""
Parameter specification and generation request parsing.

This module defines:
- ParameterSpec: Validation and extraction of generation parameters
- GenerationRequest: The (gridsize, faults) pair handed to the pipeline
- parse_generation_request: Lenient parsing of user input with safe fallbacks
"""

import logging
import math
from typing import Any, Dict, List, NamedTuple, Tuple

from ..config import (
    DEFAULT_FAULTS, DEFAULT_GRIDSIZE, MAX_FAULTS, MAX_GRIDSIZE, MIN_GRIDSIZE
)

logger = logging.getLogger(__name__)


class ParameterSpec:
    """
    Specification for integer generation parameters.

    Each parameter has:
    - min_val: Minimum allowed value
    - max_val: Maximum allowed value
    - default: Fallback value for missing, malformed or out-of-range input
    """

    def __init__(self, params: Dict[str, Tuple[int, int, int]]):
        """
        Initialize parameter specification.

        Args:
            params: Dict mapping param_name -> (min_val, max_val, default)
        """
        self.params = params

    def validate(self, values: Dict[str, Any]) -> bool:
        """Check if all parameters are present, integral and in valid ranges."""

        for param_name, (min_val, max_val, _) in self.params.items():
            if param_name not in values:
                return False

            value = coerce_int(values[param_name])
            if value is None or not (min_val <= value <= max_val):
                return False

        return True

    def extract_params(self, values: Dict[str, Any]) -> Dict[str, int]:
        """Extract parameters, replacing unusable values with defaults."""

        result = {}
        for param_name, (min_val, max_val, default) in self.params.items():
            raw = values.get(param_name)
            value = coerce_int(raw)

            if value is None or not (min_val <= value <= max_val):
                if raw is not None:
                    logger.warning("Invalid %s=%r, falling back to %d", param_name, raw, default)
                value = default

            result[param_name] = value

        return result

    def get_param_names(self) -> List[str]:
        """Get list of parameter names."""
        return list(self.params.keys())

    def get_param_ranges(self) -> Dict[str, Tuple[int, int]]:
        """Get parameter ranges (min, max) for each parameter."""
        return {name: (min_val, max_val) for name, (min_val, max_val, _) in self.params.items()}


GENERATION_SPEC = ParameterSpec({
    "gridsize": (MIN_GRIDSIZE, MAX_GRIDSIZE, DEFAULT_GRIDSIZE),
    "faults": (0, MAX_FAULTS, DEFAULT_FAULTS),
})


class GenerationRequest(NamedTuple):
    gridsize: int
    faults: int


def coerce_int(value: Any):
    """
    Convert user input to an int, or None when it is not a whole number.

    Accepts ints, integral floats and numeric strings such as "12" or "12.0".
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None

    if isinstance(value, int):
        return value

    try:
        value = float(value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(value) or not value.is_integer():
        return None

    return int(value)


def parse_generation_request(gridsize: Any = None, faults: Any = None) -> GenerationRequest:
    """
    Parse a generation request from a form, CLI or HTTP body.

    Never raises: each field that is non-numeric or out of range falls back
    to its default (gridsize 2, faults 0).
    """

    params = GENERATION_SPEC.extract_params({"gridsize": gridsize, "faults": faults})
    return GenerationRequest(gridsize=params["gridsize"], faults=params["faults"])
