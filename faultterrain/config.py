"""
Configuration constants for fault-based terrain generation.

Module-level constants shared by the generation pipeline, the request
parser, the service and the viewer. A few runtime settings can be
overridden through environment variables:

    FAULTTERRAIN_LOG_LEVEL  logging level name (default INFO)
    FAULTTERRAIN_HOST       API bind host (default 0.0.0.0)
    FAULTTERRAIN_PORT       API bind port (default 8000)
"""

import math
import os
from typing import Tuple


# Fault perturbation step applied to each side of a fault line
FAULT_STEP: float = 0.01

# Width of the normalized elevation range; elevations land in
# [-NORMALIZED_SCALE / 2, NORMALIZED_SCALE / 2]
NORMALIZED_SCALE: float = 1.0

# Generation request limits and fallbacks
MIN_GRIDSIZE: int = 2
DEFAULT_GRIDSIZE: int = 2
MAX_GRIDSIZE: int = 256
DEFAULT_FAULTS: int = 0
MAX_FAULTS: int = 10000

# Raylib meshes index with unsigned shorts (indices 0..65535)
MAX_RENDER_VERTICES: int = 65536

# Mesh colors (RGB in [0, 1])
TERRAIN_COLOR: Tuple[float, float, float] = (0.8, 0.6, 0.4)
LOW_COLOR: Tuple[float, float, float] = (0.25, 0.35, 0.15)
HIGH_COLOR: Tuple[float, float, float] = (0.95, 0.92, 0.88)

UP_VECTOR: Tuple[float, float, float] = (0.0, 0.0, 1.0)

TWO_PI: float = 2.0 * math.pi

# Runtime settings
LOG_LEVEL: str = os.getenv("FAULTTERRAIN_LOG_LEVEL", "INFO")
API_HOST: str = os.getenv("FAULTTERRAIN_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("FAULTTERRAIN_PORT", "8000"))
