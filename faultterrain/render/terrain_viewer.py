#!/usr/bin/env python3
"""
Real-time terrain viewer using Raylib.

Displays generated fault-line terrain as a 3D mesh with an orbiting camera.
Uses pure Python with pyray bindings (no CMake required).
"""

import argparse
import logging
import time
from typing import Dict, Optional

import numpy as np

try:
    import pyray as rl
    from raylib import ffi
    RAYLIB_AVAILABLE = True
except ImportError:
    RAYLIB_AVAILABLE = False

from .. import config
from ..compatibility.mesh_validator import MeshValidator
from ..engine.mesh_builder import Mesh
from ..errors import TerrainError
from ..logging_config import setup_logging
from ..procgen.core import TerrainEngine
from ..procgen.grammar import parse_generation_request

logger = logging.getLogger(__name__)


def mesh_to_raylib_arrays(mesh: Mesh, center: bool = True) -> Dict[str, np.ndarray]:
    """
    Convert a terrain mesh into flat raylib vertex buffers.

    The terrain is z-up; raylib is y-up, so (x, y, z) maps to (x, z, -y).
    That is a proper rotation, so counter-clockwise winding is preserved.
    """

    if mesh.vertex_count > config.MAX_RENDER_VERTICES:
        raise TerrainError(
            f"Mesh has {mesh.vertex_count} vertices; raylib supports at most "
            f"{config.MAX_RENDER_VERTICES} with 16-bit indices"
        )

    positions = mesh.positions.astype(np.float32)
    if center:
        extent = positions[:, :2].max(axis=0) + positions[:, :2].min(axis=0)
        positions[:, :2] -= extent / 2.0

    def to_y_up(v: np.ndarray) -> np.ndarray:
        return np.stack([v[:, 0], v[:, 2], -v[:, 1]], axis=1)

    colors = np.empty((mesh.vertex_count, 4), dtype=np.uint8)
    colors[:, :3] = np.round(np.clip(mesh.colors, 0.0, 1.0) * 255).astype(np.uint8)
    colors[:, 3] = 255

    return {
        "vertices": np.ascontiguousarray(to_y_up(positions), dtype=np.float32).ravel(),
        "normals": np.ascontiguousarray(to_y_up(mesh.normals), dtype=np.float32).ravel(),
        "colors": colors.ravel(),
        "indices": np.ascontiguousarray(mesh.flat_indices(), dtype=np.uint16),
    }


class TerrainViewer:
    """
    Real-time 3D terrain viewer.

    Features:
    - Orbiting camera
    - Regenerate terrain with a new seed
    - Adjustable grid size and fault count
    - Wireframe/solid rendering modes
    - Height-based coloring
    """

    def __init__(
        self,
        window_width: int = 1024,
        window_height: int = 768,
        gridsize: int = 64,
        faults: int = 200,
        cell_size: float = 1.0,
        height_scale: float = 16.0,
        seed: Optional[int] = None
    ):
        if not RAYLIB_AVAILABLE:
            raise ImportError("pyray is required. Install with: pip install raylib")

        self.window_width = window_width
        self.window_height = window_height
        self.engine = TerrainEngine(cell_size=cell_size, height_scale=height_scale)
        self.validator = MeshValidator()
        self.rng = np.random.default_rng(seed)

        request = parse_generation_request(gridsize, faults)
        self.gridsize = request.gridsize
        self.faults = request.faults

        # Terrain state; current_model is only ever replaced, never mutated
        self.current_model = None
        self.current_mesh: Optional[Mesh] = None
        self.wireframe_mode = False

        # Performance
        self.last_generation_time = 0.0

    def initialize(self):
        """Initialize the window, camera and first terrain."""

        rl.init_window(self.window_width, self.window_height, "Fault Terrain Viewer")
        rl.set_target_fps(60)

        distance = max(self.gridsize * self.engine.mesh_builder.cell_size, 4.0)
        self.camera = rl.Camera3D(
            rl.Vector3(0.0, distance * 0.6, distance),
            rl.Vector3(0.0, 0.0, 0.0),
            rl.Vector3(0.0, 1.0, 0.0),
            45.0,
            rl.CAMERA_PERSPECTIVE
        )

        self.generate_terrain(self.gridsize, self.faults)

        print("Terrain viewer initialized!")
        print("Controls:")
        print("  SPACE - Generate new terrain")
        print("  UP/DOWN - More/fewer faults")
        print("  LEFT/RIGHT - Smaller/larger grid")
        print("  T - Toggle wireframe")
        print("  ESC - Exit")

    def generate_terrain(self, gridsize, faults) -> bool:
        """Generate a new terrain and swap it in for display."""

        request = parse_generation_request(gridsize, faults)
        start_time = time.perf_counter()

        try:
            mesh = self.engine.generate_mesh(request.gridsize, request.faults, rng=self.rng)

            is_valid, errors = self.validator.validate(mesh)
            if not is_valid:
                raise TerrainError(f"Invalid mesh: {errors}")

            model = self._upload_mesh(mesh)

        except TerrainError as e:
            logger.error("Failed to generate terrain: %s", e)
            return False

        # Swap the displayed model with a single reassignment
        previous, self.current_model = self.current_model, model
        self.current_mesh = mesh
        self.gridsize, self.faults = request.gridsize, request.faults
        self.last_generation_time = time.perf_counter() - start_time

        if previous is not None:
            rl.unload_model(previous)

        logger.info("Displaying %dx%d terrain with %d faults", self.gridsize, self.gridsize, self.faults)
        return True

    def _upload_mesh(self, mesh: Mesh):
        """Copy mesh buffers into raylib-owned memory and upload to the GPU."""

        arrays = mesh_to_raylib_arrays(mesh)

        rl_mesh = rl.Mesh()
        rl_mesh.vertexCount = mesh.vertex_count
        rl_mesh.triangleCount = mesh.triangle_count
        rl_mesh.vertices = self._raylib_buffer(arrays["vertices"], "float *")
        rl_mesh.normals = self._raylib_buffer(arrays["normals"], "float *")
        rl_mesh.colors = self._raylib_buffer(arrays["colors"], "unsigned char *")
        rl_mesh.indices = self._raylib_buffer(arrays["indices"], "unsigned short *")

        rl.upload_mesh(rl_mesh, False)
        return rl.load_model_from_mesh(rl_mesh)

    @staticmethod
    def _raylib_buffer(array: np.ndarray, ctype: str):
        # raylib frees these with its own allocator on unload
        pointer = rl.mem_alloc(array.nbytes)
        ffi.memmove(pointer, ffi.from_buffer(array), array.nbytes)
        return ffi.cast(ctype, pointer)

    def handle_input(self):
        """Handle user input."""

        if rl.is_key_pressed(rl.KEY_SPACE):
            self.generate_terrain(self.gridsize, self.faults)

        if rl.is_key_pressed(rl.KEY_UP):
            self.generate_terrain(self.gridsize, min(self.faults + 50, config.MAX_FAULTS))
        if rl.is_key_pressed(rl.KEY_DOWN):
            self.generate_terrain(self.gridsize, max(self.faults - 50, 0))

        if rl.is_key_pressed(rl.KEY_RIGHT):
            self.generate_terrain(min(self.gridsize + 8, config.MAX_GRIDSIZE), self.faults)
        if rl.is_key_pressed(rl.KEY_LEFT):
            self.generate_terrain(max(self.gridsize - 8, config.MIN_GRIDSIZE), self.faults)

        if rl.is_key_pressed(rl.KEY_T):
            self.wireframe_mode = not self.wireframe_mode

    def render(self):
        """Render the scene."""

        rl.begin_drawing()
        rl.clear_background(rl.SKYBLUE)

        rl.begin_mode_3d(self.camera)

        # Flat terrain is not drawn
        if self.current_model is not None and not self.current_mesh.degenerate:
            if self.wireframe_mode:
                rl.draw_model_wires(self.current_model, rl.Vector3(0, 0, 0), 1.0, rl.DARKGREEN)
            else:
                rl.draw_model(self.current_model, rl.Vector3(0, 0, 0), 1.0, rl.WHITE)

        rl.draw_grid(20, 10.0)

        rl.end_mode_3d()

        # UI overlay
        rl.draw_text(f"Grid: {self.gridsize}x{self.gridsize}  Faults: {self.faults}", 10, 10, 20, rl.DARKGRAY)
        rl.draw_text(f"Generation time: {self.last_generation_time:.3f}s", 10, 35, 16, rl.DARKGRAY)
        rl.draw_text(f"FPS: {rl.get_fps()}", 10, 55, 16, rl.DARKGRAY)
        rl.draw_text(f"Mode: {'Wireframe' if self.wireframe_mode else 'Solid'}", 10, 75, 16, rl.DARKGRAY)

        rl.end_drawing()

    def run_main_loop(self):
        """Run the main rendering loop."""

        while not rl.window_should_close():
            self.handle_input()
            rl.update_camera(self.camera, rl.CAMERA_ORBITAL)
            self.render()

        if self.current_model is not None:
            rl.unload_model(self.current_model)
            self.current_model = None

        rl.close_window()
        print("Terrain viewer closed")


def main():
    """CLI entry point for terrain viewer."""

    parser = argparse.ArgumentParser(description="Fault Terrain Real-time Viewer")
    parser.add_argument("--width", type=int, default=1024, help="Window width")
    parser.add_argument("--height", type=int, default=768, help="Window height")
    parser.add_argument("--gridsize", default=64, help="Grid size N (N x N vertices)")
    parser.add_argument("--faults", default=200, help="Number of faults")
    parser.add_argument("--height-scale", type=float, default=16.0, help="Height scaling factor")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--log-level", default=None, help="Logging level")

    args = parser.parse_args()
    setup_logging(args.log_level)

    if not RAYLIB_AVAILABLE:
        print("Error: pyray not available")
        print("Install with: pip install raylib")
        return 1

    viewer = TerrainViewer(
        window_width=args.width,
        window_height=args.height,
        gridsize=args.gridsize,
        faults=args.faults,
        height_scale=args.height_scale,
        seed=args.seed
    )

    viewer.initialize()
    viewer.run_main_loop()

    return 0


if __name__ == "__main__":
    exit(main())
