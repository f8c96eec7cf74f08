"""
FastAPI server for fault-line terrain generation.

Provides REST API endpoints that turn (gridsize, faults) requests into
terrain meshes for browser and tool front ends.
"""

import argparse
import base64
import io
import logging
import time
from typing import Any, Dict, List, Optional

import numpy as np
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uvicorn

from .. import config
from ..engine.heightfield import HeightField
from ..engine.heightmap_analyzer import HeightmapAnalyzer
from ..errors import InvalidParameterError, TerrainError
from ..logging_config import setup_logging
from ..procgen.core import TerrainEngine
from ..procgen.grammar import GENERATION_SPEC, parse_generation_request

logger = logging.getLogger(__name__)


# Pydantic models for API
class TerrainRequest(BaseModel):
    # Raw form values; malformed input falls back to defaults
    gridsize: Any = Field(config.DEFAULT_GRIDSIZE, description="Grid size N (N x N vertices)")
    faults: Any = Field(config.DEFAULT_FAULTS, description="Number of faults to apply")
    seed: Optional[int] = Field(None, ge=0, description="Random seed for reproducible terrain")
    include_mesh: bool = Field(False, description="Include mesh attribute and index lists")
    return_image: bool = Field(False, description="Return base64-encoded PNG of the height field")


class TerrainResponse(BaseModel):
    gridsize: int
    faults: int
    seed: Optional[int] = None
    vertex_count: int
    triangle_count: int
    degenerate: bool
    heightfield_stats: Dict[str, Any]
    generation_time: float
    mesh: Optional[Dict[str, Any]] = None
    heightmap_image: Optional[str] = None  # Base64-encoded PNG


class HealthResponse(BaseModel):
    status: str
    max_gridsize: int
    max_faults: int


def create_app(
    engine: Optional[TerrainEngine] = None,
    cors_origins: List[str] = None
) -> FastAPI:
    """Create FastAPI application."""

    app = FastAPI(
        title="Fault Terrain API",
        description="Generate fault-line terrain meshes",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Configure CORS
    if cors_origins is None:
        cors_origins = ["*"]  # Allow all origins for development

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if engine is None:
        engine = TerrainEngine()
    analyzer = HeightmapAnalyzer()

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint."""

        return HealthResponse(
            status="healthy",
            max_gridsize=config.MAX_GRIDSIZE,
            max_faults=config.MAX_FAULTS
        )

    @app.get("/parameters")
    async def get_parameters():
        """Get generation parameter ranges and defaults."""

        return {
            "parameters": {
                name: {"min": min_val, "max": max_val, "default": default}
                for name, (min_val, max_val, default) in GENERATION_SPEC.params.items()
            },
            "fault_step": engine.step,
            "normalized_scale": engine.normalizer.scale
        }

    @app.post("/generate", response_model=TerrainResponse)
    def generate_terrain(request: TerrainRequest):
        """Generate a terrain mesh."""

        params = parse_generation_request(request.gridsize, request.faults)

        try:
            start_time = time.perf_counter()

            field = engine.generate_heightfield(params.gridsize, params.faults, seed=request.seed)
            mesh = engine.build_mesh(field)

            generation_time = time.perf_counter() - start_time

        except InvalidParameterError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except TerrainError as e:
            logger.exception("Terrain generation failed")
            raise HTTPException(status_code=500, detail=f"Generation failed: {str(e)}")

        response = TerrainResponse(
            gridsize=params.gridsize,
            faults=params.faults,
            seed=request.seed,
            vertex_count=mesh.vertex_count,
            triangle_count=mesh.triangle_count,
            degenerate=mesh.degenerate,
            heightfield_stats=analyzer.analyze(field),
            generation_time=generation_time
        )

        if request.include_mesh:
            response.mesh = mesh.to_dict()

        if request.return_image:
            response.heightmap_image = _heightfield_to_base64(field)

        return response

    return app


def _heightfield_to_base64(field: HeightField) -> str:
    """Convert a normalized height field to a base64-encoded PNG."""
    from PIL import Image

    elevation = field.elevation
    span = elevation.max() - elevation.min()
    if span > 0:
        normalized = (elevation - elevation.min()) / span
    else:
        normalized = np.full_like(elevation, 0.5)
    heightmap_8bit = (normalized * 255).astype(np.uint8)

    image = Image.fromarray(heightmap_8bit)

    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    buffer.seek(0)

    image_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
    return f"data:image/png;base64,{image_base64}"


def main():
    """CLI entry point for API server."""

    parser = argparse.ArgumentParser(description="Fault Terrain API Server")
    parser.add_argument("--host", default=config.API_HOST, help="Host to bind server")
    parser.add_argument("--port", type=int, default=config.API_PORT, help="Port to bind server")
    parser.add_argument("--color-mode", default="height", help="Vertex coloring (height or constant)")
    parser.add_argument("--log-level", default=None, help="Logging level")

    args = parser.parse_args()
    setup_logging(args.log_level)

    print("Starting Fault Terrain API server...")
    print(f"Server: http://{args.host}:{args.port}")
    print(f"Docs: http://{args.host}:{args.port}/docs")

    app = create_app(engine=TerrainEngine(color_mode=args.color_mode))

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="info"
    )


if __name__ == "__main__":
    main()
