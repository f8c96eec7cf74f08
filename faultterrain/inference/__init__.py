"""
HTTP service for terrain generation requests.
"""

from .api import create_app, main

__all__ = ["create_app", "main"]
