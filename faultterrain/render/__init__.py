"""
Raylib front end for generated terrain.
"""
