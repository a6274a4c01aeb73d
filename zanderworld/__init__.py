"""Simulation core of a voxel landscape lander game: terrain, particles, scenery and ship."""

__version__ = "0.1.0"
__all__ = ["sintable", "terrain", "world", "particles", "objects", "ship", "game"]