"""World state shared by the simulation: zoom level, camera and voxel mapping."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Sequence

WORLD_GRAVITY = 4.0
DEFAULT_SCALE = 8.0
MIN_SCALE = 3.0
MAX_SCALE = 12.0

_CAMERA_LEAD = 16.0
_CAMERA_DROP = 56.0


def rand_range(rng: random.Random, inf: float, sup: float) -> float:
    """Uniform random value between ``inf`` and ``sup``."""
    return rng.random() * (sup - inf) + inf


def _round_half_away(v: float) -> int:
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


@dataclass
class World:
    """Camera position and zoom, and the mapping between world and voxel space."""

    width: int = 128
    depth: int = 128
    height: int = 64
    scale: float = DEFAULT_SCALE
    position: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])

    def foxel_from_world(self, position: Sequence[float]) -> tuple[float, float, float]:
        """Fractional voxel coordinates of a world position."""
        return (
            (position[0] - self.position[0]) * self.scale + self.width // 2,
            (position[1] - self.position[1]) * self.scale + self.depth // 2,
            (position[2] - self.position[2]) * self.scale,
        )

    def voxel_from_world(self, position: Sequence[float]) -> tuple[int, int, int]:
        """Nearest voxel to a world position."""
        fx, fy, fz = self.foxel_from_world(position)
        return _round_half_away(fx), _round_half_away(fy), _round_half_away(fz)

    def world_from_voxel(self, voxel: Sequence[int]) -> tuple[float, float, float]:
        """World position of a voxel coordinate."""
        return (
            (voxel[0] - self.width // 2) / self.scale + self.position[0],
            (voxel[1] - self.depth // 2) / self.scale + self.position[1],
            voxel[2] / self.scale + self.position[2],
        )

    def follow(self, ship_position: Sequence[float]) -> None:
        """Move the camera so that the ship sits in view."""
        self.position = [
            ship_position[0],
            ship_position[1] + _CAMERA_LEAD / self.scale,
            max(0.0, ship_position[2] - _CAMERA_DROP / self.scale),
        ]

    def zoom(self, axis: float, dt: float) -> None:
        """Change the zoom level by a stick deflection over ``dt`` seconds."""
        scaled = self.scale * (1.0 + axis * dt)
        self.scale = min(max(scaled, MIN_SCALE), MAX_SCALE)