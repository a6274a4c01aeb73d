"""The whole simulation: world, terrain, scenery, particles and the ship."""

from __future__ import annotations

import random
from typing import Sequence

from .objects import ObjectMap
from .particles import ParticleSystem
from .ship import Controls, Ship
from .terrain import Terrain
from .world import World


class Game:
    """Ties the parts of the simulation together and steps them each frame."""

    def __init__(self, seed: int | None = None) -> None:
        self.rng = random.Random(seed)
        self.world = World()
        self.terrain = Terrain()
        self.particles = ParticleSystem(rng=self.rng)
        self.objects = ObjectMap(self.rng)
        self.ship = Ship(self.rng, hit_test=self._hit_objects)
        self.ship.autopilot.on_engage = self.reset

    def _hit_objects(self, position: Sequence[float]) -> bool:
        return self.objects.hit_and_destroy(position, self.terrain, self.particles)

    def reset(self) -> None:
        """Start a fresh round: new scenery, no particles, ship on the pad."""
        self.objects.reset()
        self.particles.clear()
        self.ship.reset()

    def update(self, dt: float, controls: Controls) -> None:
        """Advance the simulation by ``dt`` seconds."""
        self.world.zoom(controls.zoom, dt)
        self.ship.update(dt, controls, self.terrain, self.particles)
        self.world.follow(self.ship.position)
        self.particles.update(dt, self.terrain, self._hit_objects)