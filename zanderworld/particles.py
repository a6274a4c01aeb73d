"""Particle effects: bullets, exhaust, sparks, debris, smoke and spray."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field
from typing import Callable, Iterator, Protocol, Sequence

from .terrain import _pack_rgb, is_water
from .world import WORLD_GRAVITY, rand_range

CAPACITY = 4096
TICK_SCALE = 1.0 / 12.0
VELOCITY_SCALE = 8.0 / float(0x01000000)
EXPLOSION_CLUSTERS = 3 * 4


class ParticleFlag(enum.IntFlag):
    """Behaviour switches carried by each particle."""

    NONE = 0x00
    COOL_DOWN = 0x01
    IS_ROCK = 0x02
    SPLASHES = 0x04
    BOUNCES = 0x08
    DROPS = 0x10
    DESTROYS = 0x20
    BIG_SPLASH = 0x40
    EXPLODES = 0x80


class ParticleType(enum.IntEnum):
    """Kinds of particle that can be spawned."""

    BULLET = 0
    EXHAUST = 1
    SMOKE = 2
    DEBRIS = 3
    SPARK = 4
    SPRAY = 5
    ROCK = 6


class _Ground(Protocol):
    def altitude(self, x: float, y: float) -> float: ...


@dataclass
class Particle:
    """A single moving point with a lifetime and a colour."""

    position: list[float]
    velocity: list[float]
    lifespan: float = 0.0
    colour: int = 0
    flags: ParticleFlag = ParticleFlag.NONE


def randomise_velocity(
    rng: random.Random, velocity: Sequence[float], amount: float
) -> list[float]:
    """Velocity plus a random vector of length at most ``amount``."""
    while True:
        direction = [rng.random() * 2.0 - 1.0 for _ in range(3)]
        if sum(d * d for d in direction) <= 1.0:
            break
    return [v + d * amount for v, d in zip(velocity, direction)]


_F = ParticleFlag


class ParticleSystem:
    """Fixed-capacity pool of particles."""

    def __init__(self, capacity: int = CAPACITY, rng: random.Random | None = None) -> None:
        self.capacity = capacity
        self.rng = rng if rng is not None else random.Random()
        self.particles: list[Particle] = []

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self.particles)

    def _lifespan(self, low: float, span: float) -> float:
        return rand_range(self.rng, low, low + span) * TICK_SCALE

    def add(
        self, position: Sequence[float], velocity: Sequence[float], kind: ParticleType
    ) -> Particle | None:
        """Spawn a particle; returns it, or None when the pool is full."""
        if len(self.particles) >= self.capacity:
            return None

        rng = self.rng
        particle = Particle(list(position), list(velocity))

        if kind is ParticleType.BULLET:
            particle.colour = _pack_rgb(0xFF, 0xFF, 0xAA)
            particle.lifespan = 20 * TICK_SCALE
            particle.flags = _F.SPLASHES | _F.BOUNCES | _F.DESTROYS | _F.BIG_SPLASH | _F.EXPLODES
        elif kind is ParticleType.EXHAUST:
            particle.colour = _pack_rgb(0xFF, 0xFF, 0xFF)
            particle.lifespan = self._lifespan(8, 8)
            particle.flags = _F.COOL_DOWN | _F.SPLASHES | _F.BOUNCES | _F.DROPS
            particle.velocity = randomise_velocity(rng, particle.velocity, 0x400000 * VELOCITY_SCALE)
        elif kind is ParticleType.DEBRIS:
            r, g, b = (rng.randint(1, 3) * 64 for _ in range(3))
            particle.colour = _pack_rgb(r, g, b)
            particle.lifespan = self._lifespan(15, 64)
            particle.flags = _F.SPLASHES | _F.BOUNCES | _F.DROPS
            particle.velocity = randomise_velocity(rng, particle.velocity, 0x400000 * VELOCITY_SCALE)
        elif kind is ParticleType.SPARK:
            particle.colour = _pack_rgb(0xFF, 0xFF, 0xFF)
            particle.lifespan = self._lifespan(8, 8)
            particle.flags = _F.COOL_DOWN | _F.SPLASHES | _F.BOUNCES | _F.DROPS
            particle.velocity = randomise_velocity(rng, particle.velocity, 0x1000000 * VELOCITY_SCALE)
        elif kind is ParticleType.SPRAY:
            b = (rng.randrange(2) + 2) * 64
            rg = rng.randrange(b)
            particle.colour = _pack_rgb(rg, rg, b)
            particle.lifespan = self._lifespan(20, 64)
            particle.flags = _F.DROPS
            particle.velocity = randomise_velocity(rng, particle.velocity, 0x400000 * VELOCITY_SCALE)
        elif kind is ParticleType.SMOKE:
            grey = rng.randint(1, 3) * 64
            particle.colour = _pack_rgb(grey, grey, grey)
            particle.lifespan = self._lifespan(15, 128)
            particle.flags = _F.BOUNCES
            particle.velocity[2] = 0x80000 * VELOCITY_SCALE
            particle.velocity = randomise_velocity(rng, particle.velocity, 0x80000 * VELOCITY_SCALE)
        elif kind is ParticleType.ROCK:
            particle.colour = _pack_rgb(0xFF, 0xFF, 0x55)
            particle.lifespan = self._lifespan(170, 32)
            particle.flags = (
                _F.SPLASHES | _F.BOUNCES | _F.DROPS | _F.DESTROYS | _F.BIG_SPLASH | _F.EXPLODES
            )
            particle.velocity = randomise_velocity(rng, particle.velocity, 0x400000 * VELOCITY_SCALE)

        self.particles.append(particle)
        return particle

    def add_splash(self, position: Sequence[float], big_splash: bool) -> None:
        """Throw up water spray, using at most half the free slots."""
        count = min(256 if big_splash else 16, (self.capacity - len(self.particles)) // 2)
        for _ in range(count):
            self.add(position, (0.0, 0.0, 1.0), ParticleType.SPRAY)

    def add_explosion(self, position: Sequence[float], clusters: int) -> None:
        """Spawn sparks, debris and smoke, using at most a quarter of the free slots."""
        clusters = min(clusters, (self.capacity - len(self.particles)) // 4)
        still = (0.0, 0.0, 0.0)
        for _ in range(clusters):
            self.add(position, still, ParticleType.SPARK)
            self.add(position, still, ParticleType.DEBRIS)
            self.add(position, still, ParticleType.SMOKE)
            self.add(position, still, ParticleType.SPARK)

    def delete(self, index: int) -> None:
        """Remove a particle by moving the last one into its slot."""
        if not 0 <= index < len(self.particles):
            return
        last = self.particles.pop()
        if index < len(self.particles):
            self.particles[index] = last

    def clear(self) -> None:
        """Remove every particle."""
        self.particles.clear()

    def update(
        self,
        dt: float,
        terrain: _Ground,
        hit_test: Callable[[Sequence[float]], bool] | None = None,
    ) -> None:
        """Advance every particle by ``dt`` seconds against the ground."""
        # Index-driven on purpose: deletions swap in the last particle, and
        # particles spawned during the pass are simulated in the same pass.
        p = 0
        while p < len(self.particles):
            particle = self.particles[p]

            particle.lifespan -= dt
            if particle.lifespan < 0:
                self.delete(p)
                continue

            pos, vel, flags = particle.position, particle.velocity, particle.flags
            for i in range(3):
                pos[i] += vel[i] * dt

            if flags & _F.DROPS:
                vel[2] -= WORLD_GRAVITY * dt

            ground = terrain.altitude(pos[0], pos[1])
            if pos[2] <= ground:
                pos[2] = ground

                if is_water(ground) and flags & _F.SPLASHES:
                    self.add_splash(pos, bool(flags & _F.BIG_SPLASH))
                    self.delete(p)
                    continue

                if not flags & _F.BOUNCES:
                    self.delete(p)
                    continue

                if flags & _F.EXPLODES:
                    self.add_explosion(pos, EXPLOSION_CLUSTERS)
                    self.delete(p)
                    continue

                vel[2] = abs(vel[2]) * 0.5
                vel[0] *= 0.75
                vel[1] *= 0.75

            if flags & _F.DESTROYS and hit_test is not None and hit_test(pos):
                self.delete(p)
                continue

            if flags & _F.COOL_DOWN:
                g = min(int(particle.lifespan * (20 / TICK_SCALE)), 255)
                b = min(int(particle.lifespan * (10 / TICK_SCALE)), 255)
                particle.colour = _pack_rgb(255, g, b)

            p += 1