"""The player's lander: controls, autopilot demo mode and flight physics."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from .particles import ParticleSystem, ParticleType
from .world import WORLD_GRAVITY, rand_range

ENGINE_VECTOR = (0.0, 0.0, -1.0)
CANNON_VECTOR = (1.0, 0.0, 0.0)

YAW_SPEED = math.pi * 10.0
PITCH_MAX = math.pi * 0.55
THRUST_MAX = 30.0
EXHAUST_RATE = 0.1
EXHAUST_SPEED = 6.0
BULLET_SPEED = 8.0
DAMPING = 0.8
UNDERCARRIAGE = 0.5
BULLET_RECHARGE = 0.1
MAX_EXHAUST_PARTICLES = 100

START_POSITION = (3.5, 3.5, 2.0 + UNDERCARRIAGE)

IDLE_THRESHOLD = 0.01
AUTOPILOT_IDLE_DELAY = 30.0
AUTOPILOT_DURATION = 300.0
AUTOPILOT_RESTART_DELAY = 2.0
AUTOPILOT_COLLISION_PENALTY = 30.0
AUTOPILOT_STICK = 0.35
AUTOPILOT_THRUST = 0.35
AUTOPILOT_FIRE_WINDOW = 0.5

Matrix = tuple[tuple[float, float, float], ...]


class _Ground(Protocol):
    def altitude(self, x: float, y: float) -> float: ...


@dataclass(frozen=True)
class Controls:
    """One frame of pad input: left stick, throttle, fire and zoom."""

    stick_x: float = 0.0
    stick_y: float = 0.0
    thrust: float = 0.0
    fire: bool = False
    zoom: float = 0.0

    @property
    def idle(self) -> bool:
        """Whether the flight controls are all at rest."""
        return (
            abs(self.stick_x) <= IDLE_THRESHOLD
            and abs(self.stick_y) <= IDLE_THRESHOLD
            and abs(self.thrust) <= IDLE_THRESHOLD
            and not self.fire
        )


def angle_diff(to: float, from_: float) -> float:
    """Signed shortest turn from ``from_`` to ``to``, in ``[-pi, pi]``."""
    diff = math.fmod(to - from_, 2 * math.pi)
    if diff < -math.pi:
        diff += 2 * math.pi
    elif diff > math.pi:
        diff -= 2 * math.pi
    return diff


def _matmul(a: Matrix, b: Matrix) -> Matrix:
    return tuple(
        tuple(sum(a[r][k] * b[k][c] for k in range(3)) for c in range(3))
        for r in range(3)
    )


def rotation_matrix(rotation: Sequence[float]) -> Matrix:
    """Rotation by Euler angles (roll x, pitch y, yaw z), applied x then y then z."""
    ax, ay, az = rotation[0], rotation[1], rotation[2]
    cx, sx = math.cos(ax), math.sin(ax)
    cy, sy = math.cos(ay), math.sin(ay)
    cz, sz = math.cos(az), math.sin(az)
    rx = ((1.0, 0.0, 0.0), (0.0, cx, -sx), (0.0, sx, cx))
    ry = ((cy, 0.0, sy), (0.0, 1.0, 0.0), (-sy, 0.0, cy))
    rz = ((cz, -sz, 0.0), (sz, cz, 0.0), (0.0, 0.0, 1.0))
    return _matmul(rz, _matmul(ry, rx))


def transform(vector: Sequence[float], matrix: Matrix) -> tuple[float, float, float]:
    """Rotate a vector by a 3x3 matrix."""
    x, y, z = vector[0], vector[1], vector[2]
    return tuple(row[0] * x + row[1] * y + row[2] * z for row in matrix)  # type: ignore[return-value]


class Autopilot:
    """Demo mode that flies the ship about once the pad has been left idle."""

    def __init__(
        self,
        rng: random.Random | None = None,
        on_engage: Callable[[], None] | None = None,
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.on_engage = on_engage
        self.active = False
        self.reset_timer = AUTOPILOT_IDLE_DELAY
        self.heading_timer = 0.0
        self.stick = (0.0, 0.0)

    def update(self, dt: float, controls: Controls, collided: bool) -> Controls | None:
        """Controls to fly with this frame, or None when the player is in charge."""
        self.reset_timer -= dt

        if not controls.idle:
            self.reset_timer = AUTOPILOT_IDLE_DELAY
            self.active = False
            return None

        if not self.active:
            if self.reset_timer > 0:
                return None
            self.active = True
            if self.on_engage is not None:
                self.on_engage()
            self.stick = (0.0, 0.0)
            self.heading_timer = 2.0
            self.reset_timer = AUTOPILOT_DURATION

        if self.reset_timer < 0.0:
            self.active = False
            self.stick = (0.0, 0.0)
            self.reset_timer = AUTOPILOT_RESTART_DELAY
            return Controls(zoom=controls.zoom)

        self.heading_timer -= dt
        if self.heading_timer <= 0:
            self.stick = (
                rand_range(self.rng, -AUTOPILOT_STICK, AUTOPILOT_STICK),
                rand_range(self.rng, -AUTOPILOT_STICK, AUTOPILOT_STICK),
            )
            self.heading_timer = rand_range(self.rng, 1.0, 5.0)

        if collided:
            self.reset_timer -= AUTOPILOT_COLLISION_PENALTY
            self.stick = (0.0, 0.0)
            self.heading_timer = 2.0

        return Controls(
            stick_x=self.stick[0],
            stick_y=self.stick[1],
            thrust=AUTOPILOT_THRUST,
            fire=self.heading_timer < AUTOPILOT_FIRE_WINDOW,
            zoom=controls.zoom,
        )


class Ship:
    """The lander's position, attitude and velocity, and its weapons."""

    def __init__(
        self,
        rng: random.Random | None = None,
        hit_test: Callable[[Sequence[float]], bool] | None = None,
    ) -> None:
        self.autopilot = Autopilot(rng)
        self.hit_test = hit_test
        self.position: list[float] = list(START_POSITION)
        self.rotation: list[float] = [0.0, 0.0, 0.0]
        self.velocity: list[float] = [0.0, 0.0, 0.0]
        self.bullet_time = 0.0
        self.collided = False
        self.collision_point: tuple[float, float, float] | None = None
        self.debug_collision = False

    def reset(self) -> None:
        """Put the ship back on the launch pad at rest."""
        self.position = list(START_POSITION)
        self.rotation = [0.0, 0.0, 0.0]
        self.velocity = [0.0, 0.0, 0.0]

    def _handle_collision(self, particles: ParticleSystem) -> None:
        self.debug_collision = self.collided
        if not self.collided:
            return
        point = self.collision_point
        if point is not None:
            if self.hit_test is not None:
                self.hit_test(point)
            particles.add_splash(point, False)
        self.collided = False
        self.collision_point = None

    def update(
        self,
        dt: float,
        controls: Controls,
        terrain: _Ground,
        particles: ParticleSystem,
    ) -> None:
        """Advance the ship by ``dt`` seconds under the given controls."""
        piloted = self.autopilot.update(dt, controls, self.collided)
        if piloted is not None:
            controls = piloted

        self._handle_collision(particles)

        magnitude = math.hypot(controls.stick_x, controls.stick_y)
        direction = math.atan2(-controls.stick_y, controls.stick_x)

        self.rotation[1] = magnitude * PITCH_MAX
        yaw_speed = magnitude * YAW_SPEED * dt
        yaw = angle_diff(direction, self.rotation[2])
        self.rotation[2] += min(max(yaw, -yaw_speed), yaw_speed)

        damping = DAMPING ** dt
        self.velocity = [v * damping for v in self.velocity]

        matrix = rotation_matrix(self.rotation)
        ground = terrain.altitude(self.position[0], self.position[1])

        if controls.thrust > 0.0:
            engine = transform(ENGINE_VECTOR, matrix)
            max_thrust = THRUST_MAX / max(1.0, (self.position[2] - ground * 0.5) * 0.5)
            push = -controls.thrust * max_thrust * dt
            self.velocity = [v + e * push for v, e in zip(self.velocity, engine)]

            exhaust = [e * EXHAUST_SPEED + v for e, v in zip(engine, self.velocity)]
            nozzle = [e * UNDERCARRIAGE + p for e, p in zip(engine, self.position)]

            if dt > 0:
                rate = int(controls.thrust * EXHAUST_RATE / dt)
            else:
                rate = MAX_EXHAUST_PARTICLES
            for _ in range(min(max(rate, 1), MAX_EXHAUST_PARTICLES)):
                particles.add(nozzle, exhaust, ParticleType.EXHAUST)

        self.velocity[2] -= WORLD_GRAVITY * dt
        self.position = [p + v * dt for p, v in zip(self.position, self.velocity)]

        floor = ground + UNDERCARRIAGE
        if self.position[2] < floor:
            self.position[2] = floor
            self.velocity = [v * 0.5 for v in self.velocity]
            self.velocity[2] = abs(self.velocity[2])

        if controls.fire:
            self.bullet_time += dt
            cannon = transform(CANNON_VECTOR, matrix)
            bullet = [c * BULLET_SPEED + v for c, v in zip(cannon, self.velocity)]
            muzzle = [c + p for c, p in zip(cannon, self.position)]
            while self.bullet_time >= BULLET_RECHARGE:
                self.bullet_time -= BULLET_RECHARGE
                particles.add(muzzle, bullet, ParticleType.BULLET)
        else:
            self.bullet_time = BULLET_RECHARGE