import math
import random

import pytest

from zanderworld.particles import ParticleFlag, ParticleSystem, ParticleType
from zanderworld.ship import (
    AUTOPILOT_DURATION,
    AUTOPILOT_RESTART_DELAY,
    AUTOPILOT_THRUST,
    AUTOPILOT_IDLE_DELAY,
    PITCH_MAX,
    START_POSITION,
    UNDERCARRIAGE,
    Autopilot,
    Controls,
    Ship,
    angle_diff,
    rotation_matrix,
    transform,
)


class FlatGround:
    def __init__(self, height: float) -> None:
        self.height = height

    def altitude(self, x: float, y: float) -> float:
        return self.height


def _length(v):
    return math.sqrt(sum(c * c for c in v))


@pytest.mark.parametrize(
    "to, from_",
    [(0.5, 0.0), (0.0, 2 * math.pi - 0.1), (-3.0, 3.0), (10.0, -7.5), (1.0, 1.0)],
)
def test_angle_diff_is_shortest_equivalent_turn(to, from_):
    diff = angle_diff(to, from_)
    assert -math.pi <= diff <= math.pi
    turns = (to - from_ - diff) / (2 * math.pi)
    assert turns == pytest.approx(round(turns), abs=1e-9)


def test_angle_diff_small_turn_unchanged():
    assert angle_diff(0.5, 0.0) == pytest.approx(0.5)


def test_zero_rotation_is_identity():
    assert transform((1.0, 2.0, 3.0), rotation_matrix((0.0, 0.0, 0.0))) == pytest.approx(
        (1.0, 2.0, 3.0)
    )


def test_rotation_preserves_length():
    matrix = rotation_matrix((0.3, -1.1, 2.4))
    vector = (1.0, -2.0, 0.5)
    assert _length(transform(vector, matrix)) == pytest.approx(_length(vector))


def test_yaw_turns_cannon_in_plane():
    result = transform((1.0, 0.0, 0.0), rotation_matrix((0.0, 0.0, math.pi / 2)))
    assert result == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)


def test_controls_idle():
    assert Controls().idle
    assert not Controls(fire=True).idle
    assert not Controls(stick_x=0.5).idle


def test_autopilot_waits_while_player_active():
    autopilot = Autopilot(random.Random(1))
    assert autopilot.update(5.0, Controls(thrust=1.0), False) is None
    assert autopilot.active is False
    assert autopilot.reset_timer == AUTOPILOT_IDLE_DELAY


def test_autopilot_does_not_engage_before_delay():
    autopilot = Autopilot(random.Random(1))
    assert autopilot.update(AUTOPILOT_IDLE_DELAY / 2, Controls(), False) is None
    assert autopilot.active is False


def test_autopilot_collision_penalty():
    a = Autopilot(random.Random(3))
    b = Autopilot(random.Random(3))
    for pilot in (a, b):
        pilot.update(AUTOPILOT_IDLE_DELAY, Controls(), False)
    result = a.update(1.0, Controls(), True)
    b.update(1.0, Controls(), False)
    assert a.reset_timer == pytest.approx(b.reset_timer - 30.0)
    assert (result.stick_x, result.stick_y) == (0.0, 0.0)


def test_autopilot_hands_back_after_duration():
    autopilot = Autopilot(random.Random(2))
    autopilot.update(AUTOPILOT_IDLE_DELAY, Controls(), False)
    result = autopilot.update(AUTOPILOT_DURATION + 1.0, Controls(), False)
    assert result == Controls()
    assert autopilot.active is False
    assert autopilot.reset_timer == AUTOPILOT_RESTART_DELAY


def test_ship_reset_restores_start():
    ship = Ship(random.Random(0))
    ship.position = [9.0, 9.0, 9.0]
    ship.velocity = [1.0, 1.0, 1.0]
    ship.rotation = [0.1, 0.2, 0.3]
    ship.reset()
    assert ship.position == list(START_POSITION)
    assert ship.velocity == [0.0, 0.0, 0.0]
    assert ship.rotation == [0.0, 0.0, 0.0]


def test_ship_stays_above_ground():
    ship = Ship(random.Random(0))
    particles = ParticleSystem(rng=random.Random(0))
    ground = FlatGround(1.0)
    for _ in range(50):
        ship.update(0.1, Controls(), ground, particles)
        assert ship.position[2] >= 1.0 + UNDERCARRIAGE - 1e-9
    assert len(particles) == 0


def test_thrust_emits_exhaust_and_lifts():
    ship = Ship(random.Random(0))
    particles = ParticleSystem(rng=random.Random(0))
    start_z = ship.position[2]
    ship.update(0.01, Controls(thrust=1.0), FlatGround(2.0), particles)
    assert 1 <= len(particles) <= 100
    assert all(p.flags & ParticleFlag.COOL_DOWN for p in particles)
    assert ship.velocity[2] > 0
    assert ship.position[2] > start_z


def test_full_stick_sets_max_pitch():
    ship = Ship(random.Random(0))
    particles = ParticleSystem(rng=random.Random(0))
    ship.update(0.01, Controls(stick_x=1.0), FlatGround(2.0), particles)
    assert ship.rotation[1] == pytest.approx(PITCH_MAX)


def test_fire_spawns_bullet():
    ship = Ship(random.Random(0))
    particles = ParticleSystem(rng=random.Random(0))
    ship.update(0.1, Controls(fire=True), FlatGround(2.0), particles)
    assert len(particles) == 1
    bullet = next(iter(particles))
    assert bullet.flags & ParticleFlag.DESTROYS
    assert bullet.velocity[0] > 0


def test_collision_splashes_and_hits():
    hits = []
    ship = Ship(random.Random(0), hit_test=lambda pos: hits.append(tuple(pos)) or True)
    particles = ParticleSystem(rng=random.Random(0))
    point = (10.0, 10.0, 0.0)
    ship.collided = True
    ship.collision_point = point
    ship.update(0.01, Controls(), FlatGround(2.0), particles)
    assert hits == [point]
    assert len(particles) == 16
    assert all(p.flags == ParticleFlag.DROPS for p in particles)
    assert ship.collided is False
    assert ship.collision_point is None
    assert ship.debug_collision is True


def test_collision_without_point_adds_nothing():
    ship = Ship(random.Random(0))
    particles = ParticleSystem(rng=random.Random(0))
    ship.collided = True
    ship.update(0.01, Controls(), FlatGround(2.0), particles)
    assert len(particles) == 0
    assert ship.collided is False


def test_particle_type_used_for_exhaust():
    ship = Ship(random.Random(0))
    particles = ParticleSystem(rng=random.Random(0), capacity=1)
    ship.update(0.001, Controls(thrust=1.0), FlatGround(2.0), particles)
    assert len(particles) == 1
    assert particles.add((0, 0, 0), (0, 0, 0), ParticleType.SPARK) is None