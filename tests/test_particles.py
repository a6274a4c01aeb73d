import math
import random

import pytest

from zanderworld.particles import (
    TICK_SCALE,
    Particle,
    ParticleFlag,
    ParticleSystem,
    ParticleType,
    randomise_velocity,
)
from zanderworld.terrain import COLOUR_STAR
from zanderworld.world import WORLD_GRAVITY


class FlatGround:
    def __init__(self, height):
        self.height = height

    def altitude(self, x, y):
        return self.height


def make_system(capacity=4096, seed=3):
    return ParticleSystem(capacity=capacity, rng=random.Random(seed))


def test_randomise_velocity_stays_within_amount():
    rng = random.Random(5)
    for _ in range(200):
        out = randomise_velocity(rng, [1.0, 2.0, 3.0], 0.5)
        assert math.dist(out, [1.0, 2.0, 3.0]) <= 0.5 + 1e-12


def test_randomise_velocity_zero_amount_is_identity():
    assert randomise_velocity(random.Random(1), [1.0, -1.0, 0.5], 0.0) == [1.0, -1.0, 0.5]


def test_bullet_properties_follow_source():
    system = make_system()
    bullet = system.add((1.0, 2.0, 3.0), (4.0, 0.0, 0.0), ParticleType.BULLET)
    assert bullet.position == [1.0, 2.0, 3.0]
    assert bullet.velocity == [4.0, 0.0, 0.0]
    assert bullet.lifespan == pytest.approx(20 * TICK_SCALE)
    assert bullet.flags == (
        ParticleFlag.SPLASHES
        | ParticleFlag.BOUNCES
        | ParticleFlag.DESTROYS
        | ParticleFlag.BIG_SPLASH
        | ParticleFlag.EXPLODES
    )


def test_smoke_only_bounces_and_rises():
    system = make_system()
    smoke = system.add((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), ParticleType.SMOKE)
    assert smoke.flags == ParticleFlag.BOUNCES
    assert smoke.velocity[2] > 0
    assert 15 * TICK_SCALE <= smoke.lifespan <= (15 + 128) * TICK_SCALE


def test_add_respects_capacity():
    system = make_system(capacity=3)
    results = [system.add((0, 0, 0), (0, 0, 0), ParticleType.BULLET) for _ in range(5)]
    assert len(system) == 3
    assert results[3] is None and results[4] is None


def test_splash_counts_and_cap():
    system = make_system()
    system.add_splash((0, 0, 0), False)
    assert len(system) == 16
    assert all(p.flags == ParticleFlag.DROPS for p in system)

    small = make_system(capacity=10)
    small.add_splash((0, 0, 0), True)
    assert len(small) == 5


def test_explosion_adds_four_per_cluster():
    system = make_system()
    system.add_explosion((0, 0, 0), 2)
    assert len(system) == 8
    assert ParticleFlag.COOL_DOWN in system.particles[0].flags
    assert system.particles[2].flags == ParticleFlag.BOUNCES


def test_explosion_capped_by_free_space():
    system = make_system(capacity=9)
    system.add_explosion((0, 0, 0), 10)
    assert len(system) == 8


def test_delete_moves_last_into_slot():
    system = make_system()
    for i in range(3):
        system.particles.append(Particle([float(i), 0.0, 0.0], [0.0, 0.0, 0.0]))
    system.delete(0)
    assert [p.position[0] for p in system] == [2.0, 1.0]
    system.delete(7)
    assert len(system) == 2
    system.delete(1)
    assert [p.position[0] for p in system] == [2.0]


def test_clear_empties_pool():
    system = make_system()
    system.add_explosion((0, 0, 0), 3)
    system.clear()
    assert len(system) == 0


def test_expired_particles_are_removed():
    system = make_system()
    system.particles.append(Particle([0.0, 0.0, 5.0], [0.0, 0.0, 0.0], lifespan=0.05))
    system.update(0.1, FlatGround(1.0))
    assert len(system) == 0


def test_dropping_particle_gains_downward_speed():
    system = make_system()
    system.particles.append(
        Particle([0.0, 0.0, 50.0], [0.0, 0.0, 0.0], lifespan=5.0, flags=ParticleFlag.DROPS)
    )
    system.update(0.1, FlatGround(1.0))
    assert system.particles[0].velocity[2] == pytest.approx(-WORLD_GRAVITY * 0.1)


def test_bouncing_particle_rebounds():
    system = make_system()
    system.particles.append(
        Particle([0.0, 0.0, 1.0], [2.0, 2.0, -4.0], lifespan=5.0, flags=ParticleFlag.BOUNCES)
    )
    system.update(0.1, FlatGround(1.0))
    p = system.particles[0]
    assert p.position[2] == 1.0
    assert p.velocity[2] == pytest.approx(2.0)
    assert p.velocity[0] == pytest.approx(1.5)


def test_non_bouncing_particle_dies_on_ground():
    system = make_system()
    system.particles.append(
        Particle([0.0, 0.0, 1.0], [0.0, 0.0, -1.0], lifespan=5.0, flags=ParticleFlag.DROPS)
    )
    system.update(0.1, FlatGround(1.0))
    assert len(system) == 0


def test_bullet_on_land_explodes():
    system = make_system()
    system.add((0.0, 0.0, 1.0), (0.0, 0.0, -1.0), ParticleType.BULLET)
    system.update(0.01, FlatGround(1.0))
    assert len(system) == 12 * 4
    assert all(ParticleFlag.DESTROYS not in p.flags for p in system)


def test_hit_test_removes_destroying_particle():
    system = make_system()
    system.add((0.0, 0.0, 5.0), (1.0, 0.0, 0.0), ParticleType.BULLET)
    seen = []

    def hit(position):
        seen.append(list(position))
        return True

    system.update(0.1, FlatGround(1.0), hit)
    assert len(system) == 0
    assert seen[0][0] == pytest.approx(0.1)


def test_cool_down_colour_is_white_when_young():
    system = make_system()
    system.particles.append(
        Particle([0.0, 0.0, 5.0], [0.0, 0.0, 0.0], lifespan=10.0, flags=ParticleFlag.COOL_DOWN)
    )
    system.update(0.01, FlatGround(1.0))
    assert system.particles[0].colour == COLOUR_STAR