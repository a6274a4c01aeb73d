"""Scenery objects scattered over the landscape, their hitboxes and destruction."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Protocol, Sequence

from .particles import ParticleSystem
from .terrain import _pack_rgb, is_water

MAP_SIZE = 256
EMPTY = 0xFF
DESTRUCTION_OFFSET = 12
OBJECTS_PLACED = 8192
PLACEMENT_ATTEMPTS = 16
ROCKET = 9
INTACT_CLUSTERS = 20 * 4
RUBBLE_CLUSTERS = 3 * 4


class _Ground(Protocol):
    def altitude(self, x: float, y: float) -> float: ...


@dataclass(frozen=True)
class Model:
    """A mesh: vertex positions and coloured triangle lists indexing them."""

    vertices: tuple[tuple[float, float, float], ...]
    surfaces: tuple[tuple[tuple[int, ...], int], ...] = ()


@dataclass(frozen=True)
class Hitbox:
    """Upright cylinder that encloses a model."""

    height: float = 0.0
    radius: float = 0.0


def _fixed(value: int) -> float:
    """Signed 8.24 fixed-point word to a float."""
    if value & 0x80000000:
        value -= 1 << 32
    return value / 0x01000000


def _model(
    vertices: Sequence[tuple[int, int, int]],
    surfaces: Sequence[tuple[tuple[int, ...], tuple[int, int, int]]],
) -> Model:
    return Model(
        vertices=tuple((_fixed(x), _fixed(y), -_fixed(z)) for x, y, z in vertices),
        surfaces=tuple((tuple(idx), _pack_rgb(*rgb)) for idx, rgb in surfaces),
    )


SMALL_LEAFY_TREE = _model(
    [
        (0x00300000, 0x00300000, 0xFE800000),
        (0xFFD9999A, 0x00000000, 0x00000000),
        (0x00266666, 0x00000000, 0x00000000),
        (0x00000000, 0xFF400000, 0xFEF33334),
        (0x00800000, 0xFF800000, 0xFF400000),
        (0xFF400000, 0xFFD55556, 0xFECCCCCD),
        (0xFF800000, 0x00400000, 0xFEA66667),
        (0x00800000, 0x002AAAAA, 0xFE59999A),
        (0x00C00000, 0xFFC00000, 0xFEA66667),
        (0xFFA00000, 0x00999999, 0xFECCCCCD),
        (0x00C00000, 0x00C00000, 0xFF400000),
    ],
    [
        ((0, 9, 10), (0, 192, 0)),
        ((0, 1, 2), (192, 0, 0)),
        ((0, 3, 4, 0, 5, 6, 0, 7, 8), (0, 255, 0)),
    ],
)

TALL_LEAFY_TREE = _model(
    [
        (0x0036DB6D, 0x00300000, 0xFD733334),
        (0xFFD00000, 0x00000000, 0x00000000),
        (0x00300000, 0x00000000, 0x00000000),
        (0x00000000, 0xFF400000, 0xFE0CCCCD),
        (0x00800000, 0xFF800000, 0xFE59999A),
        (0xFF533334, 0xFFC92493, 0xFE333334),
        (0xFF400000, 0x00600000, 0xFEA66667),
        (0x00000000, 0xFF666667, 0xFF19999A),
        (0xFF800000, 0xFFA00000, 0xFF400000),
        (0xFFA00000, 0x00999999, 0xFE800000),
        (0x00C00000, 0x00C00000, 0xFECCCCCD),
        (0xFFB33334, 0x00E66666, 0xFF19999A),
        (0x00800000, 0x00C00000, 0xFF400000),
        (0x00300000, 0x00300000, 0xFE59999A),
    ],
    [
        ((0, 1, 2), (192, 0, 0)),
        ((0, 9, 10, 0, 5, 6, 13, 7, 8), (0, 192, 0)),
        ((13, 11, 12, 0, 3, 4), (0, 255, 0)),
    ],
)

GAZEBO = _model(
    [
        (0x00000000, 0x00000000, 0xFF000000),
        (0xFF800000, 0x00800000, 0xFF400000),
        (0xFF800000, 0xFF800000, 0xFF400000),
        (0x00800000, 0xFF800000, 0xFF400000),
        (0x00800000, 0x00800000, 0xFF400000),
        (0xFF800000, 0x00800000, 0x01000000),
        (0xFF800000, 0xFF800000, 0x01000000),
        (0x00800000, 0xFF800000, 0x01000000),
        (0x00800000, 0x00800000, 0x01000000),
        (0xFF99999A, 0x00800000, 0xFF400000),
        (0xFF99999A, 0xFF800000, 0xFF400000),
        (0x00666666, 0xFF800000, 0xFF400000),
        (0x00666666, 0x00800000, 0xFF400000),
    ],
    [
        ((1, 5, 9, 2, 6, 10, 3, 7, 11, 4, 8, 12), (192, 192, 192)),
        ((0, 1, 2, 0, 3, 4), (96, 96, 0)),
        ((0, 1, 4, 0, 2, 3), (255, 0, 0)),
    ],
)

FIR_TREE = _model(
    [
        (0xFFA00000, 0xFFC92493, 0xFFC92493),
        (0x00600000, 0xFFC92493, 0xFFC92493),
        (0x00000000, 0x0036DB6D, 0xFE333334),
        (0x00266666, 0x00000000, 0x00000000),
        (0xFFD9999A, 0x00000000, 0x00000000),
    ],
    [
        ((2, 3, 4), (192, 0, 0)),
        ((0, 1, 2), (0, 192, 0)),
    ],
)

BUILDING = _model(
    [
        (0xFF19999A, 0x00000000, 0xFF266667),
        (0xFF400000, 0x00000000, 0xFF266667),
        (0x00C00000, 0x00000000, 0xFF266667),
        (0x00E66666, 0x00000000, 0xFF266667),
        (0xFF19999A, 0x00A66666, 0xFF8CCCCD),
        (0xFF19999A, 0xFF59999A, 0xFF8CCCCD),
        (0x00E66666, 0x00A66666, 0xFF8CCCCD),
        (0x00E66666, 0xFF59999A, 0xFF8CCCCD),
        (0xFF400000, 0x00800000, 0xFF666667),
        (0xFF400000, 0xFF800000, 0xFF666667),
        (0x00C00000, 0x00800000, 0xFF666667),
        (0x00C00000, 0xFF800000, 0xFF666667),
        (0xFF400000, 0x00800000, 0x01000000),
        (0xFF400000, 0xFF800000, 0x01000000),
        (0x00C00000, 0x00800000, 0x01000000),
        (0x00C00000, 0xFF800000, 0x01000000),
    ],
    [
        ((0, 4, 6, 0, 3, 6), (192, 0, 0)),
        (
            (1, 8, 9, 2, 10, 11, 8, 12, 13, 8, 9, 13, 10, 14, 15, 10, 11, 15,
             9, 13, 15, 9, 11, 15),
            (192, 192, 192),
        ),
        ((0, 5, 7, 0, 3, 7), (255, 0, 0)),
    ],
)

ROCKET_MODEL = _model(
    [
        (0x00000000, 0x00000000, 0xFE400000),
        (0xFFC80000, 0x00380000, 0xFFD745D2),
        (0xFFC80000, 0xFFC80000, 0xFFD745D2),
        (0x00380000, 0x00380000, 0xFFD745D2),
        (0x00380000, 0xFFC80000, 0xFFD745D2),
        (0xFF900000, 0x00700000, 0x00000000),
        (0xFF900000, 0xFF900000, 0x00000000),
        (0x00700000, 0x00700000, 0x00000000),
        (0x00700000, 0xFF900000, 0x00000000),
        (0xFFE40000, 0x001C0000, 0xFF071C72),
        (0xFFE40000, 0xFFE40000, 0xFF071C72),
        (0x001C0000, 0x001C0000, 0xFF071C72),
        (0x001C0000, 0xFFE40000, 0xFF071C72),
    ],
    [
        ((9, 1, 5, 11, 3, 7, 10, 2, 6, 12, 4, 8), (255, 255, 0)),
        ((0, 1, 3, 0, 2, 4, 0, 1, 2, 3, 0, 4), (255, 0, 0)),
    ],
)

SMOKING_REMAINS_LEFT = _model(
    [
        (0xFFD9999A, 0x00000000, 0x00000000),
        (0x00266666, 0x00000000, 0x00000000),
        (0x002B3333, 0x00000000, 0xFFC00000),
        (0x00300000, 0x00000000, 0xFF800000),
        (0xFFD55556, 0x00000000, 0xFECCCCCD),
    ],
    [((0, 1, 3, 2, 3, 4), (192, 127, 127))],
)

SMOKING_REMAINS_RIGHT = _model(
    [
        (0x002AAAAA, 0x00000000, 0x00000000),
        (0xFFD55556, 0x00000000, 0x00000000),
        (0xFFD4CCCD, 0x00000000, 0xFFD00000),
        (0xFFD00000, 0x00000000, 0xFFA00000),
        (0x002AAAAA, 0x00000000, 0xFEA66667),
    ],
    [((0, 1, 3, 2, 3, 4), (192, 127, 127))],
)

SMOKING_BUILDING = _model(
    [
        (0xFF400000, 0x00800000, 0x01000001),
        (0xFF400000, 0xFF800000, 0x01000001),
        (0x00C00000, 0x00800000, 0x01000001),
        (0x00C00000, 0xFF800000, 0x01000001),
        (0xFF400000, 0x00800000, 0xFF99999A),
        (0x00C00000, 0xFF800000, 0xFFB33334),
    ],
    [
        (
            (0, 1, 2, 1, 2, 3, 0, 2, 4, 0, 1, 4, 2, 3, 5, 1, 3, 5),
            (127, 127, 127),
        )
    ],
)

SMOKING_GAZEBO = _model(
    [
        (0x00000000, 0xFFF00000, 0xFF8CCCCD),
        (0x00199999, 0xFFF00000, 0xFF8CCCCD),
        (0x00800000, 0x00800000, 0x00000000),
        (0xFF800000, 0x00800000, 0x00000000),
        (0x00800000, 0xFF800000, 0x00000000),
        (0xFF800000, 0xFF800000, 0x00000000),
    ],
    [((0, 1, 2, 0, 1, 3, 0, 1, 4, 0, 1, 5), (127, 127, 127))],
)

OBJECT_MODELS: tuple[Model | None, ...] = (
    None,
    SMALL_LEAFY_TREE,
    TALL_LEAFY_TREE,
    SMALL_LEAFY_TREE,
    SMALL_LEAFY_TREE,
    GAZEBO,
    TALL_LEAFY_TREE,
    FIR_TREE,
    BUILDING,
    ROCKET_MODEL,
    ROCKET_MODEL,
    ROCKET_MODEL,
    ROCKET_MODEL,
    SMOKING_REMAINS_RIGHT,
    SMOKING_REMAINS_LEFT,
    SMOKING_REMAINS_LEFT,
    SMOKING_REMAINS_LEFT,
    SMOKING_GAZEBO,
    SMOKING_REMAINS_RIGHT,
    SMOKING_REMAINS_RIGHT,
    SMOKING_BUILDING,
    SMOKING_REMAINS_RIGHT,
    SMOKING_REMAINS_LEFT,
    SMOKING_REMAINS_LEFT,
)
"""Models by object id; ids at or past ``DESTRUCTION_OFFSET`` are wreckage."""


def calculate_hitbox(model: Model | None) -> Hitbox:
    """Smallest upright cylinder from the ground that holds every vertex."""
    if model is None:
        return Hitbox()
    height = max((v[2] for v in model.vertices), default=0.0)
    radius = max((math.hypot(v[0], v[1]) for v in model.vertices), default=0.0)
    return Hitbox(max(0.0, height), max(0.0, radius))


HITBOXES: tuple[Hitbox, ...] = tuple(calculate_hitbox(m) for m in OBJECT_MODELS)


def _round_half_away(v: float) -> int:
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


class ObjectMap:
    """A wrapping 256 by 256 grid holding one object id per tile."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.cells: list[bytearray] = []
        self.reset()

    def reset(self) -> None:
        """Scatter fresh scenery and stand rockets beside the launch pad."""
        rng = self.rng
        self.cells = [bytearray([EMPTY] * MAP_SIZE) for _ in range(MAP_SIZE)]
        for _ in range(OBJECTS_PLACED):
            for _ in range(PLACEMENT_ATTEMPTS):
                x = rng.randrange(MAP_SIZE)
                y = rng.randrange(MAP_SIZE)
                if x >= 8 and y >= 9 and self.cells[y][x] == EMPTY:
                    self.cells[y][x] = rng.randrange(8) + 1
                    break
        for row in range(1, 4):
            self.cells[row][7] = ROCKET

    def object_at(self, x: int, y: int) -> int:
        """Object id on tile ``(x, y)``, with coordinates wrapping round the map."""
        return self.cells[y & 0xFF][x & 0xFF]

    def _random_cylinder(self, height: float, radius: float) -> tuple[float, float, float]:
        rng = self.rng
        while True:
            cx, cy = rng.random(), rng.random()
            if cx * cx + cy * cy <= 1.0:
                break
        return cx * radius, cy * radius, rng.random() * height

    def destroy(
        self, x: int, y: int, position: Sequence[float], particles: ParticleSystem
    ) -> bool:
        """Blow up the object on a tile, leaving wreckage; False if nothing was there."""
        x &= 0xFF
        y &= 0xFF
        obj = self.cells[y][x]
        if obj >= len(OBJECT_MODELS) or OBJECT_MODELS[obj] is None:
            return False

        if obj < len(OBJECT_MODELS) - DESTRUCTION_OFFSET:
            self.cells[y][x] = obj + DESTRUCTION_OFFSET
            clusters = INTACT_CLUSTERS
        else:
            clusters = RUBBLE_CLUSTERS

        height = HITBOXES[obj].height * 0.8
        radius = HITBOXES[obj].radius * 0.5
        for _ in range(clusters):
            offset = self._random_cylinder(height, radius)
            source = [p + o for p, o in zip(position, offset)]
            particles.add_explosion(source, 2)
        return True

    def hit_and_destroy(
        self, position: Sequence[float], terrain: _Ground, particles: ParticleSystem
    ) -> bool:
        """Destroy the first object whose hitbox holds ``position``; True on a hit."""
        cx = _round_half_away(position[0])
        cy = _round_half_away(position[1])
        for y in range(cy - 1, cy + 2):
            for x in range(cx - 1, cx + 2):
                obj = self.object_at(x, y)
                if obj >= len(OBJECT_MODELS) or not HITBOXES[obj].radius:
                    continue
                hitbox = HITBOXES[obj]
                ground = terrain.altitude(float(x), float(y))
                if is_water(ground):
                    continue
                if position[2] > ground + hitbox.height:
                    continue
                dx = x - position[0]
                dy = y - position[1]
                if dx * dx + dy * dy <= hitbox.radius * hitbox.radius:
                    self.destroy(x, y, (float(x), float(y), ground), particles)
                    return True
        return False