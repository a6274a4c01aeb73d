"""Procedural landscape: fixed-point heights, tile colours and star field."""

from __future__ import annotations

import math
from typing import Sequence

from .sintable import zsin

TILE_SIZE = 0x01000000
LAND_MID_HEIGHT = 0x05000000
SEA_LEVEL = 0x05500000
LAUNCHPAD_ALTITUDE = 0x03500000
LAUNCHPAD_SIZE = 8

TILE_SCALE = 1.0 / TILE_SIZE
TERRAIN_MAX_HEIGHT = 10.0
WATER_THRESHOLD = 1e-2


def _pack_rgb(r: int, g: int, b: int) -> int:
    """Pack an 8-bit-per-channel colour into a 3-3-2 voxel pixel."""
    return (r & 0xE0) | ((g & 0xE0) >> 3) | ((b & 0xC0) >> 6)


COLOUR_SEA = _pack_rgb(0x3F, 0x3F, 0xFF)
COLOUR_SAND = _pack_rgb(0xFF, 0xFF, 0x00)
COLOUR_LAUNCHPAD = _pack_rgb(0x7F, 0x7F, 0x7F)
COLOUR_WAVE_CREST = _pack_rgb(0xBF, 0xBF, 0xFF)
COLOUR_STAR = _pack_rgb(0xFF, 0xFF, 0xFF)


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _round_half_away(v: float) -> int:
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


def bit_reverse(n: int) -> int:
    """Reverse the bit order of the low 16 bits of ``n``."""
    n &= 0xFFFF
    n = ((n & 0xAAAA) >> 1) | ((n & 0x5555) << 1)
    n = ((n & 0xCCCC) >> 2) | ((n & 0x3333) << 2)
    n = ((n & 0xF0F0) >> 4) | ((n & 0x0F0F) << 4)
    n = ((n & 0xFF00) >> 8) | ((n & 0x00FF) << 8)
    return n


def landscape_altitude(x: int, z: int) -> int:
    """Fixed-point altitude of the landscape (larger is lower) at ``(x, z)``."""
    r = _tdiv(zsin(x - 2 * z), 128)
    r += _tdiv(zsin(4 * x + 3 * z), 128)
    r += _tdiv(zsin(3 * z - 5 * x), 128)
    r += _tdiv(zsin(7 * x + 5 * z), 128)
    r += _tdiv(zsin(5 * x + 11 * z), 256)
    r += _tdiv(zsin(10 * x + 7 * z), 256)
    return LAND_MID_HEIGHT - r


def tile_colour(altitude: int) -> int:
    """Pixel colour of a tile whose corner has the given fixed-point altitude."""
    if altitude >= SEA_LEVEL - TILE_SIZE // 8:
        return COLOUR_SAND
    if altitude == LAUNCHPAD_ALTITUDE:
        return COLOUR_LAUNCHPAD
    r = ((altitude >> 2) & 1) * 128
    g = ((altitude >> 3) & 1) * 128 + 64
    return _pack_rgb(r, g, 0) | 0b00000100


def bilerp(corners: Sequence[Sequence[float]], local: Sequence[float]) -> float:
    """Bilinear interpolation of ``corners[i][j]`` at fractional ``local``."""
    u, v = local[0], local[1]
    a0 = corners[0][0] * (1.0 - u) + corners[1][0] * u
    a1 = corners[0][1] * (1.0 - u) + corners[1][1] * u
    return a0 * (1.0 - v) + a1 * v


def is_water(altitude: float) -> bool:
    """Whether a height above sea level counts as open water."""
    return altitude <= WATER_THRESHOLD


def altitude_raw(x: float, y: float) -> float:
    """Unclamped height above sea level, sampled at 1/1024 tile resolution."""
    step = TILE_SIZE // 1024
    altitude = landscape_altitude(
        _round_half_away(x * 1024) * step, _round_half_away(y * 1024) * step
    )
    return (SEA_LEVEL - altitude) * TILE_SCALE


def star_altitude(tx: int, ty: int) -> float:
    """Height of the star hanging over tile ``(tx, ty)``."""
    mixed = float(bit_reverse(tx)) * 3.0 + float(bit_reverse(ty)) * 7.0
    return math.sqrt(abs(math.fmod(mixed, 1987))) + TERRAIN_MAX_HEIGHT


class Terrain:
    """Height field sampler that caches the four corners of the last tile."""

    def __init__(self) -> None:
        self._tile: tuple[int, int] | None = None
        self._heights: list[list[float]] = [[0.0, 0.0], [0.0, 0.0]]
        self.current_colour: int = 0

    def _corner_altitude(self, tx: int, ty: int) -> int:
        if 0 <= tx < LAUNCHPAD_SIZE and 0 <= ty < LAUNCHPAD_SIZE:
            return LAUNCHPAD_ALTITUDE
        return min(landscape_altitude(tx * TILE_SIZE, ty * TILE_SIZE), SEA_LEVEL)

    def altitude(self, x: float, y: float) -> float:
        """Height above sea level at ``(x, y)``, never below zero."""
        tile = (math.floor(x), math.floor(y))
        if tile != self._tile:
            altitudes = [
                [self._corner_altitude(tile[0] + i, tile[1] + j) for j in range(2)]
                for i in range(2)
            ]
            self._heights = [
                [(SEA_LEVEL - a) * TILE_SCALE for a in row] for row in altitudes
            ]
            self.current_colour = tile_colour(altitudes[1][0])
            self._tile = tile
        return bilerp(self._heights, (x - tile[0], y - tile[1]))