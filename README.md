# zanderworld

The simulation core of a small voxel lander game. A ship flies over an
endlessly tiling landscape whose height comes from a fixed-point sine table.
It fires bullets, trails exhaust, sets trees and buildings smoking and
splashes into the sea. The package holds the game state and the rules that
advance it one frame at a time, so that a renderer, an input layer or a test
can drive it. It has no dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `zanderworld.sintable`: `SINE_TABLE` holds 1024 signed 32-bit samples of
  one sine period, built with `math.sin`. `zsin(v)` looks up an angle where
  2**32 is one full turn, using bits 22 to 31 of `v`.
- `zanderworld.terrain`: `landscape_altitude(x, z)` gives the fixed-point
  landscape altitude, and `altitude_raw(x, y)` gives the unclamped height
  above sea level. `tile_colour`, `bilerp`, `is_water`, `bit_reverse` and
  `star_altitude` cover tile colours, interpolation, the water test and the
  height of the star over a tile. `Terrain.altitude(x, y)` interpolates the
  ground height between the four corners of a tile. The 8×8 tiles of the
  launch pad are flat, and nothing lies below sea level. The class also keeps
  the colour of the last tile it sampled in `current_colour`.
- `zanderworld.world`: `World` is the camera. It holds a voxel volume size
  (128×128×64 by default), a `scale` (8 by default, held between 3 and 12 by
  `zoom`) and a `position`. It converts positions with `foxel_from_world`,
  `voxel_from_world` and `world_from_voxel`, and `follow(ship_position)` moves
  it to keep the ship in view. `rand_range(rng, inf, sup)` draws a uniform
  value from a `random.Random`.
- `zanderworld.particles`: `ParticleSystem` is a pool of up to 4096
  `Particle`s. `add` spawns one of a `ParticleType` (bullet, exhaust, smoke,
  debris, spark, spray or rock), each with its own colour, lifespan and
  `ParticleFlag` behaviour. `add_splash` and `add_explosion` spawn bursts,
  capped by the free space in the pool. `delete` and `clear` remove particles.
  `update(dt, terrain, hit_test)` moves particles under gravity. Particles
  bounce, splash or explode on the ground, cool down, and can destroy objects
  through `hit_test`.
- `zanderworld.objects`: `ObjectMap` is a wrapping 256×256 grid of object ids.
  `reset` scatters trees, gazebos and buildings and stands three rockets next
  to the launch pad. `object_at` reads a tile, `destroy` turns an object into
  smoking remains and spawns explosions, and `hit_and_destroy(position,
  terrain, particles)` checks the nine tiles around a point against each
  object's `Hitbox`. Each `Model` gets its hitbox from `calculate_hitbox`.
- `zanderworld.ship`: `Ship.update(dt, controls, terrain, particles)` applies
  steering, damping, thrust with exhaust, gravity, landing and cannon fire.
  `Controls` carries `stick_x`, `stick_y`, `thrust`, `fire` and `zoom`.
  `Autopilot` takes over after 30 seconds of idle controls and flies at random
  for up to 300 seconds. `angle_diff`, `rotation_matrix` and `transform` are the
  helpers for angles and rotations.
- `zanderworld.game`: `Game(seed)` ties the parts together. `reset()` starts a
  fresh round, and `update(dt, controls)` advances one frame. When the
  autopilot engages, it resets the game.

## Example

```python
from zanderworld.game import Game
from zanderworld.ship import Controls

game = Game(seed=1)
for _ in range(30):
    game.update(1 / 30, Controls(thrust=1.0, fire=True))

print(game.ship.position)
print(len(game.particles))
```

## What it does not do

The package draws nothing and reads no input device. It has no voxel display,
no frame timer and no command to start a game. To play, a program has to
gather `Controls` from its own input source, call `Game.update` at its own
frame rate, and render the state it finds on `game.world`, `game.terrain`,
`game.objects`, `game.particles` and `game.ship`.