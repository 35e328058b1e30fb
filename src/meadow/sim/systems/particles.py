from __future__ import annotations

from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..core.entities import spawn_bee_pollen

if TYPE_CHECKING:
    from ..core.world import World


def move_pollen(world: World) -> None:
    """Drift ambient pollen; particles leaving the canvas re-enter from the far edge."""
    config = world.config.particles
    rng = world.rng
    side = config.pollen_recycle_side
    for particle in world.pollen:
        particle.position += particle.velocity
        position = particle.position
        if position.y < config.pollen_recycle_top or position.x < -side or position.x > 1.0 + side:
            position.update(rng.next_range(0.0, 1.0), config.pollen_respawn_y)


def move_bee_pollen(world: World) -> None:
    if not world.bee_pollen:
        return
    dt = world.dt
    for particle in world.bee_pollen:
        particle.life -= dt
        particle.position += particle.velocity
    world.bee_pollen = [particle for particle in world.bee_pollen if particle.life > 0.0]


def emit_bee_pollen(world: World, origin: Vector2) -> int:
    """Append a burst below ``origin``; returns how many particles were added."""
    cap = world.config.particles.bee_pollen_cap
    room = cap - len(world.bee_pollen)
    if room <= 0:
        return 0
    count = min(room, world.rng.next_int_range(*world.config.bee.burst_size))
    for _ in range(count):
        world.bee_pollen.append(spawn_bee_pollen(world.next_id(), origin, world.rng))
    return count


def move_pesticide_clouds(world: World) -> None:
    low_x, high_x = world.config.particles.cloud_bounds_x
    low_y, high_y = world.config.particles.cloud_bounds_y
    for cloud in world.pesticide_clouds:
        cloud.position += cloud.velocity
        if cloud.position.x < low_x or cloud.position.x > high_x:
            cloud.velocity.x = -cloud.velocity.x
        if cloud.position.y < low_y or cloud.position.y > high_y:
            cloud.velocity.y = -cloud.velocity.y
