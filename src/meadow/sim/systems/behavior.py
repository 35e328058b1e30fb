from __future__ import annotations

import math
from typing import List, TYPE_CHECKING

from pygame.math import Vector2

from ..core.entities import Bee, Pollinating, Seeking, TrailEmitting
from ..types.metrics import EcosystemPhase
from ..utils.math2d import _clamp_components, _clamp_value
from . import particles

if TYPE_CHECKING:
    from ..core.world import World


def target_candidates(world: World) -> List[Vector2]:
    candidates = [flower.position for flower in world.flowers]
    if world.phase == EcosystemPhase.RECOVERY:
        candidates.extend(flower.position for flower in world.planted_flowers)
    return candidates


def assign_new_target(world: World, bee: Bee) -> None:
    target = world.rng.sample_choice(target_candidates(world))
    if target is None:
        target = world.rng.next_point(*world.config.bee.wander_range)
    bee.target = Vector2(target)


def assign_all_targets(world: World) -> None:
    for bee in world.bees:
        assign_new_target(world, bee)


def move_bees(world: World) -> None:
    for bee in world.bees:
        update_bee(world, bee)


def update_bee(world: World, bee: Bee) -> None:
    config = world.config.bee
    dt = world.dt
    state = bee.state

    if isinstance(state, Pollinating):
        state.timer -= dt
        if state.timer <= 0.0:
            bee.state = TrailEmitting(remaining=config.trail_window_seconds)
            assign_new_target(world, bee)
        return

    if isinstance(state, TrailEmitting):
        state.remaining -= dt
        elapsed = config.trail_window_seconds - state.remaining
        if elapsed >= config.trail_delay_seconds and world.rng.next_float() < config.emission_probability:
            particles.emit_bee_pollen(world, bee.position)
        if state.remaining <= 0.0:
            bee.state = Seeking()

    steer(world, bee)


def steer(world: World, bee: Bee) -> None:
    config = world.config.bee
    rng = world.rng
    dx = bee.target.x - bee.position.x
    dy = bee.target.y - bee.position.y
    dist = math.hypot(dx, dy)

    if dist < config.arrival_radius or dist <= 1e-12:
        bee.state = Pollinating(timer=rng.next_range(*config.pollinate_seconds))
        bee.velocity.update(0.0, 0.0)
        return

    approach = dist / config.braking_radius if dist < config.braking_radius else 1.0
    speed = config.max_speed * approach
    desired_x = dx / dist * speed
    desired_y = dy / dist * speed

    velocity = bee.velocity
    velocity.x += (desired_x - velocity.x) * config.steer_strength
    velocity.y += (desired_y - velocity.y) * config.steer_strength
    velocity.x += rng.next_range(-config.jitter, config.jitter)
    velocity.y += rng.next_range(-config.jitter, config.jitter)
    _clamp_components(velocity, config.max_speed)

    bee.position += velocity

    low = config.edge_margin
    high = 1.0 - config.edge_margin
    if bee.position.x < low:
        velocity.x += config.edge_push
    if bee.position.x > high:
        velocity.x -= config.edge_push
    if bee.position.y < low:
        velocity.y += config.edge_push
    if bee.position.y > high:
        velocity.y -= config.edge_push

    bee.position.update(_clamp_value(bee.position.x, 0.0, 1.0), _clamp_value(bee.position.y, 0.0, 1.0))
