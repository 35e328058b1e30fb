from __future__ import annotations

import logging

from ..core.entities import spawn_planted_flower
from ..core.world import FeedbackPulse, World
from ..utils.math2d import _clamp_unit

logger = logging.getLogger(__name__)


def toggle_pause(world: World) -> bool:
    world.paused = not world.paused
    world.pulse(FeedbackPulse.LIGHT)
    return world.paused


def cycle_time_speed(world: World) -> int:
    limit = world.config.interaction.max_speed_multiplier
    world.speed_multiplier = world.speed_multiplier % limit + 1
    world.pulse(FeedbackPulse.LIGHT)
    return world.speed_multiplier


def toggle_hint(world: World) -> bool:
    world.show_hint = not world.show_hint
    return world.show_hint


def remove_pesticide_cloud(world: World, cloud_id: int) -> bool:
    """Remove the cloud if present; the pesticide reduction applies either way."""
    remaining = [cloud for cloud in world.pesticide_clouds if cloud.id != cloud_id]
    removed = len(remaining) != len(world.pesticide_clouds)
    if removed:
        world.pesticide_clouds = remaining
    else:
        logger.debug("No pesticide cloud with id %s", cloud_id)
    reduction = world.config.interaction.cloud_pesticide_reduction
    world.metrics.pesticide_level = _clamp_unit(world.metrics.pesticide_level - reduction)
    world.pulse(FeedbackPulse.LIGHT)
    return removed


def plant_flower(world: World, x: float, y: float) -> int:
    flower = spawn_planted_flower(
        world.next_id(), _clamp_unit(x), _clamp_unit(y), world.rng, world.config.interaction
    )
    world.planted_flowers.append(flower)
    bonus = world.config.interaction.planted_biodiversity_bonus
    world.metrics.biodiversity = _clamp_unit(world.metrics.biodiversity + bonus)
    world.pulse(FeedbackPulse.LIGHT)
    return flower.id


def place_habitat_block(world: World, block_id: int) -> bool:
    for block in world.habitat_blocks:
        if block.id != block_id:
            continue
        if block.is_placed:
            return False
        block.is_placed = True
        world.recount_placed_habitat()
        world.pulse(FeedbackPulse.MEDIUM)
        return True
    logger.debug("No habitat block with id %s", block_id)
    return False
