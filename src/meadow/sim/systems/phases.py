from __future__ import annotations

import logging
from enum import Enum

from pygame.math import Vector2

from ..core.entities import HabitatBlock, spawn_bee, spawn_flower, spawn_pesticide_cloud, spawn_pollen
from ..core.world import FeedbackPulse, World
from ..types.metrics import EcosystemPhase
from . import behavior, dynamics, particles

logger = logging.getLogger(__name__)

_FORWARD = {
    EcosystemPhase.ABUNDANCE: EcosystemPhase.DECLINE,
    EcosystemPhase.DECLINE: EcosystemPhase.RECOVERY,
    EcosystemPhase.RECOVERY: EcosystemPhase.ABUNDANCE,
}


class EnvironmentStatus(str, Enum):
    CRITICAL = "Critical"
    FRAGILE = "Fragile"
    IMPROVING = "Improving"
    STABLE = "Stable"


def init_abundance(world: World) -> None:
    """Full reset: baseline metrics, fresh bees/flowers/pollen, phase-3 sets cleared."""
    population = world.config.population
    rng = world.rng
    world.metrics.reset()
    world.phase = EcosystemPhase.ABUNDANCE
    world.phase_ticks = 0
    world.balance_restored = False
    world.phase_completed = False
    world.current_challenge_index = 0
    world.good_choice_count = 0

    world.bees = [spawn_bee(world.next_id(), rng, world.config.bee) for _ in range(population.bee_count)]
    world.flowers = [spawn_flower(world.next_id(), rng) for _ in range(population.flower_count)]
    world.pollen = [spawn_pollen(world.next_id(), rng) for _ in range(population.pollen_count)]
    world.bee_pollen = []
    world.pesticide_clouds = []
    world.planted_flowers = []
    world.habitat_blocks = []
    world.placed_habitat_count = 0

    behavior.assign_all_targets(world)


def init_recovery(world: World) -> None:
    population = world.config.population
    world.phase = EcosystemPhase.RECOVERY
    world.phase_ticks = 0
    world.pesticide_clouds = [spawn_pesticide_cloud(world.next_id(), world.rng) for _ in range(population.pesticide_cloud_count)]
    world.habitat_blocks = [
        HabitatBlock(
            id=world.next_id(),
            position=Vector2(
                population.habitat_block_x,
                population.habitat_block_y_start + index * population.habitat_block_y_step,
            ),
        )
        for index in range(population.habitat_block_count)
    ]
    world.planted_flowers = []
    world.placed_habitat_count = 0
    world.balance_restored = False
    world.phase_completed = False
    world.current_challenge_index = 0
    world.good_choice_count = 0

    behavior.assign_all_targets(world)


def step(world: World) -> None:
    world.tick += 1
    world.phase_ticks += 1
    if world.phase == EcosystemPhase.ABUNDANCE:
        tick_abundance(world)
    elif world.phase == EcosystemPhase.DECLINE:
        tick_decline(world)
    else:
        tick_recovery(world)


def tick_abundance(world: World) -> None:
    behavior.move_bees(world)
    particles.move_pollen(world)
    particles.move_bee_pollen(world)

    if world.phase_elapsed >= world.config.phases.abundance_seconds:
        _latch_completion(world)


def tick_decline(world: World) -> None:
    dynamics.apply_decline(world)
    behavior.move_bees(world)
    particles.move_pollen(world)
    particles.move_bee_pollen(world)

    if world.metrics.bee_population < world.config.phases.decline_completion_population:
        _latch_completion(world)


def tick_recovery(world: World) -> None:
    dynamics.apply_recovery(world)
    behavior.move_bees(world)
    particles.move_pesticide_clouds(world)
    particles.move_bee_pollen(world)

    if world.metrics.bee_population >= world.config.phases.balance_population and not world.balance_restored:
        world.balance_restored = True
        world.phase_completed = True
        world.pulse(FeedbackPulse.MEDIUM)
        logger.info("Balance restored at tick %d (bee population %.3f)", world.tick, world.metrics.bee_population)


def _latch_completion(world: World) -> None:
    if world.phase_completed:
        return
    world.phase_completed = True
    world.pulse(FeedbackPulse.LIGHT)
    logger.info("Phase %s completed at tick %d", world.phase.value, world.tick)


def advance_phase(world: World) -> EcosystemPhase:
    world.show_hint = False
    world.phase_completed = False
    previous = world.phase
    if previous == EcosystemPhase.ABUNDANCE:
        world.phase = EcosystemPhase.DECLINE
        world.phase_ticks = 0
    elif previous == EcosystemPhase.DECLINE:
        init_recovery(world)
    else:
        init_abundance(world)
    world.pulse(FeedbackPulse.MEDIUM)
    logger.info("Advanced phase %s -> %s", previous.value, _FORWARD[previous].value)
    return world.phase


def go_to_previous_phase(world: World) -> EcosystemPhase:
    """Step one phase back without restoring anything the forward path consumed."""
    if not world.has_previous_phase:
        return world.phase
    world.show_hint = False
    world.phase_completed = False
    previous = world.phase
    if previous == EcosystemPhase.DECLINE:
        world.phase = EcosystemPhase.ABUNDANCE
    else:
        world.phase = EcosystemPhase.DECLINE
    world.phase_ticks = 0
    world.pulse(FeedbackPulse.MEDIUM)
    logger.info("Rewound phase %s -> %s", previous.value, world.phase.value)
    return world.phase


def advance_to_next_challenge(world: World, good_choice: bool) -> int:
    if world.phase != EcosystemPhase.RECOVERY:
        logger.debug("Ignoring challenge outcome outside recovery (phase=%s)", world.phase.value)
        return world.current_challenge_index
    challenge_count = world.config.phases.challenge_count
    if world.current_challenge_index < challenge_count:
        if good_choice:
            world.good_choice_count += 1
        world.current_challenge_index += 1
    world.pulse(FeedbackPulse.LIGHT)
    return world.current_challenge_index


def environment_status(
    good_choices: int, challenge_count: int = 4, pending_good_choice: bool = False
) -> EnvironmentStatus:
    """Map favorable challenge answers onto a diagnosis; monotonic in ``good_choices``."""
    count = good_choices + (1 if pending_good_choice else 0)
    count = max(0, min(challenge_count, count))
    missed = challenge_count - count
    if missed == 0:
        return EnvironmentStatus.STABLE
    if missed == 1:
        return EnvironmentStatus.IMPROVING
    if missed == 2:
        return EnvironmentStatus.FRAGILE
    return EnvironmentStatus.CRITICAL


def environment_status_display(world: World, including_current_good_choice: bool = False) -> str:
    challenge_count = world.config.phases.challenge_count
    pending = including_current_good_choice and world.current_challenge_index < challenge_count
    return environment_status(world.good_choice_count, challenge_count, pending).value
