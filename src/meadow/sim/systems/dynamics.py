from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.config import RecoveryConfig
from ..types.metrics import EcosystemMetrics
from ..utils.math2d import _clamp_unit

if TYPE_CHECKING:
    from ..core.world import World


def habitat_bonus(placed_habitat_count: int, config: RecoveryConfig) -> float:
    if placed_habitat_count >= config.habitat_bonus_threshold:
        return config.habitat_bonus
    return 1.0


def recovery_rates(
    metrics: EcosystemMetrics, placed_habitat_count: int, config: RecoveryConfig
) -> tuple[float, float]:
    """Return ``(recovery_rate, decay_rate)`` for the current metrics.

    Pure; used by the recovery tick and by callers probing the effect of a
    habitat placement before it happens.
    """
    bonus = habitat_bonus(placed_habitat_count, config)
    recovery = (1.0 - metrics.pesticide_level) * metrics.biodiversity * bonus * config.recovery_coefficient
    decay = metrics.pesticide_level * config.decay_coefficient
    return recovery, decay


def apply_decline(world: World) -> None:
    metrics = world.metrics
    config = world.config.decline
    dt = world.dt

    metrics.pesticide_level = _clamp_unit(metrics.pesticide_level + dt * config.pesticide_rise)
    damage = metrics.pesticide_level * config.pesticide_damage
    metrics.bee_population = _clamp_unit(metrics.bee_population - damage * dt)

    if metrics.bee_population < config.flower_decay_threshold:
        flower_decay = (config.flower_decay_threshold - metrics.bee_population) * config.flower_decay
        metrics.flower_health = _clamp_unit(metrics.flower_health - flower_decay * dt)

    metrics.biodiversity = _clamp_unit(metrics.biodiversity - dt * config.biodiversity_loss)


def apply_recovery(world: World) -> None:
    metrics = world.metrics
    config = world.config.recovery
    dt = world.dt

    recovery, decay = recovery_rates(metrics, world.placed_habitat_count, config)
    metrics.bee_population = _clamp_unit(metrics.bee_population + (recovery - decay) * dt)

    if metrics.bee_population > config.flower_growth_threshold:
        metrics.flower_health = _clamp_unit(metrics.flower_health + dt * config.flower_growth * metrics.bee_population)
