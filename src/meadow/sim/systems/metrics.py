from __future__ import annotations

from typing import TYPE_CHECKING

from ..types.metrics import TickMetrics

if TYPE_CHECKING:
    from ..core.world import World


def create_metrics(world: World, duration_ms: float) -> TickMetrics:
    metrics = world.metrics
    return TickMetrics(
        tick=world.tick,
        phase=world.phase,
        phase_elapsed=world.phase_elapsed,
        bee_population=metrics.bee_population,
        flower_health=metrics.flower_health,
        biodiversity=metrics.biodiversity,
        pesticide_level=metrics.pesticide_level,
        bees=len(world.bees),
        bee_pollen=len(world.bee_pollen),
        pesticide_clouds=len(world.pesticide_clouds),
        planted_flowers=len(world.planted_flowers),
        placed_habitat=world.placed_habitat_count,
        phase_completed=world.phase_completed,
        tick_duration_ms=duration_ms,
    )
