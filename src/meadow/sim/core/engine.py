from __future__ import annotations

import logging
from time import perf_counter
from typing import List, Optional

from .config import SimulationConfig
from .rng import SimulationRng
from .world import World
from ..systems import interactions, metrics as metrics_system, phases
from ..types.metrics import EcosystemPhase, TickMetrics
from ..types.snapshot import Snapshot

logger = logging.getLogger(__name__)


class Ecosystem:
    """Engine facade: lifecycle, the tick entry point and the command surface.

    ``start()`` builds a fresh :class:`World`; every tick and command then
    operates on that context. The facade never runs a clock of its own, the
    scheduler calls :meth:`run_frame` (or :meth:`tick`) on a single timeline.
    """

    def __init__(self, config: SimulationConfig | None = None, rng: SimulationRng | None = None):
        self.config = config if config is not None else SimulationConfig()
        self.config.validate()
        self._rng = rng
        self._world: World | None = None
        self._last_metrics: TickMetrics | None = None

    @property
    def started(self) -> bool:
        return self._world is not None

    @property
    def world(self) -> World:
        if self._world is None:
            raise RuntimeError("Ecosystem.start() must be called before accessing the world")
        return self._world

    @property
    def metrics(self) -> TickMetrics | None:
        return self._last_metrics

    def start(self) -> World:
        rng = self._rng if self._rng is not None else SimulationRng(self.config.seed)
        world = World(self.config, rng)
        phases.init_abundance(world)
        self._world = world
        self._last_metrics = None
        logger.info(
            "Simulation started: %d bees, %d flowers, %d pollen",
            len(world.bees),
            len(world.flowers),
            len(world.pollen),
        )
        return world

    def tick(self) -> Optional[TickMetrics]:
        world = self._world
        if world is None or world.paused:
            return None
        start = perf_counter()
        phases.step(world)
        elapsed_ms = (perf_counter() - start) * 1000.0
        self._last_metrics = metrics_system.create_metrics(world, elapsed_ms)
        return self._last_metrics

    def run_frame(self) -> int:
        """Run ``speed_multiplier`` logical ticks back to back; returns how many executed."""
        if self._world is None:
            return 0
        executed = 0
        for _ in range(self._world.speed_multiplier):
            if self.tick() is not None:
                executed += 1
        return executed

    def snapshot(self) -> Snapshot:
        world = self.world
        return world.snapshot(phases.environment_status_display(world))

    def drain_feedback(self) -> List[str]:
        return self.world.drain_feedback()

    # Phase navigation

    def advance_phase(self) -> EcosystemPhase:
        return phases.advance_phase(self.world)

    def go_to_previous_phase(self) -> EcosystemPhase:
        return phases.go_to_previous_phase(self.world)

    def advance_to_next_challenge(self, good_choice: bool) -> int:
        return phases.advance_to_next_challenge(self.world, good_choice)

    def environment_status_display(self, including_current_good_choice: bool = False) -> str:
        return phases.environment_status_display(self.world, including_current_good_choice)

    # Commands

    def toggle_pause(self) -> bool:
        return interactions.toggle_pause(self.world)

    def cycle_time_speed(self) -> int:
        return interactions.cycle_time_speed(self.world)

    def toggle_hint(self) -> bool:
        return interactions.toggle_hint(self.world)

    def remove_pesticide_cloud(self, cloud_id: int) -> bool:
        return interactions.remove_pesticide_cloud(self.world, cloud_id)

    def plant_flower(self, x: float, y: float) -> int:
        return interactions.plant_flower(self.world, x, y)

    def place_habitat_block(self, block_id: int) -> bool:
        return interactions.place_habitat_block(self.world, block_id)
