from __future__ import annotations

from collections import deque
from dataclasses import replace
from enum import Enum
from typing import Any, Deque, Dict, List

from .config import SimulationConfig
from .entities import (
    Bee,
    BeePollenParticle,
    Flower,
    HabitatBlock,
    PesticideCloud,
    PlantedFlower,
    PollenParticle,
)
from .rng import SimulationRng
from ..types.metrics import EcosystemMetrics, EcosystemPhase
from ..types.snapshot import (
    Snapshot,
    SnapshotControls,
    SnapshotEntities,
    SnapshotMetadata,
    SnapshotPhase,
)


class FeedbackPulse(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"


class World:
    """Owned simulation context: metrics, entity collections, phase state and UI flags.

    Systems in ``meadow.sim.systems`` receive a ``World`` and mutate it; nothing
    outside the engine holds a reference to the mutable collections.
    """

    def __init__(self, config: SimulationConfig, rng: SimulationRng | None = None):
        self._config = config
        self._rng = rng if rng is not None else SimulationRng(config.seed)
        self.metrics = EcosystemMetrics()
        self.phase = EcosystemPhase.ABUNDANCE
        self.phase_ticks = 0
        self.phase_completed = False
        self.balance_restored = False
        self.current_challenge_index = 0
        self.good_choice_count = 0
        self.tick = 0
        self.paused = False
        self.show_hint = False
        self.speed_multiplier = 1
        self.bees: List[Bee] = []
        self.flowers: List[Flower] = []
        self.pollen: List[PollenParticle] = []
        self.bee_pollen: List[BeePollenParticle] = []
        self.pesticide_clouds: List[PesticideCloud] = []
        self.planted_flowers: List[PlantedFlower] = []
        self.habitat_blocks: List[HabitatBlock] = []
        self.placed_habitat_count = 0
        self._feedback: Deque[FeedbackPulse] = deque(maxlen=max(1, config.interaction.feedback_buffer))
        self._next_id = 0

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def rng(self) -> SimulationRng:
        return self._rng

    @property
    def dt(self) -> float:
        return self._config.time_step

    @property
    def phase_elapsed(self) -> float:
        # Derived from an integer count so 400 ticks of 0.05 land on 20.0 exactly.
        return self.phase_ticks * self._config.time_step

    @property
    def has_previous_phase(self) -> bool:
        return self.phase != EcosystemPhase.ABUNDANCE

    @property
    def visible_bees(self) -> int:
        return max(0, int(self.metrics.bee_population * len(self.bees)))

    @property
    def habitat_progress(self) -> float:
        threshold = max(1, self._config.recovery.habitat_bonus_threshold)
        return min(1.0, self.placed_habitat_count / threshold)

    def next_id(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        return entity_id

    def pulse(self, style: FeedbackPulse) -> None:
        self._feedback.append(style)

    def drain_feedback(self) -> List[str]:
        pulses = [pulse.value for pulse in self._feedback]
        self._feedback.clear()
        return pulses

    def recount_placed_habitat(self) -> int:
        self.placed_habitat_count = sum(1 for block in self.habitat_blocks if block.is_placed)
        return self.placed_habitat_count

    def snapshot(self, environment_status: str) -> Snapshot:
        entities = SnapshotEntities(
            bees=[self._bee_snapshot(bee) for bee in self.bees],
            flowers=[
                {"id": flower.id, "x": flower.position.x, "y": flower.position.y, "size": flower.size}
                for flower in self.flowers
            ],
            pollen=[
                {
                    "id": particle.id,
                    "x": particle.position.x,
                    "y": particle.position.y,
                    "opacity": particle.opacity,
                    "size": particle.size,
                }
                for particle in self.pollen
            ],
            bee_pollen=[
                {
                    "id": particle.id,
                    "x": particle.position.x,
                    "y": particle.position.y,
                    "life": particle.life,
                    "opacity": particle.opacity,
                    "size": particle.size,
                }
                for particle in self.bee_pollen
            ],
            pesticide_clouds=[
                {
                    "id": cloud.id,
                    "x": cloud.position.x,
                    "y": cloud.position.y,
                    "width": cloud.width,
                    "height": cloud.height,
                }
                for cloud in self.pesticide_clouds
            ],
            planted_flowers=[
                {"id": flower.id, "x": flower.position.x, "y": flower.position.y, "size": flower.size}
                for flower in self.planted_flowers
            ],
            habitat_blocks=[
                {"id": block.id, "x": block.position.x, "y": block.position.y, "is_placed": block.is_placed}
                for block in self.habitat_blocks
            ],
            placed_habitat_count=self.placed_habitat_count,
            habitat_progress=self.habitat_progress,
            visible_bees=self.visible_bees,
        )
        phase = SnapshotPhase(
            phase=self.phase.value,
            phase_elapsed=self.phase_elapsed,
            phase_completed=self.phase_completed,
            balance_restored=self.balance_restored,
            has_previous_phase=self.has_previous_phase,
            current_challenge_index=self.current_challenge_index,
            good_choice_count=self.good_choice_count,
            environment_status=environment_status,
        )
        metadata = SnapshotMetadata(
            sim_dt=self._config.time_step,
            tick_rate=self._config.tick_rate,
            seed=self._config.seed,
            config_version=self._config.config_version,
        )
        return Snapshot(
            tick=self.tick,
            metrics=replace(self.metrics),
            phase=phase,
            entities=entities,
            controls=SnapshotControls(
                paused=self.paused,
                speed_multiplier=self.speed_multiplier,
                show_hint=self.show_hint,
            ),
            metadata=metadata,
            feedback=[pulse.value for pulse in self._feedback],
        )

    @staticmethod
    def _bee_snapshot(bee: Bee) -> Dict[str, Any]:
        return {
            "id": bee.id,
            "x": bee.position.x,
            "y": bee.position.y,
            "vx": bee.velocity.x,
            "vy": bee.velocity.y,
            "size": bee.size,
            "target_x": bee.target.x,
            "target_y": bee.target.y,
            "activity": bee.state.activity.value,
            "is_pollinating": bee.is_pollinating,
            "pollinating_timer": bee.pollinating_timer,
            "pollen_trail_time": bee.pollen_trail_time,
        }
