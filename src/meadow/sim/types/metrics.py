from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EcosystemPhase(str, Enum):
    ABUNDANCE = "abundance"
    DECLINE = "decline"
    RECOVERY = "recovery"


@dataclass(slots=True)
class EcosystemMetrics:
    """The four scalar ecosystem state variables, each kept in [0, 1]."""

    bee_population: float = 1.0
    flower_health: float = 1.0
    biodiversity: float = 1.0
    pesticide_level: float = 0.0

    def reset(self) -> None:
        self.bee_population = 1.0
        self.flower_health = 1.0
        self.biodiversity = 1.0
        self.pesticide_level = 0.0


@dataclass(slots=True)
class TickMetrics:
    tick: int
    phase: EcosystemPhase
    phase_elapsed: float
    bee_population: float
    flower_health: float
    biodiversity: float
    pesticide_level: float
    bees: int
    bee_pollen: int
    pesticide_clouds: int
    planted_flowers: int
    placed_habitat: int
    phase_completed: bool
    tick_duration_ms: float = 0.0
