from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .metrics import EcosystemMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: EcosystemMetrics
    phase: "SnapshotPhase"
    entities: "SnapshotEntities"
    controls: "SnapshotControls"
    metadata: "SnapshotMetadata"
    feedback: List[str] = field(default_factory=list)


@dataclass(slots=True)
class SnapshotPhase:
    phase: str
    phase_elapsed: float
    phase_completed: bool
    balance_restored: bool
    has_previous_phase: bool
    current_challenge_index: int
    good_choice_count: int
    environment_status: str


@dataclass(slots=True)
class SnapshotEntities:
    bees: List[Dict[str, Any]]
    flowers: List[Dict[str, Any]]
    pollen: List[Dict[str, Any]]
    bee_pollen: List[Dict[str, Any]]
    pesticide_clouds: List[Dict[str, Any]]
    planted_flowers: List[Dict[str, Any]]
    habitat_blocks: List[Dict[str, Any]]
    placed_habitat_count: int
    habitat_progress: float
    visible_bees: int


@dataclass(slots=True)
class SnapshotControls:
    paused: bool
    speed_multiplier: int
    show_hint: bool


@dataclass(slots=True)
class SnapshotMetadata:
    sim_dt: float
    tick_rate: float
    seed: int | None
    config_version: str
