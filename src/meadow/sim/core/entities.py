from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from pygame.math import Vector2

from .config import BeeConfig, InteractionConfig
from .rng import SimulationRng

_FLOWER_X = (0.05, 0.92)
_FLOWER_Y = (0.05, 0.88)
_FLOWER_SIZE = (16.0, 28.0)
_POLLEN_VX = (-0.0008, 0.0008)
_POLLEN_VY = (-0.0025, -0.0006)
_POLLEN_OPACITY = (0.25, 0.65)
_POLLEN_SIZE = (3.0, 7.0)
_BURST_OFFSET_X = (-0.01, 0.01)
_BURST_OFFSET_Y = (0.01, 0.03)
_BURST_VX = (-0.0006, 0.0006)
_BURST_VY = (0.0002, 0.0012)
_BURST_LIFE = (1.4, 2.6)
_BURST_SIZE = (0.7, 1.6)
_BURST_OPACITY = (0.65, 0.95)
_CLOUD_X = (0.1, 0.85)
_CLOUD_Y = (0.08, 0.68)
_CLOUD_VX = (-0.0008, 0.0008)
_CLOUD_VY = (-0.0005, 0.0005)
_CLOUD_WIDTH = (72.0, 112.0)
_CLOUD_HEIGHT = (36.0, 56.0)


class BeeActivity(str, Enum):
    SEEKING = "Seeking"
    POLLINATING = "Pollinating"
    TRAIL_EMITTING = "TrailEmitting"


@dataclass(slots=True, frozen=True)
class Seeking:
    activity = BeeActivity.SEEKING


@dataclass(slots=True)
class Pollinating:
    timer: float
    activity = BeeActivity.POLLINATING


@dataclass(slots=True)
class TrailEmitting:
    remaining: float
    activity = BeeActivity.TRAIL_EMITTING


BeeState = Union[Seeking, Pollinating, TrailEmitting]


@dataclass(slots=True)
class Bee:
    id: int
    position: Vector2
    velocity: Vector2
    size: float
    target: Vector2
    state: BeeState = field(default_factory=Seeking)

    @property
    def is_pollinating(self) -> bool:
        return isinstance(self.state, Pollinating)

    @property
    def pollinating_timer(self) -> float:
        return self.state.timer if isinstance(self.state, Pollinating) else 0.0

    @property
    def pollen_trail_time(self) -> float:
        return self.state.remaining if isinstance(self.state, TrailEmitting) else 0.0


@dataclass(slots=True)
class Flower:
    id: int
    position: Vector2
    size: float


@dataclass(slots=True)
class PollenParticle:
    id: int
    position: Vector2
    velocity: Vector2
    opacity: float
    size: float


@dataclass(slots=True)
class BeePollenParticle:
    id: int
    position: Vector2
    velocity: Vector2
    life: float
    size: float
    opacity: float


@dataclass(slots=True)
class PesticideCloud:
    id: int
    position: Vector2
    velocity: Vector2
    width: float
    height: float


@dataclass(slots=True)
class PlantedFlower:
    id: int
    position: Vector2
    size: float


@dataclass(slots=True)
class HabitatBlock:
    id: int
    position: Vector2
    is_placed: bool = False


def spawn_bee(entity_id: int, rng: SimulationRng, config: BeeConfig) -> Bee:
    low, high = config.spawn_range
    # Placeholder target; callers assign a real one once flowers exist.
    return Bee(
        id=entity_id,
        position=rng.next_point(low, high),
        velocity=Vector2(),
        size=rng.next_range(*config.size),
        target=rng.next_point(low, high),
    )


def spawn_flower(entity_id: int, rng: SimulationRng) -> Flower:
    return Flower(
        id=entity_id,
        position=Vector2(rng.next_range(*_FLOWER_X), rng.next_range(*_FLOWER_Y)),
        size=rng.next_range(*_FLOWER_SIZE),
    )


def spawn_pollen(entity_id: int, rng: SimulationRng) -> PollenParticle:
    return PollenParticle(
        id=entity_id,
        position=rng.next_point(0.0, 1.0),
        velocity=Vector2(rng.next_range(*_POLLEN_VX), rng.next_range(*_POLLEN_VY)),
        opacity=rng.next_range(*_POLLEN_OPACITY),
        size=rng.next_range(*_POLLEN_SIZE),
    )


def spawn_bee_pollen(entity_id: int, origin: Vector2, rng: SimulationRng) -> BeePollenParticle:
    """Burst particle emitted just below a bee that recently left a flower."""
    return BeePollenParticle(
        id=entity_id,
        position=Vector2(
            origin.x + rng.next_range(*_BURST_OFFSET_X),
            origin.y + rng.next_range(*_BURST_OFFSET_Y),
        ),
        velocity=Vector2(rng.next_range(*_BURST_VX), rng.next_range(*_BURST_VY)),
        life=rng.next_range(*_BURST_LIFE),
        size=rng.next_range(*_BURST_SIZE),
        opacity=rng.next_range(*_BURST_OPACITY),
    )


def spawn_pesticide_cloud(entity_id: int, rng: SimulationRng) -> PesticideCloud:
    return PesticideCloud(
        id=entity_id,
        position=Vector2(rng.next_range(*_CLOUD_X), rng.next_range(*_CLOUD_Y)),
        velocity=Vector2(rng.next_range(*_CLOUD_VX), rng.next_range(*_CLOUD_VY)),
        width=rng.next_range(*_CLOUD_WIDTH),
        height=rng.next_range(*_CLOUD_HEIGHT),
    )


def spawn_planted_flower(
    entity_id: int, x: float, y: float, rng: SimulationRng, config: InteractionConfig
) -> PlantedFlower:
    return PlantedFlower(
        id=entity_id,
        position=Vector2(x, y),
        size=rng.next_range(*config.planted_flower_size),
    )
