from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class PopulationConfig:
    bee_count: int = 20
    flower_count: int = 16
    pollen_count: int = 32
    pesticide_cloud_count: int = 7
    habitat_block_count: int = 5
    habitat_block_x: float = 0.88
    habitat_block_y_start: float = 0.18
    habitat_block_y_step: float = 0.13


@dataclass
class BeeConfig:
    max_speed: float = 0.008
    steer_strength: float = 0.10
    arrival_radius: float = 0.04
    braking_radius: float = 0.12
    jitter: float = 0.00012
    edge_margin: float = 0.03
    edge_push: float = 0.001
    pollinate_seconds: tuple[float, float] = (1.5, 3.5)
    trail_window_seconds: float = 4.0
    trail_delay_seconds: float = 1.0
    emission_probability: float = 0.18
    burst_size: tuple[int, int] = (3, 6)
    size: tuple[float, float] = (9.0, 15.0)
    spawn_range: tuple[float, float] = (0.05, 0.95)
    wander_range: tuple[float, float] = (0.1, 0.9)


@dataclass
class ParticleConfig:
    bee_pollen_cap: int = 700
    pollen_recycle_top: float = -0.02
    pollen_recycle_side: float = 0.05
    pollen_respawn_y: float = 1.05
    cloud_bounds_x: tuple[float, float] = (0.05, 0.92)
    cloud_bounds_y: tuple[float, float] = (0.05, 0.75)


@dataclass
class DeclineConfig:
    pesticide_rise: float = 0.018
    pesticide_damage: float = 0.016
    flower_decay_threshold: float = 0.3
    flower_decay: float = 0.022
    biodiversity_loss: float = 0.008


@dataclass
class RecoveryConfig:
    habitat_bonus: float = 1.7
    habitat_bonus_threshold: int = 3
    recovery_coefficient: float = 0.009
    decay_coefficient: float = 0.012
    flower_growth_threshold: float = 0.25
    flower_growth: float = 0.006


@dataclass
class PhaseConfig:
    abundance_seconds: float = 20.0
    decline_completion_population: float = 0.2
    balance_population: float = 0.8
    challenge_count: int = 4


@dataclass
class InteractionConfig:
    cloud_pesticide_reduction: float = 0.14
    planted_biodiversity_bonus: float = 0.06
    planted_flower_size: tuple[float, float] = (18.0, 26.0)
    max_speed_multiplier: int = 3
    feedback_buffer: int = 64


@dataclass
class SimulationConfig:
    time_step: float = 0.05
    tick_rate: float = 20.0
    seed: Optional[int] = None
    config_version: str = "v1"
    population: PopulationConfig = field(default_factory=PopulationConfig)
    bee: BeeConfig = field(default_factory=BeeConfig)
    particles: ParticleConfig = field(default_factory=ParticleConfig)
    decline: DeclineConfig = field(default_factory=DeclineConfig)
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)
    phases: PhaseConfig = field(default_factory=PhaseConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def validate(self) -> None:
        if self.time_step <= 0.0:
            raise ValueError(f"time_step must be positive, got {self.time_step}")
        if self.tick_rate <= 0.0:
            raise ValueError(f"tick_rate must be positive, got {self.tick_rate}")
        population = self.population
        for name in ("bee_count", "flower_count", "pollen_count", "pesticide_cloud_count", "habitat_block_count"):
            if getattr(population, name) < 0:
                raise ValueError(f"population.{name} must not be negative")
        if self.particles.bee_pollen_cap < 0:
            raise ValueError("particles.bee_pollen_cap must not be negative")
        if self.interaction.max_speed_multiplier < 1:
            raise ValueError("interaction.max_speed_multiplier must be at least 1")
        ranges = {
            "bee.pollinate_seconds": self.bee.pollinate_seconds,
            "bee.burst_size": self.bee.burst_size,
            "bee.size": self.bee.size,
            "bee.spawn_range": self.bee.spawn_range,
            "bee.wander_range": self.bee.wander_range,
            "particles.cloud_bounds_x": self.particles.cloud_bounds_x,
            "particles.cloud_bounds_y": self.particles.cloud_bounds_y,
            "interaction.planted_flower_size": self.interaction.planted_flower_size,
        }
        for name, (low, high) in ranges.items():
            if high < low:
                raise ValueError(f"{name} is inverted: ({low}, {high})")


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 1


def _pair(value: tuple[float, float] | list[float] | None, default: tuple) -> tuple:
    if isinstance(value, (tuple, list)) and len(value) == 2:
        kind = type(default[0])
        return (kind(value[0]), kind(value[1]))
    return default


def _section(cls: type, raw: dict, pair_fields: tuple[str, ...] = ()):
    defaults = cls()
    values = dict(raw)
    for name in pair_fields:
        if name in values:
            values[name] = _pair(values[name], getattr(defaults, name))
    return cls(**values)


def load_config(raw: dict) -> SimulationConfig:
    population = _section(PopulationConfig, raw.get("population") or {})
    bee = _section(
        BeeConfig,
        raw.get("bee") or {},
        ("pollinate_seconds", "burst_size", "size", "spawn_range", "wander_range"),
    )
    particles = _section(ParticleConfig, raw.get("particles") or {}, ("cloud_bounds_x", "cloud_bounds_y"))
    decline = _section(DeclineConfig, raw.get("decline") or {})
    recovery = _section(RecoveryConfig, raw.get("recovery") or {})
    phases = _section(PhaseConfig, raw.get("phases") or {})
    interaction = _section(InteractionConfig, raw.get("interaction") or {}, ("planted_flower_size",))
    sections = {"population", "bee", "particles", "decline", "recovery", "phases", "interaction"}
    sim_values = {k: v for k, v in raw.items() if k not in sections}
    return SimulationConfig(
        population=population,
        bee=bee,
        particles=particles,
        decline=decline,
        recovery=recovery,
        phases=phases,
        interaction=interaction,
        **sim_values,
    )
