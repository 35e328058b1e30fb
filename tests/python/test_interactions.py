from __future__ import annotations

from pytest import approx

from meadow.sim.core.config import InteractionConfig, SimulationConfig
from meadow.sim.core.engine import Ecosystem
from meadow.sim.types.metrics import EcosystemPhase


def _recovery_engine(seed: int = 31) -> Ecosystem:
    engine = Ecosystem(SimulationConfig(seed=seed))
    engine.start()
    engine.advance_phase()
    engine.advance_phase()
    engine.drain_feedback()
    return engine


def test_remove_pesticide_cloud_reduces_level():
    engine = _recovery_engine()
    world = engine.world
    world.metrics.pesticide_level = 0.5
    target = world.pesticide_clouds[2]

    assert engine.remove_pesticide_cloud(target.id) is True

    assert target not in world.pesticide_clouds
    assert len(world.pesticide_clouds) == 6
    assert world.metrics.pesticide_level == approx(0.36)
    assert engine.drain_feedback() == ["light"]


def test_remove_unknown_cloud_only_floors_level():
    engine = _recovery_engine()
    world = engine.world
    world.metrics.pesticide_level = 0.1

    assert engine.remove_pesticide_cloud(-42) is False

    assert len(world.pesticide_clouds) == 7
    assert world.metrics.pesticide_level == 0.0


def test_plant_flower_raises_biodiversity_with_cap():
    engine = _recovery_engine()
    world = engine.world
    world.metrics.biodiversity = 0.5

    flower_id = engine.plant_flower(0.25, 0.75)

    planted = world.planted_flowers[-1]
    assert planted.id == flower_id
    assert planted.position.x == approx(0.25)
    assert planted.position.y == approx(0.75)
    assert 18.0 <= planted.size <= 26.0
    assert world.metrics.biodiversity == approx(0.56)

    world.metrics.biodiversity = 0.98
    engine.plant_flower(1.7, -0.2)
    assert world.metrics.biodiversity == 1.0
    assert world.planted_flowers[-1].position.x == 1.0
    assert world.planted_flowers[-1].position.y == 0.0
    assert len(world.planted_flowers) == 2


def test_place_habitat_block_counts_once():
    engine = _recovery_engine()
    world = engine.world
    block = world.habitat_blocks[0]

    assert engine.place_habitat_block(block.id) is True
    assert block.is_placed
    assert world.placed_habitat_count == 1
    assert engine.drain_feedback() == ["medium"]

    assert engine.place_habitat_block(block.id) is False
    assert world.placed_habitat_count == 1
    assert engine.place_habitat_block(10_000) is False
    assert world.placed_habitat_count == 1


def test_toggle_hint_has_no_simulation_effect():
    engine = _recovery_engine()
    world = engine.world
    before = (world.metrics.bee_population, world.metrics.pesticide_level, world.tick)

    assert engine.toggle_hint() is True
    assert engine.toggle_hint() is False

    assert (world.metrics.bee_population, world.metrics.pesticide_level, world.tick) == before
    assert engine.drain_feedback() == []


def test_cycle_time_speed_wraps():
    engine = Ecosystem(SimulationConfig(seed=2, interaction=InteractionConfig(max_speed_multiplier=3)))
    engine.start()
    seen = [engine.cycle_time_speed() for _ in range(6)]
    assert seen == [2, 3, 1, 2, 3, 1]


def test_feedback_buffer_is_bounded():
    engine = Ecosystem(SimulationConfig(seed=2, interaction=InteractionConfig(feedback_buffer=4)))
    engine.start()
    for _ in range(10):
        engine.toggle_pause()
    assert len(engine.snapshot().feedback) == 4
    assert len(engine.drain_feedback()) == 4
    assert engine.drain_feedback() == []


def test_commands_outside_recovery_are_safe():
    engine = Ecosystem(SimulationConfig(seed=9))
    world = engine.start()

    assert engine.place_habitat_block(0) is False
    assert engine.remove_pesticide_cloud(0) is False
    engine.plant_flower(0.5, 0.5)

    assert world.phase == EcosystemPhase.ABUNDANCE
    assert world.metrics.pesticide_level == 0.0
    assert world.metrics.biodiversity == 1.0
    assert len(world.planted_flowers) == 1
