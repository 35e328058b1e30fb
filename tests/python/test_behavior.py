from __future__ import annotations

import math

from pygame.math import Vector2
from pytest import approx

from meadow.sim.core.config import BeeConfig, SimulationConfig
from meadow.sim.core.entities import Bee, Flower, PlantedFlower, Pollinating, Seeking, TrailEmitting
from meadow.sim.core.rng import SimulationRng
from meadow.sim.core.world import World
from meadow.sim.systems import behavior
from meadow.sim.types.metrics import EcosystemPhase


def _world(config: SimulationConfig | None = None) -> World:
    return World(config or SimulationConfig(seed=21), SimulationRng(21))


def _bee(world: World, position: tuple[float, float], target: tuple[float, float]) -> Bee:
    bee = Bee(
        id=world.next_id(),
        position=Vector2(position),
        velocity=Vector2(),
        size=10.0,
        target=Vector2(target),
    )
    world.bees.append(bee)
    return bee


def test_pollinating_bee_holds_position():
    world = _world()
    bee = _bee(world, (0.4, 0.4), (0.4, 0.4))
    bee.state = Pollinating(timer=1.0)

    behavior.update_bee(world, bee)

    assert bee.position == Vector2(0.4, 0.4)
    assert bee.pollinating_timer == approx(0.95)


def test_leaving_flower_starts_trail_window():
    world = _world()
    world.flowers.append(Flower(id=world.next_id(), position=Vector2(0.8, 0.2), size=20.0))
    bee = _bee(world, (0.4, 0.4), (0.4, 0.4))
    bee.state = Pollinating(timer=0.05)

    behavior.update_bee(world, bee)

    assert isinstance(bee.state, TrailEmitting)
    assert bee.pollen_trail_time == approx(4.0)
    assert bee.target == Vector2(0.8, 0.2)
    assert bee.position == Vector2(0.4, 0.4)


def test_arrival_switches_to_pollinating():
    world = _world()
    bee = _bee(world, (0.5, 0.5), (0.52, 0.51))
    bee.velocity = Vector2(0.004, 0.002)

    behavior.update_bee(world, bee)

    assert bee.is_pollinating
    assert 1.5 <= bee.pollinating_timer <= 3.5
    assert bee.velocity == Vector2()
    assert bee.position == Vector2(0.5, 0.5)


def test_zero_distance_treated_as_arrival():
    config = SimulationConfig(seed=1, bee=BeeConfig(arrival_radius=0.0))
    world = _world(config)
    bee = _bee(world, (0.3, 0.3), (0.3, 0.3))

    behavior.update_bee(world, bee)

    assert bee.is_pollinating
    assert not math.isnan(bee.position.x)
    assert not math.isnan(bee.velocity.x)


def test_seeking_bee_moves_toward_target_within_speed_limit():
    world = _world()
    bee = _bee(world, (0.2, 0.5), (0.8, 0.5))

    start_distance = bee.position.distance_to(bee.target)
    for _ in range(20):
        behavior.update_bee(world, bee)
        assert abs(bee.velocity.x) <= 0.008
        assert abs(bee.velocity.y) <= 0.008

    assert isinstance(bee.state, Seeking)
    assert bee.position.distance_to(bee.target) < start_distance
    assert bee.velocity.x > 0.0


def test_bee_eventually_lands_on_target():
    world = _world()
    bee = _bee(world, (0.1, 0.1), (0.6, 0.7))
    for _ in range(2000):
        behavior.update_bee(world, bee)
        if bee.is_pollinating:
            break
    assert bee.is_pollinating
    assert bee.position.distance_to(Vector2(0.6, 0.7)) < 0.04


def test_bee_stays_inside_canvas_near_edges():
    world = _world()
    bee = _bee(world, (0.001, 0.999), (-0.5, 1.5))
    for _ in range(50):
        behavior.update_bee(world, bee)
        assert 0.0 <= bee.position.x <= 1.0
        assert 0.0 <= bee.position.y <= 1.0


def test_trail_emission_waits_for_delay():
    config = SimulationConfig(seed=4, bee=BeeConfig(emission_probability=1.0))
    world = _world(config)
    bee = _bee(world, (0.2, 0.2), (0.9, 0.9))
    bee.state = TrailEmitting(remaining=4.0)

    for _ in range(19):
        behavior.update_bee(world, bee)
    assert world.bee_pollen == []

    behavior.update_bee(world, bee)
    behavior.update_bee(world, bee)
    assert 3 <= len(world.bee_pollen) <= 12


def test_trail_window_folds_back_into_seeking():
    config = SimulationConfig(seed=4, bee=BeeConfig(emission_probability=0.0))
    world = _world(config)
    bee = _bee(world, (0.2, 0.2), (0.9, 0.9))
    bee.state = TrailEmitting(remaining=0.05)

    behavior.update_bee(world, bee)

    assert isinstance(bee.state, Seeking)
    assert bee.pollen_trail_time == 0.0
    assert world.bee_pollen == []


def test_arrival_drops_remaining_trail():
    world = _world()
    bee = _bee(world, (0.5, 0.5), (0.51, 0.5))
    bee.state = TrailEmitting(remaining=3.0)

    behavior.update_bee(world, bee)

    assert bee.is_pollinating
    assert bee.pollen_trail_time == 0.0


def test_target_falls_back_to_wander_point():
    world = _world()
    bee = _bee(world, (0.5, 0.5), (0.5, 0.5))
    for _ in range(50):
        behavior.assign_new_target(world, bee)
        assert 0.1 <= bee.target.x <= 0.9
        assert 0.1 <= bee.target.y <= 0.9


def test_planted_flowers_are_targets_only_in_recovery():
    world = _world()
    world.planted_flowers.append(PlantedFlower(id=world.next_id(), position=Vector2(0.05, 0.05), size=20.0))
    bee = _bee(world, (0.5, 0.5), (0.5, 0.5))

    world.phase = EcosystemPhase.DECLINE
    assert behavior.target_candidates(world) == []

    world.phase = EcosystemPhase.RECOVERY
    behavior.assign_new_target(world, bee)
    assert bee.target == Vector2(0.05, 0.05)
    assert bee.target is not world.planted_flowers[0].position
