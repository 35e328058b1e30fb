from __future__ import annotations

import argparse
import csv
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.engine import Ecosystem
from ..sim.types.metrics import EcosystemPhase, TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "phase",
    "phase_elapsed",
    "bee_population",
    "flower_health",
    "biodiversity",
    "pesticide_level",
    "bees",
    "bee_pollen",
    "pesticide_clouds",
    "planted_flowers",
    "placed_habitat",
    "phase_completed",
    "tick_ms",
]

_METRIC_NAMES = ("bee_population", "flower_health", "biodiversity", "pesticide_level")


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.phase.value,
        f"{metrics.phase_elapsed:.2f}",
        f"{metrics.bee_population:.6f}",
        f"{metrics.flower_health:.6f}",
        f"{metrics.biodiversity:.6f}",
        f"{metrics.pesticide_level:.6f}",
        metrics.bees,
        metrics.bee_pollen,
        metrics.pesticide_clouds,
        metrics.planted_flowers,
        metrics.placed_habitat,
        int(metrics.phase_completed),
        f"{tick_ms:.3f}",
    ]


def _apply_recovery_script(
    engine: Ecosystem, habitat_blocks: int, clear_clouds: int, plant_flowers: int
) -> None:
    world = engine.world
    for block in list(world.habitat_blocks)[:habitat_blocks]:
        engine.place_habitat_block(block.id)
    for cloud in list(world.pesticide_clouds)[:clear_clouds]:
        engine.remove_pesticide_cloud(cloud.id)
    for index in range(plant_flowers):
        offset = (index + 1) / (plant_flowers + 1)
        engine.plant_flower(offset, 0.5 + 0.3 * (offset - 0.5))


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    auto_advance: bool = False,
    summary_path: Optional[Path] = None,
    habitat_blocks: int = 0,
    clear_clouds: int = 0,
    plant_flowers: int = 0,
    deterministic_log: bool = False,
) -> Dict[str, object]:
    """Run the engine without a scheduler and return the run summary.

    With ``auto_advance`` the phase advances as soon as it completes (never out
    of Recovery); on entering Recovery the scripted interventions are applied once.
    """
    config = SimulationConfig()
    if seed is not None:
        config.seed = seed
    engine = Ecosystem(config)
    engine.start()

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    transitions: List[Dict[str, object]] = []
    lows = {name: 1.0 for name in _METRIC_NAMES}
    highs = {name: 0.0 for name in _METRIC_NAMES}
    last: Optional[TickMetrics] = None

    try:
        for _ in range(steps):
            metrics = engine.tick()
            if metrics is None:
                continue
            last = metrics
            for name in _METRIC_NAMES:
                value = getattr(metrics, name)
                lows[name] = min(lows[name], value)
                highs[name] = max(highs[name], value)
            if writer:
                tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
                writer.writerow(_format_row(metrics, tick_ms))

            world = engine.world
            if auto_advance and world.phase_completed and world.phase != EcosystemPhase.RECOVERY:
                phase = engine.advance_phase()
                transitions.append({"tick": world.tick, "phase": phase.value})
                if phase == EcosystemPhase.RECOVERY:
                    _apply_recovery_script(engine, habitat_blocks, clear_clouds, plant_flowers)
    finally:
        if csv_file:
            csv_file.close()

    world = engine.world
    summary: Dict[str, object] = {
        "steps": steps,
        "seed": config.seed,
        "final_tick": world.tick,
        "final_phase": world.phase.value,
        "phase_completed": world.phase_completed,
        "balance_restored": world.balance_restored,
        "transitions": transitions,
        "final_metrics": {name: getattr(world.metrics, name) for name in _METRIC_NAMES},
        "min": lows if last is not None else {},
        "max": highs if last is not None else {},
        "environment_status": engine.environment_status_display(),
    }
    if summary_path:
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    logger.info("Headless run finished at tick %d in phase %s", world.tick, world.phase.value)
    return summary


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless meadow ecosystem simulation")
    parser.add_argument("--steps", type=int, default=2000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick metrics")
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON file for the run summary.")
    parser.add_argument(
        "--auto-advance",
        action="store_true",
        help="Advance each phase as soon as it completes (stops in Recovery).",
    )
    parser.add_argument("--habitat-blocks", type=int, default=0, help="Blocks to place on entering Recovery.")
    parser.add_argument("--clear-clouds", type=int, default=0, help="Pesticide clouds to remove on entering Recovery.")
    parser.add_argument("--plant-flowers", type=int, default=0, help="Flowers to plant on entering Recovery.")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write tick_ms as 0.000 so logs from identical seeds compare equal.",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        auto_advance=args.auto_advance,
        summary_path=args.summary,
        habitat_blocks=args.habitat_blocks,
        clear_clouds=args.clear_clouds,
        plant_flowers=args.plant_flowers,
        deterministic_log=args.deterministic_log,
    )


if __name__ == "__main__":
    main()
