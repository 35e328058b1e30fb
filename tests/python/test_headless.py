import csv
import json

import pytest

from meadow.app.headless import run_headless


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_log_header_and_rows(tmp_path):
    log_path = tmp_path / "run.csv"
    run_headless(steps=3, seed=1, log_path=log_path, deterministic_log=True)
    rows = _read_csv(log_path)
    assert len(rows) == 4
    assert rows[0] == [
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
    idx = {name: i for i, name in enumerate(rows[0])}
    assert [row[idx["tick"]] for row in rows[1:]] == ["1", "2", "3"]
    assert all(row[idx["phase"]] == "abundance" for row in rows[1:])
    assert all(float(row[idx["tick_ms"]]) == 0.0 for row in rows[1:])
    assert rows[-1][idx["bees"]] == "20"


def test_headless_auto_advance_reaches_decline(tmp_path):
    summary_path = tmp_path / "summary.json"
    summary = run_headless(steps=450, seed=2, log_path=None, auto_advance=True, summary_path=summary_path)

    payload = json.loads(summary_path.read_text())
    assert payload == summary
    assert payload["final_phase"] == "decline"
    assert payload["transitions"] == [{"tick": 400, "phase": "decline"}]
    assert payload["steps"] == 450
    assert payload["final_metrics"]["pesticide_level"] == pytest.approx(50 * 0.05 * 0.018)
    assert payload["max"]["bee_population"] == 1.0


@pytest.mark.slow
def test_headless_scripted_recovery(tmp_path):
    summary = run_headless(
        steps=6000,
        seed=3,
        log_path=tmp_path / "full.csv",
        auto_advance=True,
        habitat_blocks=3,
        clear_clouds=7,
        plant_flowers=6,
    )
    assert [item["phase"] for item in summary["transitions"]] == ["decline", "recovery"]
    assert summary["final_phase"] == "recovery"
    assert summary["balance_restored"]
    assert summary["min"]["bee_population"] < 0.2
