import csv
import json

import pytest

from shoal.app.headless import run_headless


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_basic_log_header(tmp_path):
    log_path = tmp_path / "basic.csv"
    run_headless(steps=2, seed=1, log_path=log_path, deterministic_log=True, log_format="basic")
    rows = _read_csv(log_path)
    assert len(rows) == 3
    assert rows[0] == [
        "tick",
        "population",
        "groups",
        "ungrouped",
        "player_group_size",
        "tick_ms",
    ]
    assert rows[1][-1] == "0.000"


def test_headless_detailed_log_header_and_ratios(tmp_path):
    log_path = tmp_path / "detailed.csv"
    run_headless(steps=3, seed=2, log_path=log_path, deterministic_log=True, log_format="detailed")
    rows = _read_csv(log_path)
    assert len(rows) == 4
    header = rows[0]
    assert header[:5] == ["tick", "population", "groups", "ungrouped", "player_group_size"]
    assert header[-3:] == ["camera_x", "camera_y", "camera_z"]
    for row in rows[1:]:
        values = dict(zip(header, row))
        population = int(values["population"])
        assert population == 41
        assert float(values["ungrouped_ratio"]) == pytest.approx(int(values["ungrouped"]) / population, abs=1e-4)
        assert float(values["max_speed"]) <= 20.0 + 1e-6


def test_headless_deterministic_logs_match(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"
    run_headless(steps=20, seed=9, log_path=first, deterministic_log=True)
    run_headless(steps=20, seed=9, log_path=second, deterministic_log=True)
    assert first.read_text() == second.read_text()


def test_headless_summary_and_config(tmp_path):
    config_path = tmp_path / "run.yaml"
    config_path.write_text(
        "forces:\n  preset: grouped\ngrouping:\n  proximity_mode: collision\nspawn:\n  npc_count: 10\n"
    )
    summary_path = tmp_path / "summary.json"

    world = run_headless(
        steps=5,
        seed=4,
        log_path=None,
        deterministic_log=True,
        summary_path=summary_path,
        config_path=config_path,
    )

    summary = json.loads(summary_path.read_text())
    assert summary["steps"] == 5
    assert summary["seed"] == 4
    assert summary["proximity_mode"] == "collision"
    assert summary["tick_ms"]["max"] == 0.0
    assert summary["next_group_id"] == world.grouping.next_group_id
    assert len(world.agents) == 11


def test_headless_rejects_unknown_log_format(tmp_path):
    with pytest.raises(ValueError, match="Unknown log format"):
        run_headless(steps=1, seed=1, log_path=tmp_path / "x.csv", log_format="xml")
