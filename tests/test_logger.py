"""Tests for the SQLite run logger."""

from __future__ import annotations

import sqlite3

from data.logger import SimulationLogger


def test_logger_persists_metadata_metrics_and_messages(tmp_path) -> None:
    db_path = tmp_path / "metrics.db"
    logger = SimulationLogger(db_path)

    run_id = logger.start_run(simulation="dwarf_colony", config={"params": {"initial_dwarves": 2}}, seed=42)
    logger.log_metrics(run_id, 1, {"tick": 1.0, "population": 2.0, "mean_mood": 80.0, "total_meals": 3.0})
    logger.log_messages(run_id, [{"tick": 1, "message": "Urist eats."}])
    logger.log_messages(run_id, [{"tick": 2, "message": "Bomrek eats."}, {"tick": 2, "message": "A feast!"}])

    rows = logger.fetch_metrics(run_id)
    messages = logger.fetch_messages(run_id)
    latest = logger.latest_run_id()
    logger.close()

    assert latest == run_id
    assert len(rows) == 1
    assert rows[0]["population"] == 2.0
    assert rows[0]["mean_hunger"] == 0.0
    assert rows[0]["total_meals"] == 3.0
    assert [message["message"] for message in messages] == ["Urist eats.", "Bomrek eats.", "A feast!"]

    conn = sqlite3.connect(db_path)
    seqs = [row[0] for row in conn.execute("SELECT seq FROM run_messages ORDER BY seq")]
    conn.close()
    assert seqs == [1, 2, 3]


def test_empty_database_has_no_latest_run(tmp_path) -> None:
    logger = SimulationLogger(tmp_path / "empty.db")
    assert logger.latest_run_id() is None
    assert logger.fetch_metrics("nope") == []
    logger.close()
