"""SQLite-backed run metadata, per-tick colony metrics, and narrative log storage."""

from __future__ import annotations

import hashlib
import json
import platform
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

# metrics stored as real columns; anything else lands in extra_json
_CORE_COLUMNS = (
    "population",
    "mean_hunger",
    "mean_mood",
    "mean_energy",
    "mean_fulfillment",
    "food_stock",
    "open_tasks",
)


@dataclass(frozen=True)
class TickMetrics:
    """Structured per-tick metrics payload."""

    tick: int
    population: float = 0.0
    mean_hunger: float = 0.0
    mean_mood: float = 0.0
    mean_energy: float = 0.0
    mean_fulfillment: float = 0.0
    food_stock: float = 0.0
    open_tasks: float = 0.0
    extra: Mapping[str, float] | None = None

    @classmethod
    def from_mapping(cls, tick: int, metrics: Mapping[str, float]) -> "TickMetrics":
        extra = {
            key: float(value)
            for key, value in metrics.items()
            if key not in _CORE_COLUMNS and key != "tick"
        }
        return cls(
            tick=int(tick),
            extra=extra,
            **{name: float(metrics.get(name, 0.0)) for name in _CORE_COLUMNS},
        )


class SimulationLogger:
    """Persist run metadata, tick metrics, and narrative messages in SQLite."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.connection = sqlite3.connect(self.db_path)
        self.connection.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        self.connection.close()

    def _ensure_schema(self) -> None:
        self.connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS run_metadata (
                run_id TEXT PRIMARY KEY,
                simulation TEXT NOT NULL,
                config_hash TEXT NOT NULL,
                seed INTEGER NOT NULL,
                config_json TEXT NOT NULL,
                runtime_metadata TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            );

            CREATE TABLE IF NOT EXISTS tick_metrics (
                run_id TEXT NOT NULL,
                tick INTEGER NOT NULL,
                population REAL NOT NULL,
                mean_hunger REAL NOT NULL,
                mean_mood REAL NOT NULL,
                mean_energy REAL NOT NULL,
                mean_fulfillment REAL NOT NULL,
                food_stock REAL NOT NULL,
                open_tasks REAL NOT NULL,
                extra_json TEXT NOT NULL,
                PRIMARY KEY (run_id, tick),
                FOREIGN KEY (run_id)
                    REFERENCES run_metadata (run_id)
                    ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS run_messages (
                run_id TEXT NOT NULL,
                seq INTEGER NOT NULL,
                tick INTEGER NOT NULL,
                message TEXT NOT NULL,
                PRIMARY KEY (run_id, seq),
                FOREIGN KEY (run_id)
                    REFERENCES run_metadata (run_id)
                    ON DELETE CASCADE
            );
            """
        )
        self.connection.commit()

    def start_run(self, simulation: str, config: Mapping[str, Any], seed: int, metadata: Mapping[str, Any] | None = None) -> str:
        config_json = json.dumps(dict(config), sort_keys=True, default=str)
        config_hash = hashlib.sha256(config_json.encode("utf-8")).hexdigest()
        deterministic_key = hashlib.sha256(f"{config_hash}:{seed}".encode("utf-8")).hexdigest()
        run_id = hashlib.sha256(f"{deterministic_key}:{time.time_ns()}".encode("utf-8")).hexdigest()[:16]

        runtime_metadata = {
            "python_version": platform.python_version(),
            "platform": platform.platform(),
            "deterministic_key": deterministic_key,
        }
        if metadata:
            runtime_metadata.update(dict(metadata))

        self.connection.execute(
            """
            INSERT INTO run_metadata (
                run_id, simulation, config_hash, seed, config_json, runtime_metadata
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (run_id, simulation, config_hash, int(seed), config_json, json.dumps(runtime_metadata, sort_keys=True)),
        )
        self.connection.commit()
        return run_id

    def log_metrics(self, run_id: str, tick: int, metrics: Mapping[str, float]) -> None:
        row = TickMetrics.from_mapping(tick, metrics)
        self.connection.execute(
            """
            INSERT OR REPLACE INTO tick_metrics (
                run_id,
                tick,
                population,
                mean_hunger,
                mean_mood,
                mean_energy,
                mean_fulfillment,
                food_stock,
                open_tasks,
                extra_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                run_id,
                row.tick,
                row.population,
                row.mean_hunger,
                row.mean_mood,
                row.mean_energy,
                row.mean_fulfillment,
                row.food_stock,
                row.open_tasks,
                json.dumps(dict(row.extra or {}), sort_keys=True),
            ),
        )
        self.connection.commit()

    def log_messages(self, run_id: str, messages: Iterable[Mapping[str, Any]]) -> None:
        row = self.connection.execute(
            "SELECT COALESCE(MAX(seq), 0) FROM run_messages WHERE run_id = ?",
            (run_id,),
        ).fetchone()
        seq = int(row[0])
        payload = []
        for message in messages:
            seq += 1
            payload.append((run_id, seq, int(message.get("tick", 0)), str(message.get("message", ""))))
        self.connection.executemany(
            "INSERT INTO run_messages (run_id, seq, tick, message) VALUES (?, ?, ?, ?)",
            payload,
        )
        self.connection.commit()

    def fetch_metrics(self, run_id: str) -> list[dict[str, float]]:
        """Return ordered tick metrics, with extra metrics flattened back in."""
        rows = self.connection.execute(
            """
            SELECT tick, population, mean_hunger, mean_mood, mean_energy,
                   mean_fulfillment, food_stock, open_tasks, extra_json
            FROM tick_metrics
            WHERE run_id = ?
            ORDER BY tick ASC
            """,
            (run_id,),
        ).fetchall()
        result: list[dict[str, float]] = []
        for row in rows:
            record = dict(row)
            extra = json.loads(record.pop("extra_json"))
            record.update(extra)
            result.append(record)
        return result

    def fetch_messages(self, run_id: str) -> list[dict[str, Any]]:
        rows = self.connection.execute(
            "SELECT tick, message FROM run_messages WHERE run_id = ? ORDER BY seq ASC",
            (run_id,),
        ).fetchall()
        return [dict(row) for row in rows]

    def latest_run_id(self) -> str | None:
        """Return most recently created run id, if any."""
        row = self.connection.execute(
            """
            SELECT run_id
            FROM run_metadata
            ORDER BY created_at DESC, rowid DESC
            LIMIT 1
            """
        ).fetchone()
        return str(row[0]) if row is not None else None
