"""Plot utilities for persisted colony metrics."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from data.logger import SimulationLogger  # noqa: E402


def plot_run(db_path: str | Path, run_id: str, output_path: str | Path) -> Path:
    """Render population, need, and mood curves for one run from SQLite logs."""
    logger = SimulationLogger(db_path)
    try:
        rows = logger.fetch_metrics(run_id)
    finally:
        logger.close()
    if not rows:
        raise ValueError(f"No metrics recorded for run '{run_id}'.")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    ticks = [int(row["tick"]) for row in rows]
    fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(8, 8), sharex=True)

    ax1.plot(ticks, [float(row["population"]) for row in rows], label="population")
    ax1.set_ylabel("dwarves")
    ax1.legend()

    ax2.plot(ticks, [float(row["mean_hunger"]) for row in rows], label="mean_hunger", color="tab:red")
    ax2.plot(ticks, [float(row["mean_mood"]) for row in rows], label="mean_mood", color="tab:blue")
    ax2.plot(ticks, [float(row["mean_fulfillment"]) for row in rows], label="mean_fulfillment", color="tab:purple")
    ax2.set_ylabel("0-100")
    ax2.legend()

    ax3.plot(ticks, [float(row["food_stock"]) for row in rows], label="food_stock", color="tab:green")
    ax3.plot(ticks, [float(row["open_tasks"]) for row in rows], label="open_tasks", color="tab:orange")
    ax3.set_xlabel("tick")
    ax3.legend()

    fig.tight_layout()
    fig.savefig(output)
    plt.close(fig)
    return output
