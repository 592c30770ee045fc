"""Command-line entry points for running and plotting colony simulations."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

# Allow `python cli/main.py ...` execution from IDEs by adding repo root to sys.path.
if __package__ in {None, ""}:
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from core.config_loader import ConfigValidationError, configure_logging
from core.simulator import Simulator, SimulatorRuntimeError
from data.logger import SimulationLogger
from simulations.dwarf_colony.rules import ColonyConfigurationError
from simulations.dwarf_colony.snapshot import describe_colony
from visualization.plotting import plot_run

LOGGER = logging.getLogger(__name__)


def _run(config_path: str, db_path: Path, steps: int | None, summary: bool) -> str:
    logger = SimulationLogger(db_path)
    try:
        simulator = Simulator(config_path, metrics_logger=logger)
        configure_logging(simulator.logging_config)
        metrics = simulator.run(steps)
        if metrics:
            last = metrics[-1]
            LOGGER.info(
                "Finished %s ticks: population %.0f, mean mood %.1f.",
                int(last["tick"]),
                last["population"],
                last["mean_mood"],
            )
        environment = getattr(simulator.sim, "environment", None)
        if summary and environment is not None:
            print(describe_colony(environment))
        run_id = simulator.run_id
    finally:
        logger.close()
    if run_id is None:
        raise RuntimeError("Expected run id when logger is configured.")
    return run_id


def run_cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="colony")
    sub = parser.add_subparsers(dest="command", required=True)

    run_cmd = sub.add_parser("run", help="run a colony and record metrics")
    run_cmd.add_argument("--config", default="configs/colony_example.yaml")
    run_cmd.add_argument("--db", default="colony_metrics.db")
    run_cmd.add_argument("--steps", type=int, default=None, help="override run.steps from the config")
    run_cmd.add_argument("--summary", action="store_true", help="print a colony digest when done")

    plot_cmd = sub.add_parser("plot", help="plot a recorded run")
    plot_cmd.add_argument("--run", default=None, help="run id (defaults to the latest run)")
    plot_cmd.add_argument("--db", default="colony_metrics.db")
    plot_cmd.add_argument("--out", default="artifacts/colony.png")

    args = parser.parse_args(argv)

    if args.command == "run":
        try:
            run_id = _run(args.config, Path(args.db), args.steps, args.summary)
        except ConfigValidationError as exc:
            print(f"Invalid config: {exc}", file=sys.stderr)
            return 2
        except SimulatorRuntimeError as exc:
            # rule violations surface from plugin construction
            if isinstance(exc.__cause__, ColonyConfigurationError):
                print(f"Invalid config: {exc.__cause__}", file=sys.stderr)
                return 2
            print(f"Simulation failed: {exc}", file=sys.stderr)
            return 1
        print(run_id)
        return 0

    if args.command == "plot":
        run_id = args.run
        if run_id is None:
            logger = SimulationLogger(args.db)
            try:
                run_id = logger.latest_run_id()
            finally:
                logger.close()
        if run_id is None:
            print(f"No runs recorded in {args.db}.", file=sys.stderr)
            return 1
        path = plot_run(args.db, run_id, args.out)
        print(path)
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(run_cli())
