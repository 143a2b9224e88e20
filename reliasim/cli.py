"""Command-line interface for reliasim."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, List, Optional

from reliasim.dsl.loader import load_scenario_yaml
from reliasim.logging import get_logger, set_global_log_level
from reliasim.mtbf import failure_rate_to_mtbf_string
from reliasim.simulation import Simulation

logger = get_logger(__name__)

_INSPECT_SAMPLES = 5


def _format_table(headers: List[str], rows: List[List[str]], min_width: int = 8) -> str:
    """Format data as a simple ASCII table.

    Args:
        headers: Column headers
        rows: Data rows
        min_width: Minimum column width

    Returns:
        Formatted table string
    """
    if not rows:
        return ""

    all_data = [headers] + rows
    col_widths = []
    for col_idx in range(len(headers)):
        max_width = max(len(str(row[col_idx])) for row in all_data)
        col_widths.append(max(max_width, min_width))

    def format_row(row_data: List[Any]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    for row in rows:
        lines.append(format_row(row))
    return "\n".join(lines)


def _format_duration(seconds: float) -> str:
    """Return a concise human-readable duration string.

    Examples:
        0.123 -> "123.0 ms"; 1.234 -> "1.23 s"; 75.2 -> "1m 15.2s".
    """
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    if seconds < 60.0:
        return f"{seconds:.2f} s"
    minutes = int(seconds // 60)
    rem = seconds - minutes * 60
    return f"{minutes}m {rem:.1f}s"


def _load(path: Path) -> dict:
    logger.info(f"Loading scenario from: {path}")
    return load_scenario_yaml(path.read_text(encoding="utf-8"))


def _inspect_scenario(path: Path) -> None:
    """Print prototypes, their module curves and the host list."""
    try:
        scenario = _load(path)
        sim = Simulation(scenario)
    except Exception as e:
        logger.error(f"Failed to inspect scenario: {type(e).__name__}: {e}")
        print(f"ERROR: {type(e).__name__}: {e}")
        sys.exit(1)

    print(f"Scenario: {path}")
    print(f"  seed={sim.seed} ticks={sim.ticks} dt={sim.dt}")
    print(f"  scopes: {', '.join(sorted(sim.evaluator.rules)) or '(none)'}")

    for part_name, proto in sim.prototypes.items():
        print(f"\nPrototype {part_name}")
        rows: List[List[str]] = []
        for idx, module in enumerate(proto.modules or []):
            curve = module.get_reliability_curve()
            if curve is None:
                rows.append([str(idx), module.configuration, "-", "-", "-"])
                continue
            span = curve.max_time - curve.min_time
            samples = [
                curve.min_time + span * i / (_INSPECT_SAMPLES - 1)
                for i in range(_INSPECT_SAMPLES)
            ]
            values = curve.evaluate_many(samples)
            rows.append(
                [
                    str(idx),
                    module.configuration,
                    f"{curve.min_time:g}..{curve.max_time:g}",
                    " ".join(f"{v:.2e}" for v in values),
                    failure_rate_to_mtbf_string(float(values[-1])),
                ]
            )
        print(_format_table(["#", "Scope", "Domain", "Samples", "Final MTBF"], rows))

    if sim.hosts:
        print("\nHosts")
        rows = [
            [
                hr.host.name,
                hr.host.part_name,
                ", ".join(f"{a:g}-{b:g}" for a, b in hr.run) or "-",
                str(len(hr.momentary)),
            ]
            for hr in sim.hosts
        ]
        print(_format_table(["Name", "Part", "Run", "Momentary"], rows))


def _run_scenario(
    path: Path,
    results: Optional[Path],
    stdout: bool,
    seed: Optional[int],
) -> None:
    """Run a scenario and export results.

    Args:
        path: Path to the scenario YAML file.
        results: Optional path to export results as JSON.
        stdout: Whether to print results to stdout.
        seed: Optional master seed overriding the scenario's.
    """
    try:
        scenario = _load(path)
        sim = Simulation(scenario, seed=seed)
        logger.info("Starting scenario execution")
        start = perf_counter()
        result = sim.run()
        elapsed = perf_counter() - start
    except FileNotFoundError:
        logger.error(f"Scenario file not found: {path}")
        print(f"ERROR: Scenario file not found: {path}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Failed to run scenario: {type(e).__name__}: {e}")
        print(f"ERROR: Failed to run scenario: {type(e).__name__}: {e}")
        sys.exit(1)

    logger.info(f"Scenario execution completed in {_format_duration(elapsed)}")
    payload = json.dumps(result.to_dict(), indent=2)

    if results is not None:
        results.parent.mkdir(parents=True, exist_ok=True)
        results.write_text(payload, encoding="utf-8")
        logger.info(f"Results written to: {results}")

    if stdout:
        print(payload)
    else:
        print(f"{len(result.failures)} failure(s) in {result.ticks} ticks")
        for event in result.failures:
            print(
                f"  {event.host}: T+{event.mission_time:.2f} "
                f"after {event.operating_time:.1f}s of operation"
            )


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``reliasim`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="reliasim",
        description="Simulate curve-driven stochastic failures of hosts.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors (results still print)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{run,inspect}",
        help="Available commands",
    )

    run_parser = subparsers.add_parser("run", help="Run a scenario")
    run_parser.add_argument("scenario", type=Path, help="Path to scenario YAML")
    run_parser.add_argument(
        "--results",
        "-r",
        type=Path,
        default=None,
        help="Export results to this JSON file",
    )
    run_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print results JSON to stdout",
    )
    run_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Master seed overriding the scenario's",
    )

    inspect_parser = subparsers.add_parser(
        "inspect", help="Inspect and validate a scenario"
    )
    inspect_parser.add_argument("scenario", type=Path, help="Path to scenario YAML")

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "run":
        _run_scenario(
            path=args.scenario,
            results=args.results,
            stdout=args.stdout,
            seed=args.seed,
        )
    elif args.command == "inspect":
        _inspect_scenario(args.scenario)


if __name__ == "__main__":
    main()
