# src/cli/find_path.py

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from app.logging_config import configure_logging
from app.runtime import build_runtime
from monitoring.events import EventType
from monitoring.logger import log_event
from nav2d.evasion import EvasionPolicy
from nav2d.shapes import Point

EXIT_OK = 0
EXIT_NO_PATH = 1
EXIT_CONFIG_ERROR = 2


def _render_table(start: Point, target: Point, points: List[Point]) -> Table:
    table = Table(title=f"Path {start} -> {target}")
    table.add_column("#", justify="right")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for i, (x, y) in enumerate(points, start=1):
        table.add_row(str(i), f"{x:.3f}", f"{y:.3f}")
    return table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find a walkable path on a 2D navigation grid."
    )
    parser.add_argument("--config", type=Path, default=None, help="Navigation YAML file")
    parser.add_argument("--start", type=float, nargs=2, required=True, metavar=("X", "Y"))
    parser.add_argument("--target", type=float, nargs=2, required=True, metavar=("X", "Y"))
    parser.add_argument("--exclude", default=None, help="Id of the querying agent")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in EvasionPolicy],
        default=None,
        help="Override the configured evasion policy",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("--log-file", type=Path, default=None, help="JSONL monitoring log")
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(
        logging.DEBUG if args.verbose else logging.WARNING, stream=sys.stderr
    )

    try:
        runtime = build_runtime(
            config_path=args.config,
            policy=EvasionPolicy(args.policy) if args.policy else None,
            log_path=args.log_file,
        )
    except (FileNotFoundError, ValueError, KeyError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    start: Point = (args.start[0], args.start[1])
    target: Point = (args.target[0], args.target[1])
    log_event(
        bus=runtime.bus,
        module="cli",
        event_type=EventType.LOG,
        message="find-path query",
        payload={
            "start": list(start),
            "target": list(target),
            "exclude": args.exclude,
            "policy": runtime.overlay.policy.value,
        },
    )
    try:
        points = runtime.find_path(start, target, exclude=args.exclude)
    finally:
        runtime.close()

    if args.json:
        print(json.dumps(
            {
                "start": list(start),
                "target": list(target),
                "waypoints": [list(p) for p in points],
            },
            indent=2,
        ))
    else:
        console = Console()
        if points:
            console.print(_render_table(start, target, points))
        else:
            console.print(f"[red]No path from {start} to {target}[/red]")

    return EXIT_OK if points else EXIT_NO_PATH


if __name__ == "__main__":
    sys.exit(main())
