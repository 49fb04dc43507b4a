"""Command-line interface for analogbind.

Commands:
- curve: evaluate a response curve at sample inputs
- mappings: list the stored mappings of a profile / sub-profile
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from analogbind.core.config.loader import configure_logging, load_app_config
from analogbind.core.curves.curve_model import CurveModel
from analogbind.core.curves.errors import CurveValidationError
from analogbind.core.curves.models import ResponseCurve
from analogbind.core.curves.processor import LUT_SIZE, ResponseProcessor
from analogbind.core.mapping.conflicts import ConflictDetector
from analogbind.core.mapping.models import MappingRecord, MappingScope
from analogbind.core.sync.backends.fs import FileMappingBackend
from analogbind.core.sync.errors import BackendError

console = Console()
logger = logging.getLogger(__name__)


def parse_points(text: str) -> list[tuple[float, float]]:
    """Parse ``"0.5:0.8,0.7:0.9"`` into (x, y) pairs.

    Raises:
        ValueError: On a malformed pair.
    """
    pairs: list[tuple[float, float]] = []
    for chunk in text.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        x, sep, y = chunk.partition(":")
        if not sep:
            raise ValueError(f"Expected x:y, got '{chunk}'")
        pairs.append((float(x), float(y)))
    return pairs


def run_curve(args: argparse.Namespace, lut_size: int = LUT_SIZE) -> int:
    """Evaluate a curve built from --points at evenly spaced inputs."""
    try:
        pairs = parse_points(args.points or "")
    except ValueError as e:
        console.print(f"[red]ERROR: {e}[/red]")
        return 1

    curve = CurveModel(use_smooth=args.smooth)
    try:
        for x, y in pairs:
            curve.add_point(x, y)
    except CurveValidationError as e:
        console.print(f"[red]ERROR: {e}[/red]")
        return 1

    curve_type = ResponseCurve.CUSTOM if curve.movable_count else ResponseCurve.LINEAR
    processor = ResponseProcessor(
        curve_type,
        points=list(curve.points),
        use_smooth=args.smooth,
        dead_zone_inner=args.inner / 100.0,
        dead_zone_outer=args.outer / 100.0,
        lut_size=lut_size,
    )

    mode = "smooth" if args.smooth else "linear"
    table = Table(title=f"Response curve ({mode}, {curve.movable_count} adjustable points)")
    table.add_column("Input", justify="right")
    table.add_column("Curve", justify="right")
    table.add_column("With dead zone", justify="right")

    samples = max(args.samples, 2)
    for i in range(samples):
        t = i / (samples - 1)
        table.add_row(f"{t:.3f}", f"{curve.evaluate(t):.4f}", f"{processor.process(t):.4f}")

    console.print(table)
    return 0


async def run_mappings_async(root: Path, scope: MappingScope) -> int:
    """List stored mappings with conflict flags and curve summaries."""
    backend = FileMappingBackend(root)
    try:
        listing = await backend.list_mappings(scope)
    except BackendError as e:
        console.print(f"[red]ERROR: {e}[/red]")
        return 1

    records = [MappingRecord.from_payload(entry.payload) for entry in listing]
    duplicated = ConflictDetector().scan(records)

    table = Table(title=f"Mappings for {scope}")
    table.add_column("#", justify="right")
    table.add_column("Source key")
    table.add_column("Output control")
    table.add_column("Curve")
    table.add_column("Status")

    for i, record in enumerate(records):
        status = "[yellow]duplicate key[/yellow]" if record.has_warning else "[green]ok[/green]"
        if not record.is_analog:
            status += " (digital)"
        table.add_row(
            str(i),
            record.source_key or "",
            record.output_control or "",
            record.describe(),
            status,
        )

    console.print(table)
    if duplicated:
        console.print(f"[yellow]Duplicate keys: {', '.join(sorted(duplicated))}[/yellow]")
    return 0


def run_mappings(args: argparse.Namespace) -> int:
    root = Path(args.root).resolve()
    if not root.exists():
        console.print(f"[red]ERROR: Store directory not found: {root}[/red]")
        return 1

    scope = MappingScope(profile_id=args.profile, sub_profile_id=args.sub_profile)
    return asyncio.run(run_mappings_async(root, scope))


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="analogbind",
        description="analogbind - analog response curves for key-to-controller mappings",
    )
    p.add_argument("--config", default=None, help="Path to app config (JSON or YAML)")
    sub = p.add_subparsers(dest="cmd", required=True)

    curve = sub.add_parser("curve", help="Evaluate a response curve")
    curve.add_argument(
        "--points", default="", help="Adjustable points as x:y pairs, e.g. 0.5:0.8,0.7:0.9"
    )
    curve.add_argument("--smooth", action="store_true", help="Use smooth (Hermite) segments")
    curve.add_argument("--samples", type=int, default=11, help="Number of sample inputs")
    curve.add_argument("--inner", type=float, default=0.0, help="Inner dead zone in percent")
    curve.add_argument("--outer", type=float, default=100.0, help="Outer dead zone in percent")

    mappings = sub.add_parser("mappings", help="List stored mappings")
    mappings.add_argument("--root", default=None, help="Store directory (file backend)")
    mappings.add_argument("--profile", required=True, help="Profile id")
    mappings.add_argument("--sub-profile", default="default", help="Sub-profile id")

    return p


def main() -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args()

    config = load_app_config(args.config)
    configure_logging(config)

    if args.cmd == "curve":
        sys.exit(run_curve(args, config.curves.lut_size))

    if args.cmd == "mappings":
        if args.root is None:
            args.root = config.backend.path or "."
        sys.exit(run_mappings(args))


if __name__ == "__main__":
    main()
