"""
CLI entry point.
  geodash measure --mode distance --unit km 0,0 0,0.01
  geodash gui
"""
import argparse
import logging
import sys

from geodash.core.config import get_earth_radius, load_config
from geodash.core.exceptions import ConfigError, UnknownUnitError
from geodash.core.logger import get_logger, setup_logging
from geodash.measure.geometry import EARTH_RADIUS_M, parse_point
from geodash.measure.session import MeasurementMode, MeasurementSession
from geodash.measure.units import BASE_UNITS, get_unit

logger = get_logger("cli")


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", "-c", type=str, default=None, help="Path to YAML config (default: built-in + GEODASH_CONFIG)")
    p.add_argument("--log-level", type=str, default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level (default: WARNING for measure, INFO for gui)")
    p.add_argument("--log-dir", type=str, default=None, help="Directory for geodash.log (default: GEODASH_LOG_DIR or console only)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="geodash", description="GeoDash map dashboard measurement tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    m = subparsers.add_parser("measure", help="Measure a path length or enclosed area from coordinates")
    m.add_argument("points", nargs="+", metavar="LAT,LON", help="Points in order, e.g. 13.267,80.329 (put -- before the first point if it starts with a minus sign)")
    m.add_argument("--mode", "-m", choices=[mode.value for mode in MeasurementMode], default="distance")
    m.add_argument("--unit", "-u", type=str, default=None, help="Display unit (e.g. km, mi, ha, acres; default: base unit)")
    m.add_argument("--raw", action="store_true", help="Print the raw value in base units instead of a formatted label")
    _add_common(m)

    g = subparsers.add_parser("gui", help="Open the map window")
    _add_common(g)
    return parser


def run_measure(args) -> int:
    config = load_config(override_path=args.config)
    measure_cfg = config.get("measure") or {}
    radius = get_earth_radius(measure_cfg, EARTH_RADIUS_M)
    mode = MeasurementMode(args.mode)
    symbol = args.unit or (measure_cfg.get("default_units") or {}).get(mode.value) or BASE_UNITS[mode.kind]
    try:
        unit = get_unit(mode.kind, symbol)
    except UnknownUnitError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    try:
        points = [parse_point(p) for p in args.points]
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    session = MeasurementSession(radius=radius)
    session.activate(mode)
    for p in points:
        session.add_point(p)
    effect = session.finalize()
    if effect.measurement is None:
        print(f"ERROR: {mode.value} needs at least {mode.min_points} distinct points", file=sys.stderr)
        return 1
    value = effect.measurement.raw_value
    logger.info("Measured %s over %d points: %.3f", mode.value, len(effect.measurement.points), value)
    print(value if args.raw else unit.render(value))
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    default_level = logging.WARNING if args.command == "measure" else logging.INFO
    level = getattr(logging, args.log_level) if args.log_level else default_level
    setup_logging(level=level, log_dir=args.log_dir)

    try:
        if args.command == "measure":
            return run_measure(args)
        from geodash.app import main as gui_main
        return gui_main(config_path=args.config)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
