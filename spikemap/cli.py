"""Command-line entry point.

Usage:
    spikemap                                   # interactive window
    spikemap --gif output/spikemap.gif --fps 6
    spikemap --date 2020-04-01 --png output/april1.png
    spikemap --config configs/default.yaml --cases us-counties.csv \\
             --geometry counties-10m.json --alternate
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

DEFAULT_CONFIG = Path("configs/default.yaml")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Animated spike map of county case counts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  spikemap --gif output/spikemap.gif
  spikemap --date 2020-04-01 --png output/april1.png
  spikemap --delay 0 --alternate
        """,
    )
    parser.add_argument("--config", "-c", default=None,
                        help=f"YAML config (default: {DEFAULT_CONFIG} if present)")
    parser.add_argument("--override", default=None, help="Second YAML merged over --config")
    parser.add_argument("--cases", default=None, help="County case CSV")
    parser.add_argument("--geometry", default=None, help="County geometry file")
    parser.add_argument("--gif", nargs="?", const="", default=None,
                        help="Write the animation to a GIF (default: output.directory/output.gif_name)")
    parser.add_argument("--fps", type=int, default=None, help="GIF frames per second")
    parser.add_argument("--date", default=None, help="Render a single YYYY-MM-DD date")
    parser.add_argument("--png", default=None, help="Output image for --date")
    parser.add_argument("--delay", type=int, default=None,
                        help="Milliseconds between frames; 0 = advance on every repaint")
    parser.add_argument("--no-loop", action="store_true", help="Stop at the last date")
    parser.add_argument("--alternate", action="store_true", help="Ping-pong instead of wrapping")
    parser.add_argument("--no-autoplay", action="store_true", help="Start paused")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def _overrides(args) -> dict:
    data, scrubber, output = {}, {}, {}
    if args.cases:
        data["cases_csv"] = args.cases
    if args.geometry:
        data["geometry"] = args.geometry
    if args.delay is not None:
        scrubber["delay_ms"] = args.delay if args.delay > 0 else None
    if args.no_loop:
        scrubber["loop"] = False
    if args.alternate:
        scrubber["alternate"] = True
    if args.no_autoplay:
        scrubber["autoplay"] = False
    if args.fps is not None:
        output["fps"] = args.fps
    return {"data": data, "scrubber": scrubber, "output": output}


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.gif is not None or args.date or args.png:
        import matplotlib
        matplotlib.use("Agg")

    from spikemap.app import SpikeMap
    from spikemap.config import config_from_dict, load_config

    overrides = _overrides(args)
    config_path = Path(args.config) if args.config else DEFAULT_CONFIG
    try:
        if config_path.exists():
            config = load_config(config_path, args.override, overrides)
        else:
            if args.config:
                raise FileNotFoundError(f"Config file not found: {config_path}")
            config = config_from_dict(overrides)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.png and not args.date:
        print("Error: --png needs --date", file=sys.stderr)
        sys.exit(1)

    day = None
    if args.date:
        try:
            day = datetime.strptime(args.date, "%Y-%m-%d").date()
        except ValueError:
            print(f"Error: --date must be YYYY-MM-DD, got {args.date!r}", file=sys.stderr)
            sys.exit(1)

    print("Loading data...")
    try:
        sm = SpikeMap.from_config(config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"  ✓ {len(sm.dates)} dates, {len(sm.regions)} counties with data")

    if day is not None:
        out = Path(args.png or Path(config.output.directory) / f"{day.isoformat()}.png")
        sm.save_date(day, out)
        print(f"  ✓ Frame for {day.isoformat()}: {out}")
    elif args.gif is not None:
        gif = args.gif or Path(config.output.directory) / config.output.gif_name
        path = sm.export_gif(gif, config.output.fps)
        if path is not None:
            print(f"  ✓ Animation: {path}")
    else:
        sm.show()


if __name__ == "__main__":
    main()
