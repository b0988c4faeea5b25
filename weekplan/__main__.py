"""Command-line entry point for the weekly schedule board."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .app import ScheduleApp
from .config import AppConfig, DisplayConfig, StorageConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Open the weekly schedule board.")
    parser.add_argument(
        "--width",
        type=int,
        help="Override the window width.",
    )
    parser.add_argument(
        "--height",
        type=int,
        help="Override the window height.",
    )
    parser.add_argument(
        "--fps",
        type=int,
        help="Override the target frame rate.",
    )
    parser.add_argument(
        "--fullscreen",
        dest="fullscreen",
        action="store_true",
        help="Start in full-screen mode.",
    )
    parser.add_argument(
        "--windowed",
        dest="fullscreen",
        action="store_false",
        help="Force windowed mode.",
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        help="Where the cards are stored (default: ~/.weekplan/data.json).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    parser.set_defaults(fullscreen=None)
    return parser


def parse_config(namespace: argparse.Namespace) -> AppConfig:
    config = AppConfig()
    display = config.display
    width = namespace.width or display.width
    height = namespace.height or display.height
    fps = namespace.fps or display.frame_rate
    fullscreen = (
        display.fullscreen
        if namespace.fullscreen is None
        else namespace.fullscreen
    )
    storage = (
        StorageConfig(path=namespace.data_file)
        if namespace.data_file is not None
        else config.storage
    )

    return AppConfig(
        display=DisplayConfig(
            width=width,
            height=height,
            caption=display.caption,
            frame_rate=fps,
            fullscreen=fullscreen,
            resizable=display.resizable,
        ),
        grid=config.grid,
        storage=storage,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = parse_config(args)
    app = ScheduleApp(config)
    app.run()
    return 0


if __name__ == "__main__":  # pragma: no cover - module use only
    raise SystemExit(main())
