"""listenerlib CLI entry point.

Usage:
    python -m listenerlib                              # Default config, synthetic sensor
    python -m listenerlib --config custom.yaml         # Custom config
    python -m listenerlib --dump recordings/run1       # Write frames until the source goes quiet
    python -m listenerlib --data-dir recordings/run1   # Replay a recording
    python -m listenerlib --info                       # Print listener info and exit
"""

from __future__ import annotations

import argparse
import logging
import sys

from listenerlib.core.config import ListenerConfig
from listenerlib.core.errors import ListenerError, QueueTimeoutError
from listenerlib.core.factory import create_listener
from listenerlib.listeners.registry import ListenerRegistry
from listenerlib.utils.logging import setup_logging

logger = logging.getLogger("listenerlib.cli")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="listenerlib",
        description="listenerlib - sensor listener runtime",
    )
    parser.add_argument(
        "--config",
        "-c",
        default="config/default.yaml",
        help="Path to configuration YAML file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Replay a recording from this directory (sets listener kind to 'saved')",
    )
    parser.add_argument(
        "--resize",
        type=float,
        default=None,
        help="Override the listener resize factor",
    )
    parser.add_argument(
        "--dump",
        default=None,
        help="Dump the stream into this directory instead of reading frames",
    )
    parser.add_argument(
        "--frames",
        "-n",
        type=int,
        default=None,
        help="Stop after this many frames (default: until the source goes quiet)",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        default=False,
        help="Print listener info and status, then exit",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        default=False,
        help="Validate config against Pydantic schema before starting",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Path to log file (default: no file logging)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=False,
        help="Output logs as JSON instead of human-readable",
    )
    args = parser.parse_args(argv)

    # Load config
    config = ListenerConfig(args.config)
    try:
        cfg = config.load(validate=args.validate_config)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: Config validation failed:\n{e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.data_dir is not None:
        config.override("listenerlib.listener.kind", "saved")
        config.override("listenerlib.listener.source.data_dir", args.data_dir)
    if args.resize is not None:
        config.override("listenerlib.listener.resize_factor", args.resize)

    # Setup logging
    log_level = args.log_level or cfg.listenerlib.system.get("log_level", "INFO")
    log_file = args.log_file or cfg.listenerlib.system.get("log_file", None)
    log_json = args.log_json or cfg.listenerlib.system.get("log_json", False)
    setup_logging(log_level, log_file=log_file, log_json=log_json)

    try:
        listener = create_listener(cfg, ListenerRegistry())
    except (ListenerError, ValueError, FileNotFoundError) as e:
        print(f"Error: Could not create listener:\n{e}", file=sys.stderr)
        return 1

    with listener:
        if args.info:
            listener.print_info_and_status()
            return 0
        if args.dump is not None:
            listener.dump_stream(args.dump, max_frames=args.frames)
            return 0
        _read_frames(listener, args.frames)
    return 0


def _read_frames(listener, max_frames: int | None) -> None:
    listener.start_stream()
    count = 0
    try:
        while max_frames is None or count < max_frames:
            try:
                frame = listener.get_latest_frame()
            except QueueTimeoutError:
                logger.info("No new frames from %r, exiting", listener.name)
                break
            count += 1
            logger.info("Frame %d: %r", count, frame)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        listener.end_stream()


if __name__ == "__main__":
    sys.exit(main())
