#!/usr/bin/env python3
"""
Run Post Script.

Post-process a CAM trace log into G-code using the standard handlers.

Usage:
    python -m trace_post.scripts.run_post part.trace
    python -m trace_post.scripts.run_post part.trace --output-dir out/
    python -m trace_post.scripts.run_post part.trace --dry-run
    python -m trace_post.scripts.run_post part.trace --dump-events ir.json
    python -m trace_post.scripts.run_post part.trace --log-file logs/post.log

One file is written per generated program: the main program as
``<main_name><main_extension>`` and every subprogram as
``<name><subprogram_extension>`` (see ``configs/post.yaml``).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from trace_post.configs.loader import load_config
from trace_post.handlers.standard import register_standard_handlers
from trace_post.program.program import Program
from trace_post.trace.parser import parse
from trace_post.utils import fs
from trace_post.utils.logging_config import (
    pop_context,
    push_context,
    setup_logging,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a CAM trace log to G-code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "trace",
        type=str,
        help="Trace log file to post-process",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=str,
        default=".",
        help="Directory for generated programs (default: current directory)",
    )
    parser.add_argument(
        "--dump-events",
        type=str,
        help="Also write the parsed events as JSON to this file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print generated programs instead of writing them",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also append log records to this file",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log records as JSON lines",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    setup_logging(
        args.log_level or config.logging.level,
        args.log_file,
        json=args.log_json or config.logging.json,
        context={"app": "run_post"},
    )

    trace_path = Path(args.trace)
    push_context(trace=trace_path.name)
    try:
        text = trace_path.read_text(encoding="utf-8")
        records = parse(text)
        logger.info("Parsed %d events from %s", len(records), trace_path)

        if args.dump_events:
            fs.atomic_json_dump(
                [record.to_dict() for record in records], args.dump_events,
            )
            logger.info("Event dump written to %s", args.dump_events)

        program = Program(config)
        register_standard_handlers(program)
        program.load_events(records)
        program.process()
        files = program.generate_files()

        if args.dry_run:
            for generated in files:
                print(f"--- {generated.name} ---")
                print(generated.text)
            return 0

        out_dir = fs.ensure_dir(args.output_dir)
        for generated in files:
            path = out_dir / f"{generated.name}{config.extension_for(generated.name)}"
            fs.atomic_write_text(path, generated.text + "\n")
            logger.info("Wrote %s", path)

    except Exception:
        logger.exception("Post-processing failed")
        return 1
    finally:
        pop_context(["trace"])

    return 0


if __name__ == "__main__":
    sys.exit(main())
