#!/usr/bin/env python3
"""
Prompt Exporter - Entry Point

Capture one prompt record (JSON) and export it: python -m prompt_exporter

Usage:
    python -m prompt_exporter [OPTIONS]

Options:
    -i, --input PATH    Prompt record JSON file (default: stdin)
    -o, --out-dir PATH  Directory for the exported artifact
    -c, --config PATH   Settings file (default: $PROMPT_EXPORTER_CONFIG_FILE)
    --compact           Compact JSON instead of 2-space indentation
    --no-raw            Do not add the _rawChat view
    --debug             Write debug lines to the log
    --summary           Print a per-section summary table
"""

import argparse
import json
import sys
from typing import Any, Optional

from .config import load_config
from .display import ExporterDisplay
from .inspector import section_counts
from .logger import ExporterLogger
from .pipeline import CapturePipeline


def read_record(path: Optional[str]) -> Any:
    """Read a prompt record from a JSON file, or stdin when path is None/'-'."""
    if path in (None, "-"):
        return json.load(sys.stdin)
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="prompt-exporter",
        description="Prompt Exporter - Capture a prompt structure and export it as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Export a record saved by the host
    python -m prompt_exporter -i prompt.json -o ./exports

    # Pipe a record in, compact output, no raw chat view
    cat prompt.json | python -m prompt_exporter --compact --no-raw

Environment Variables:
    PROMPT_EXPORTER_HOME          - Base directory for config and logs
    PROMPT_EXPORTER_CONFIG_FILE   - Settings file location
""",
    )
    parser.add_argument("-i", "--input", default=None, help="Prompt record JSON file (default: stdin)")
    parser.add_argument("-o", "--out-dir", default=None, help="Directory for the exported artifact")
    parser.add_argument("-c", "--config", default=None, help="Settings JSON file")
    parser.add_argument("--compact", action="store_true", help="Write compact JSON")
    parser.add_argument("--no-raw", action="store_true", help="Do not add the _rawChat view")
    parser.add_argument("--debug", action="store_true", help="Write debug lines to the log")
    parser.add_argument("--summary", action="store_true", help="Print a per-section summary table")

    args = parser.parse_args(argv)

    config = load_config(args.config).with_overrides(
        enabled=True,
        auto_export=False,
        export_dir=args.out_dir,
        pretty_print=False if args.compact else None,
        include_raw_data=False if args.no_raw else None,
        debug_mode=True if args.debug else None,
    )
    display = ExporterDisplay()
    logger = ExporterLogger(session_id="cli", debug=config.debug_mode)

    try:
        record = read_record(args.input)
    except (OSError, json.JSONDecodeError) as e:
        display.error(f"Cannot read prompt record: {e}")
        logger.log_error("Cannot read prompt record", e)
        return 1

    pipeline = CapturePipeline(config=config, logger=logger, display=display)
    capture = pipeline.handle_prompt_ready(record)
    if not capture.ok:
        display.error(f"Prompt record not captured ({capture.status.value})")
        return 1
    if capture.repaired:
        display.warning(f"Prompt structure repaired: {', '.join(capture.missing)}")

    if args.summary:
        stored = pipeline.store.get()
        chat_log = stored.get("chatLog")
        display.record_summary(
            section_counts(stored),
            len(chat_log) if isinstance(chat_log, list) else 0,
        )

    result = pipeline.export_now()
    if not result.ok:
        return 1
    display.export_status()
    print(result.artifact.location)
    return 0


if __name__ == "__main__":
    sys.exit(main())
