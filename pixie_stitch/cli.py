"""Command line entry: ``pixie-stitch IMAGE [IMAGE ...]``."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from . import __version__, settings
from .core.errors import PixieStitchError
from .core.pipeline import run_batch

logger = logging.getLogger("pixie_stitch")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixie-stitch",
        description="Convert PNG or GIF images into printable cross stitch patterns.",
        epilog="Output goes to <name>/, <name>_centered/ and <name>_preview/ under "
        "PIXIE_OUTPUT_DIR (default: the current directory).",
    )
    parser.add_argument("images", nargs="+", metavar="IMAGE", help="PNG or GIF image path")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        records = run_batch(args.images)
    except PixieStitchError as exc:
        logger.error("%s", exc)
        return 1

    for record in records:
        if record.error:
            logger.info("%s: %s (%s)", record.job_id, record.status, record.error)
        else:
            logger.info("%s: %s, %d files", record.job_id, record.status, len(record.files))
    return 1 if any(record.status != "done" for record in records) else 0


__all__ = ["build_parser", "main"]
