"""
gprepo: flatten a git working tree into one framed text stream for an LLM.

Every text file of the repository is written after a `@@@@<path>@@@@` marker,
with indentation normalized per file type, and the stream ends with
`@@@@END@@@@`. Files ignored by git, binary files, the output file itself and
files modified while the export runs are left out.

Usage
-----
Run `gprepo --help` for full options. Common examples:
    - Whole repository to stdout:
        gprepo

    - Only `src/`, without lock files and `docs/`, into a file:
        gprepo --include src --exclude "*.lock" docs --output repo.txt

    - Custom header and a YAML settings file:
        gprepo --preamble prompt.txt --config gprepo.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from contextlib import ExitStack
from pathlib import Path
from typing import TYPE_CHECKING

from gprepo import __version__
from gprepo.config import TOOL_NAME, FilterSet
from gprepo.exceptions import GprepoError
from gprepo.logging import logger, setup_logging
from gprepo.output_construction import emit_repository
from gprepo.repository import GitIgnoreChecker, discover_repository
from gprepo.selection import SelectionPipeline
from gprepo.settings import ENV_CONFIG, ENV_LOG_FILE, Settings, env_defaults

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into settings.

    `.env` values (GPREPO_CONFIG, GPREPO_LOG_FILE) act as defaults.

    Args:
        argv (Sequence[str] | None): arguments, `sys.argv[1:]` when None

    Returns:
        Settings: the parsed settings
    """
    env = env_defaults()
    p = argparse.ArgumentParser(
        prog=TOOL_NAME,
        description="Concatenate the files of a git repository into framed text for an LLM.",
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        metavar="OUTPUT_PATH",
        help="Output to path (default: stdout).",
    )
    p.add_argument(
        "-r",
        "--repo-path",
        type=Path,
        default=None,
        metavar="REPO_PATH",
        help="Path to the repository (default: current directory).",
    )
    p.add_argument(
        "-p",
        "--preamble",
        type=Path,
        default=None,
        metavar="PREAMBLE_PATH",
        help="Optional path to the preamble file.",
    )
    p.add_argument(
        "-e",
        "--exclude",
        action="extend",
        nargs="+",
        default=[],
        metavar="EXCLUDE_PATH",
        help="File paths to exclude (supports glob patterns, repeatable).",
    )
    p.add_argument(
        "-i",
        "--include",
        action="extend",
        nargs="+",
        default=[],
        metavar="INCLUDE_PATH",
        help="Only process these paths (repeatable).",
    )
    p.add_argument(
        "-c",
        "--config",
        type=Path,
        default=env.get(ENV_CONFIG),
        metavar="CONFIG_PATH",
        help="YAML settings file with exclude/include/preamble.",
    )
    p.add_argument(
        "--log-file",
        type=str,
        default=env.get(ENV_LOG_FILE, ""),
        help="Log file path (default: stderr).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log every skipped file.")
    args = vars(p.parse_args(argv))
    if args["repo_path"] is None:
        del args["repo_path"]
    return Settings(**args)


def export(settings: Settings, stdout: TextIO) -> int:
    """Run one export with fully merged settings.

    The process start time is taken before the output file is created, so the
    output never qualifies as an unmodified input.

    Args:
        settings (Settings): merged settings
        stdout (TextIO): stream used when no output file is configured

    Returns:
        int: number of files written
    """
    start_time_ns = time.time_ns()
    root = discover_repository(settings.repo_path)
    pipeline = SelectionPipeline(
        root=root,
        filters=FilterSet.build(settings.exclude, settings.include),
        is_ignored=GitIgnoreChecker(root),
        start_time_ns=start_time_ns,
        output_path=settings.output,
    )
    with ExitStack() as stack:
        if settings.output is not None:
            sink = stack.enter_context(settings.output.open("w", encoding="utf-8", newline=""))
        else:
            sink = stdout
        return emit_repository(sink, pipeline, preamble=settings.preamble)


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    try:
        setup_logging(
            settings.log_file or None,
            level=logging.DEBUG if settings.verbose else logging.INFO,
            force=True,
        )
        export(settings.merged_with_file(), sys.stdout)
    except GprepoError as e:
        logger.error("export_failed", error=e.describe(), kind=type(e).__name__)
        print(f"{TOOL_NAME}: error: {e.describe()}", file=sys.stderr)
        return 1
    except (OSError, UnicodeError) as e:
        logger.error("export_failed", error=str(e), kind=type(e).__name__)
        print(f"{TOOL_NAME}: error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
