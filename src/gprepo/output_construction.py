from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from gprepo.config import DEFAULT_INSTRUCTION, END_MARKER, FRAME_MARKER
from gprepo.file_manipulation import read_text, render_file
from gprepo.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import TextIO

    from gprepo.selection import SelectionPipeline


def walk_entries(root: Path) -> Iterator[Path]:
    """Yield every entry below `root` depth-first, in pre-order.

    Entries of a directory are visited in name order and each directory is
    yielded before its content. Symlinked directories are yielded but not
    followed. `root` itself is yielded first.

    Args:
        root (Path): the directory to walk

    Yields:
        Iterator[Path]: absolute entry paths
    """
    yield root
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            yield from walk_entries(path)
        else:
            yield path


def display_path(rel: str) -> str:
    """Make `rel` writable to a UTF-8 sink.

    File names that are not valid UTF-8 come back from the filesystem with
    surrogate escapes; their undecodable bytes are shown as U+FFFD.
    """
    return os.fsencode(rel).decode("utf-8", errors="replace")


def frame_header(rel: str) -> str:
    """Start marker line for the file at `rel`."""
    return f"{FRAME_MARKER}{display_path(rel)}{FRAME_MARKER}\n"


def write_preamble(sink: TextIO, preamble: Path | None = None) -> None:
    """Write the preamble file content, or the default instruction, plus a newline.

    The preamble is copied byte for byte, line endings included.

    Args:
        sink (TextIO): output stream
        preamble (Path | None): optional file replacing the default instruction

    Raises:
        FileProcessingError: if the preamble is not valid UTF-8
    """
    text = read_text(preamble) if preamble is not None else DEFAULT_INSTRUCTION
    sink.write(text + "\n")


def emit_repository(
    sink: TextIO,
    pipeline: SelectionPipeline,
    *,
    preamble: Path | None = None,
) -> int:
    """Write the whole framed export of the pipeline's repository to `sink`.

    The layout is the preamble, then one frame per kept file (start marker,
    normalized body, blank line), then the end marker. Any error aborts the
    export before the end marker is written.

    Args:
        sink (TextIO): output stream
        pipeline (SelectionPipeline): selection rules bound to the repository root
        preamble (Path | None): optional preamble file

    Returns:
        int: number of frames written
    """
    write_preamble(sink, preamble)
    count = 0
    for path in walk_entries(pipeline.root):
        verdict = pipeline.evaluate(path)
        if not verdict.keep:
            continue
        body = render_file(path)
        sink.write(frame_header(verdict.rel))
        sink.write(body + "\n")
        count += 1
    sink.write(END_MARKER + "\n")
    sink.flush()
    logger.info("export_written", root=str(pipeline.root), files=count)
    return count
