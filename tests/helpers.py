from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

PAST_MTIME_NS = 1_000_000_000 * 1_600_000_000


def write_file(path: Path, content: str | bytes) -> Path:
    """Create `path` (and its parents) with a modification time well in the past."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    os.utime(path, ns=(PAST_MTIME_NS, PAST_MTIME_NS))
    return path
