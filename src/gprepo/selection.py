"""Per-entry keep/skip decisions applied during the repository walk."""

from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from gprepo.file_manipulation import is_binary, is_regular_file, relpath
from gprepo.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from gprepo.config import FilterSet

    IgnorePredicate = Callable[[str], bool]


class SkipReason(StrEnum):
    """Why an entry was left out of the export, in pipeline order."""

    NOT_A_FILE = auto()
    EXCLUDED_PATH = auto()
    NOT_INCLUDED = auto()
    EXCLUDED_GLOB = auto()
    IGNORED = auto()
    OUTPUT_FILE = auto()
    MODIFIED_DURING_RUN = auto()
    BINARY = auto()


class Verdict(BaseModel):
    """Outcome of the selection pipeline for one filesystem entry."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute path of the entry")
    rel: str = Field("", description="Slash separated path relative to the repository root")
    skip_reason: SkipReason | None = Field(None, description="None when the entry is kept")

    @property
    def keep(self) -> bool:
        return self.skip_reason is None


class SelectionPipeline:
    """Ordered chain of checks deciding whether a file is exported.

    Cheap string checks on the relative path run first, then the ignore
    predicate (which may call git), then checks touching file metadata or
    content. The first failing check wins.

    Args:
        root (Path): resolved repository root
        filters (FilterSet): include/exclude rules
        is_ignored (IgnorePredicate): returns True for version-control-ignored paths;
            any exception it raises aborts the run
        start_time_ns (int): process start time, nanoseconds since the epoch
        output_path (Path | None): destination file of the export, None for stdout
    """

    def __init__(
        self,
        root: Path,
        filters: FilterSet,
        is_ignored: IgnorePredicate,
        start_time_ns: int,
        output_path: Path | None = None,
    ) -> None:
        self.root = root
        self.filters = filters
        self.is_ignored = is_ignored
        self.start_time_ns = start_time_ns
        self.output_path = output_path.resolve() if output_path is not None else None

    def evaluate(self, path: Path) -> Verdict:
        """Run every check on `path` and return the verdict."""
        if not is_regular_file(path):
            return Verdict(path=path, skip_reason=SkipReason.NOT_A_FILE)

        rel = relpath(path, self.root)
        reason = self._skip_reason(path, rel)
        if reason is not None:
            logger.debug("file_skipped", path=rel, reason=str(reason))
        return Verdict(path=path, rel=rel, skip_reason=reason)

    def _skip_reason(self, path: Path, rel: str) -> SkipReason | None:
        if self.filters.is_excluded_path(rel):
            return SkipReason.EXCLUDED_PATH
        if not self.filters.is_included_path(rel):
            return SkipReason.NOT_INCLUDED
        if self.filters.matches_glob(rel):
            return SkipReason.EXCLUDED_GLOB
        if self.is_ignored(rel):
            return SkipReason.IGNORED
        if self.output_path is not None and path.resolve() == self.output_path:
            return SkipReason.OUTPUT_FILE
        if path.stat().st_mtime_ns >= self.start_time_ns:
            return SkipReason.MODIFIED_DURING_RUN
        if is_binary(path):
            return SkipReason.BINARY
        return None
