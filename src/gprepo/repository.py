"""Git collaborators: repository discovery and ignore-status lookup."""

from __future__ import annotations

import subprocess  # noqa: S404
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from gprepo.exceptions import (
    GitCommandError,
    IgnoreCheckError,
    MissingWorkdirError,
    RepositoryNotFoundError,
)
from gprepo.logging import logger

GIT_DIR_NAME = ".git"


def run_git(args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    """Run a git command and return the completed process without checking its status.

    Args:
        args (list[str]): arguments passed after `git`
        cwd (Path): working directory for the command

    Raises:
        GitCommandError: if the git executable cannot be started

    Returns:
        subprocess.CompletedProcess[str]: the finished process, text mode
    """
    command = ["git", *args]
    try:
        return subprocess.run(  # noqa: S603
            command,
            cwd=str(cwd),
            text=True,
            capture_output=True,
            check=False,
        )
    except OSError as e:
        raise GitCommandError(
            command=" ".join(command),
            returncode=-1,
            stdout="",
            stderr=str(e),
        ) from e


def discover_repository(start: Path) -> Path:
    """Find the working directory root of the git repository enclosing `start`.

    Args:
        start (Path): directory to search from (searching upwards)

    Raises:
        MissingWorkdirError: if `start` does not exist or the repository is bare
        RepositoryNotFoundError: if no repository encloses `start`

    Returns:
        Path: the absolute, resolved working tree root
    """
    start = start.expanduser()
    if not start.is_dir():
        raise MissingWorkdirError(folder=start)

    bare = run_git(["rev-parse", "--is-bare-repository"], cwd=start)
    if bare.returncode != 0:
        raise RepositoryNotFoundError(folder=start)
    if bare.stdout.strip() == "true":
        raise MissingWorkdirError(folder=start)

    top = run_git(["rev-parse", "--show-toplevel"], cwd=start)
    if top.returncode != 0 or not top.stdout.strip():
        raise MissingWorkdirError(folder=start)

    root = Path(top.stdout.strip()).resolve()
    logger.debug("repository_discovered", start=str(start), root=str(root))
    return root


@dataclass(frozen=True)
class GitIgnoreChecker:
    """Ignore predicate backed by `git check-ignore`.

    Paths inside a `.git` directory are always ignored. Any other path is
    checked against the repository's ignore rules (the index is not consulted,
    so a tracked file matching a rule is still reported as ignored). Paths are
    passed as literal pathspecs, so names such as ":(foo).txt" are not read as
    pathspec magic.
    """

    root: Path

    def __call__(self, rel: str) -> bool:
        """Tell whether `rel` (slash separated, relative to the root) is ignored.

        Raises:
            IgnoreCheckError: if git cannot answer for this path
        """
        if GIT_DIR_NAME in PurePosixPath(rel).parts:
            return True
        try:
            proc = run_git(
                ["--literal-pathspecs", "check-ignore", "-q", "--no-index", "--", rel],
                cwd=self.root,
            )
        except GitCommandError as e:
            raise IgnoreCheckError(path=rel, detail=e.describe()) from e
        if proc.returncode == 0:
            return True
        if proc.returncode == 1:
            return False
        raise IgnoreCheckError(
            path=rel,
            detail=proc.stderr.strip() or f"git check-ignore exited with {proc.returncode}",
        )
