from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class GprepoError(Exception):
    """Base exception for errors in the gprepo package."""

    def describe(self) -> str:
        """Return a one-line human readable description of the error."""
        return str(self)


@dataclass(frozen=True)
class RepositoryNotFoundError(GprepoError):
    """Raised when no git repository encloses the starting directory."""

    folder: Path
    message: str = "Could not find repository"

    def describe(self) -> str:
        return f"{self.message}: {self.folder}"


@dataclass(frozen=True)
class MissingWorkdirError(GprepoError):
    """Raised when the repository has no working directory to walk."""

    folder: Path
    message: str = "Could not find repository working directory"

    def describe(self) -> str:
        return f"{self.message}: {self.folder}"


@dataclass(frozen=True)
class GitCommandError(GprepoError):
    """Raised when a git command fails."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    def describe(self) -> str:
        detail = self.stderr.strip() or self.stdout.strip()
        return f"`{self.command}` exited with {self.returncode}: {detail}"


@dataclass(frozen=True)
class IgnoreCheckError(GprepoError):
    """Raised when the ignore status of a path cannot be determined."""

    path: str
    detail: str

    def describe(self) -> str:
        return f"Failed to check if path should be ignored: {self.path}: {self.detail}"


@dataclass(frozen=True)
class FileProcessingError(GprepoError):
    """Raised when an error occurs during file processing."""

    path: Path
    detail: str

    def describe(self) -> str:
        return f"Failed to process {self.path}: {self.detail}"


@dataclass(frozen=True)
class SettingsFileError(GprepoError):
    """Raised when a YAML settings file cannot be loaded."""

    path: Path
    detail: str

    def describe(self) -> str:
        return f"Invalid settings file {self.path}: {self.detail}"
