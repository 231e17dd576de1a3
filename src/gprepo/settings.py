from __future__ import annotations

from pathlib import Path

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gprepo.exceptions import SettingsFileError

ENV_FILE = find_dotenv(usecwd=True)

ENV_CONFIG = "GPREPO_CONFIG"
ENV_LOG_FILE = "GPREPO_LOG_FILE"


def env_defaults(env_file: str = ENV_FILE) -> dict[str, str]:
    """Read gprepo defaults from the `.env` file found from the working directory.

    Args:
        env_file (str): path of the dotenv file ("" when none was found)

    Returns:
        dict[str, str]: non-empty values keyed by variable name
    """
    if not env_file:
        return {}
    values = dotenv_values(env_file)
    return {k: v for k, v in values.items() if k in {ENV_CONFIG, ENV_LOG_FILE} and v}


class Settings(BaseModel):
    """Configuration settings for a gprepo run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    output: Path | None = Field(default=None, description="Output file; None means stdout.")
    repo_path: Path = Field(default_factory=Path.cwd, description="Where to discover the repository from.")
    preamble: Path | None = Field(default=None, description="File replacing the default instruction.")
    exclude: list[str] = Field(default_factory=list, description="Exclude path prefixes and globs.")
    include: list[str] = Field(default_factory=list, description="Include path prefixes.")
    config: Path | None = Field(default=None, description="YAML settings file.")
    log_file: str = Field(default="", description="Log file path.")
    verbose: bool = Field(default=False, description="Log every skipped file.")

    def merged_with_file(self) -> Settings:
        """Return a copy extended with the values of the YAML settings file, if any.

        Filter lists from the file are appended to the command-line ones; a preamble
        from the file is used only when none was given on the command line.
        """
        if self.config is None:
            return self
        file_settings = load_settings_file(self.config)
        return self.model_copy(
            update={
                "exclude": [*self.exclude, *file_settings.exclude],
                "include": [*self.include, *file_settings.include],
                "preamble": self.preamble or file_settings.preamble,
            },
        )


class FileSettings(BaseModel):
    """Schema of a YAML settings file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    exclude: list[str] = Field(default_factory=list)
    include: list[str] = Field(default_factory=list)
    preamble: Path | None = None


def load_settings_file(path: Path) -> FileSettings:
    """Load and validate a YAML settings file.

    A relative `preamble` is resolved against the settings file's directory.

    Args:
        path (Path): the YAML file

    Raises:
        SettingsFileError: if the file is not UTF-8 YAML or does not match the schema

    Returns:
        FileSettings: the validated settings
    """
    try:
        data = yaml.safe_load(path.read_bytes().decode("utf-8")) or {}
    except UnicodeDecodeError as e:
        raise SettingsFileError(path=path, detail=f"not valid UTF-8 text ({e.reason})") from e
    except yaml.YAMLError as e:
        raise SettingsFileError(path=path, detail=str(e)) from e
    if not isinstance(data, dict):
        raise SettingsFileError(path=path, detail="top level must be a mapping")
    try:
        settings = FileSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsFileError(path=path, detail=str(e)) from e
    if settings.preamble is not None and not settings.preamble.is_absolute():
        settings = settings.model_copy(update={"preamble": path.parent / settings.preamble})
    return settings
