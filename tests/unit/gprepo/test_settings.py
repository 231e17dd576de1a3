from pathlib import Path

import pytest

from gprepo.exceptions import SettingsFileError
from gprepo.settings import ENV_CONFIG, ENV_LOG_FILE, Settings, env_defaults, load_settings_file


@pytest.mark.unit
def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.repo_path.resolve() == Path.cwd().resolve()
    assert settings.output is None
    assert settings.preamble is None
    assert settings.exclude == []
    assert settings.include == []
    assert settings.verbose is False


@pytest.mark.unit
def test_load_settings_file(tmp_path: Path) -> None:
    path = tmp_path / "conf" / "gprepo.yaml"
    path.parent.mkdir()
    path.write_text("exclude:\n  - docs\n  - '*.svg'\ninclude: [src]\npreamble: prompt.txt\n", encoding="utf-8")

    settings = load_settings_file(path)

    assert settings.exclude == ["docs", "*.svg"]
    assert settings.include == ["src"]
    assert settings.preamble == tmp_path / "conf" / "prompt.txt"


@pytest.mark.unit
def test_empty_settings_file_is_valid(tmp_path: Path) -> None:
    path = tmp_path / "gprepo.yaml"
    path.write_text("", encoding="utf-8")

    assert load_settings_file(path).exclude == []


@pytest.mark.unit
@pytest.mark.parametrize("text", ["exclude: [unclosed\n", "- just\n- a list\n", "excludes: [docs]\n"])
def test_invalid_settings_file_raises(tmp_path: Path, text: str) -> None:
    path = tmp_path / "gprepo.yaml"
    path.write_text(text, encoding="utf-8")

    with pytest.raises(SettingsFileError) as exc_info:
        load_settings_file(path)

    assert exc_info.value.path == path


@pytest.mark.unit
def test_merged_with_file_extends_lists_and_keeps_cli_preamble(tmp_path: Path) -> None:
    path = tmp_path / "gprepo.yaml"
    path.write_text("exclude: [docs]\ninclude: [src]\npreamble: from_file.txt\n", encoding="utf-8")
    cli_preamble = tmp_path / "cli.txt"

    merged = Settings(exclude=["*.lock"], preamble=cli_preamble, config=path).merged_with_file()

    assert merged.exclude == ["*.lock", "docs"]
    assert merged.include == ["src"]
    assert merged.preamble == cli_preamble


@pytest.mark.unit
def test_merged_with_file_uses_file_preamble_when_cli_has_none(tmp_path: Path) -> None:
    path = tmp_path / "gprepo.yaml"
    path.write_text("preamble: from_file.txt\n", encoding="utf-8")

    merged = Settings(config=path).merged_with_file()

    assert merged.preamble == tmp_path / "from_file.txt"


@pytest.mark.unit
def test_merged_without_config_is_identity() -> None:
    settings = Settings(exclude=["x"])

    assert settings.merged_with_file() is settings


@pytest.mark.unit
def test_env_defaults_reads_known_keys(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"{ENV_CONFIG}=gprepo.yaml\n{ENV_LOG_FILE}=\nOTHER=1\n", encoding="utf-8")

    assert env_defaults(str(env_file)) == {ENV_CONFIG: "gprepo.yaml"}
    assert env_defaults("") == {}
