from pathlib import Path, PurePath

import pytest

from gprepo.exceptions import FileProcessingError
from gprepo.file_manipulation import (
    file_extension,
    is_binary,
    is_regular_file,
    normalize_content,
    read_text,
    relpath,
    split_lines,
)


@pytest.mark.unit
def test_python_runs_of_four_spaces_become_tabs_anywhere_in_the_line() -> None:
    source = "def f():\n        x = 1    # note\n   y\n"

    assert normalize_content("py", source) == "def f():\n\t\tx = 1\t# note\n   y\n"


@pytest.mark.unit
def test_four_space_replacement_is_non_overlapping() -> None:
    assert normalize_content("yaml", "a:\n         b\n") == "a:\n\t\t b\n"


@pytest.mark.unit
def test_no_indentation_languages_lose_leading_whitespace_only() -> None:
    source = "fn main() {\n    let x  =  1;  \n\t\treturn;\n}\n"

    out = normalize_content("rs", source)

    assert out == "fn main() {\nlet x  =  1;  \nreturn;\n}\n"
    assert all(not ln.startswith((" ", "\t")) for ln in out.splitlines())


@pytest.mark.unit
def test_unlisted_extension_keeps_lines_unchanged() -> None:
    assert normalize_content("txt", "  hello\n    world\n") == "  hello\n    world\n"
    assert normalize_content("", "  indented\n") == "  indented\n"


@pytest.mark.unit
def test_extension_lookup_is_case_sensitive() -> None:
    assert normalize_content("RS", "    x\n") == "    x\n"


@pytest.mark.unit
@pytest.mark.parametrize("ext", ["py", "rs", "txt"])
def test_empty_lines_are_dropped(ext: str) -> None:
    out = normalize_content(ext, "a\n\n\r\nb\n\n")

    assert out == "a\nb\n"
    assert "" not in out.splitlines()


@pytest.mark.unit
def test_whitespace_only_lines_vanish_for_no_indentation_languages() -> None:
    assert normalize_content("json", "{\n   \n}\n") == "{\n}\n"


@pytest.mark.unit
def test_last_line_without_newline_gets_one() -> None:
    assert normalize_content("txt", "hello") == "hello\n"
    assert normalize_content("txt", "") == ""


@pytest.mark.unit
def test_split_lines_strips_carriage_returns_only() -> None:
    assert split_lines("a\r\nb\x0cc\nd") == ["a", "b\x0cc", "d"]


@pytest.mark.unit
def test_split_lines_keeps_lone_carriage_return_on_last_line() -> None:
    assert split_lines("a\r\nb\r") == ["a", "b\r"]
    assert split_lines("a\rb\n") == ["a\rb"]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "expected"),
    [("src/app.py", "py"), ("Makefile", ""), (".bashrc", ""), ("a.tar.GZ", "GZ")],
)
def test_file_extension(name: str, expected: str) -> None:
    assert file_extension(PurePath(name)) == expected


@pytest.mark.unit
def test_is_binary_detects_zero_byte_in_prefix(tmp_path: Path) -> None:
    path = tmp_path / "blob.txt"
    path.write_bytes(b"abc" * 100 + b"\x00" + b"def")

    assert is_binary(path)


@pytest.mark.unit
def test_is_binary_only_inspects_first_1024_bytes(tmp_path: Path) -> None:
    path = tmp_path / "late_zero.txt"
    path.write_bytes(b"a" * 1024 + b"\x00")

    assert not is_binary(path)


@pytest.mark.unit
def test_is_binary_on_small_and_empty_text_files(tmp_path: Path) -> None:
    small = tmp_path / "small.txt"
    small.write_text("hello\n", encoding="utf-8")
    empty = tmp_path / "empty.txt"
    empty.write_bytes(b"")

    assert not is_binary(small)
    assert not is_binary(empty)


@pytest.mark.unit
def test_is_binary_propagates_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        is_binary(tmp_path / "missing")


@pytest.mark.unit
def test_is_regular_file_does_not_follow_symlinks(tmp_path: Path) -> None:
    target = tmp_path / "target.txt"
    target.write_text("x", encoding="utf-8")
    link = tmp_path / "link.txt"
    link.symlink_to(target)

    assert is_regular_file(target)
    assert not is_regular_file(link)
    assert not is_regular_file(tmp_path)
    with pytest.raises(FileNotFoundError):
        is_regular_file(tmp_path / "missing")


@pytest.mark.unit
def test_read_text_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "latin1.txt"
    path.write_bytes("caf\xe9".encode("latin-1"))

    with pytest.raises(FileProcessingError) as exc_info:
        read_text(path)

    assert exc_info.value.path == path


@pytest.mark.unit
def test_relpath_uses_forward_slashes(tmp_path: Path) -> None:
    assert relpath(tmp_path / "src" / "pkg" / "mod.py", tmp_path) == "src/pkg/mod.py"
