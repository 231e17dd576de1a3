from __future__ import annotations

import stat
from pathlib import Path, PurePath

from gprepo.config import BINARY_SNIFF_BYTES, IndentPolicy, indent_policy
from gprepo.exceptions import FileProcessingError

FOUR_SPACES = "    "


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
    """
    return PurePath(path.relative_to(root)).as_posix()


def file_extension(path: PurePath) -> str:
    """Return the extension of `path` without its leading dot.

    Case is preserved and a file without extension yields "". Dotfiles such as
    `.bashrc` have no extension.

    Args:
        path (PurePath): the file path

    Returns:
        str: the extension, e.g. "py" for "src/app.py"
    """
    return path.suffix[1:]


def is_regular_file(path: Path) -> bool:
    """Check if a file is regular, without following symlinks.

    Args:
        path (Path): path to test.

    Returns:
        bool: True if the file is regular, False otherwise. A missing path raises.
    """
    return stat.S_ISREG(path.lstat().st_mode)


def is_binary(path: Path, nbytes: int = BINARY_SNIFF_BYTES) -> bool:
    """Check if a file looks binary.

    Reads at most `nbytes` from the start of the file, looping on short reads, and
    reports binary as soon as a zero byte shows up. I/O errors propagate.

    Args:
        path (Path): the file path to check
        nbytes (int, optional): size of the prefix to inspect. Defaults to 1024.

    Returns:
        bool: True if a zero byte was found in the inspected prefix
    """
    total = 0
    with path.open("rb") as f:
        while total < nbytes:
            chunk = f.read(nbytes - total)
            if not chunk:
                break
            if b"\x00" in chunk:
                return True
            total += len(chunk)
    return False


def normalize_line(line: str, policy: IndentPolicy) -> str:
    """Apply a whitespace policy to a single line (without its line terminator)."""
    if policy is IndentPolicy.TABS:
        return line.replace(FOUR_SPACES, "\t")
    if policy is IndentPolicy.STRIP:
        return line.lstrip()
    return line


def split_lines(content: str) -> list[str]:
    r"""Split text on "\n" and "\r\n" line endings.

    Unlike `str.splitlines`, form feeds, lone "\r" and other Unicode separators
    stay inside the line, so a last line ending in "\r" without a following "\n"
    keeps it. A final terminator does not produce an extra line.
    """
    *terminated, last = content.split("\n")
    lines = [ln[:-1] if ln.endswith("\r") else ln for ln in terminated]
    if last:
        lines.append(last)
    return lines


def normalize_content(extension: str, content: str) -> str:
    """Normalize a file's text according to its extension.

    - Whitespace-significant formats (Python, YAML, ...): every run of four spaces
      becomes a tab, anywhere in the line.
    - Formats where indentation is cosmetic (Rust, JS, JSON, ...): leading
      whitespace is stripped.
    - Anything else: lines are kept as-is.

    Lines left empty are dropped; every kept line ends with a newline.

    Args:
        extension (str): file extension without the dot, case-sensitive
        content (str): full text of the file

    Returns:
        str: the normalized text ("" if no line survives)
    """
    policy = indent_policy(extension)
    out: list[str] = []
    for ln in split_lines(content):
        processed = normalize_line(ln, policy)
        if processed:
            out.append(processed + "\n")
    return "".join(out)


def read_text(path: Path) -> str:
    """Read a whole file as UTF-8 text.

    Args:
        path (Path): the file to read

    Raises:
        FileProcessingError: if the content is not valid UTF-8

    Returns:
        str: the file content
    """
    data = path.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileProcessingError(path=path, detail=f"not valid UTF-8 text ({e.reason})") from e


def render_file(path: Path) -> str:
    """Read `path` and normalize it according to its extension."""
    return normalize_content(file_extension(path), read_text(path))
