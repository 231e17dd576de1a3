from __future__ import annotations

import os
import re
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

if TYPE_CHECKING:
    from collections.abc import Iterable

FRAME_MARKER = "@@@@"
END_MARKER = f"{FRAME_MARKER}END{FRAME_MARKER}"

DEFAULT_INSTRUCTION = (
    "Below is a repository containing files. Each file begins with @@@@<file-path>@@@@ "
    "followed by its content. The repository ends with @@@@END@@@@. After this marker, "
    "instructions related to the repository are provided."
)

BINARY_SNIFF_BYTES = 1024

TOOL_NAME = "gprepo"


class IndentPolicy(StrEnum):
    """How leading whitespace of a line is rewritten, keyed by file extension."""

    TABS = auto()
    STRIP = auto()
    KEEP = auto()


SIGNIFICANT_WHITESPACE_EXTENSIONS = frozenset({
    "py", "nim", "hs", "yml", "yaml", "coffee", "jade", "pug", "slim", "sass", "haml",
})  # fmt: skip

NO_INDENTATION_EXTENSIONS = frozenset({
    "rs", "js", "jsx", "ts", "tsx", "c", "cpp", "h", "hpp", "java", "go", "cs", "rb", "php",
    "swift", "kt", "kts", "scala", "groovy", "fs", "fsx", "clj", "cljs", "edn", "lisp", "el",
    "scm", "ss", "rkt", "jl", "lua", "tcl", "pl", "pm", "elm", "erl", "hrl", "v", "sv", "svh",
    "html", "css", "scss", "less", "json", "xml", "sql", "md", "toml", "ini", "conf", "cfg",
    "sh", "bash", "zsh", "ps1", "awk", "sed",
})  # fmt: skip

DEFAULT_EXCLUDE_GLOBS: tuple[str, ...] = (
    "*[Cc][Hh][Aa][Nn][Gg][Ee][Ll][Oo][Gg]*",
    ".github*",
    ".gitignore",
    TOOL_NAME,
    "*LICENSE*",
    "*.lock",
    "*README*",
)


def indent_policy(extension: str) -> IndentPolicy:
    """Look up the whitespace policy for a file extension.

    Args:
        extension (str): the extension without its leading dot, case-sensitive ("" if none)

    Returns:
        IndentPolicy: TABS for whitespace-significant formats, STRIP for formats where
            indentation carries no meaning, KEEP otherwise.
    """
    if extension in SIGNIFICANT_WHITESPACE_EXTENSIONS:
        return IndentPolicy.TABS
    if extension in NO_INDENTATION_EXTENSIONS:
        return IndentPolicy.STRIP
    return IndentPolicy.KEEP


def normalize_filter_values(values: Iterable[str]) -> tuple[str, ...]:
    """Bring user filter values to the slash separated form of relative paths.

    Values are otherwise taken verbatim, so a blank include such as " " matches
    nothing rather than being dropped. Backslashes are only rewritten where they
    are the host separator; elsewhere they stay glob escapes.

    Args:
        values (Iterable[str]): raw include/exclude values

    Returns:
        tuple[str, ...]: the values, order preserved
    """
    if os.sep == "/":
        return tuple(values)
    return tuple(value.replace(os.sep, "/") for value in values)


def expand_braces(pattern: str) -> list[str]:
    """Expand `{a,b}` alternatives of a glob into plain patterns.

    Nested groups are expanded too; an unbalanced `{` is kept literally.

    Args:
        pattern (str): glob pattern, e.g. "*.{png,jpg}"

    Returns:
        list[str]: the alternatives, e.g. ["*.png", "*.jpg"]
    """
    start = pattern.find("{")
    while start != -1:
        depth = 0
        for end in range(start, len(pattern)):
            if pattern[end] == "{":
                depth += 1
            elif pattern[end] == "}":
                depth -= 1
                if depth == 0:
                    break
        else:
            start = pattern.find("{", start + 1)
            continue
        options: list[str] = []
        depth = 0
        last = start + 1
        for i in range(start + 1, end):
            if pattern[i] == "{":
                depth += 1
            elif pattern[i] == "}":
                depth -= 1
            elif pattern[i] == "," and depth == 0:
                options.append(pattern[last:i])
                last = i + 1
        options.append(pattern[last:end])
        head, tail = pattern[:start], pattern[end + 1 :]
        return [expanded for option in options for expanded in expand_braces(head + option + tail)]
    return [pattern]


def glob_to_regex(pattern: str) -> str:
    """Translate one brace-free glob into a regular expression source.

    `*` and `**` match any run of characters, `/` included; `**/` also matches
    zero directories, so "**/*.png" matches "logo.png". `?` matches one
    character and `[...]`/`[!...]` are character classes.
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif c == "*":
            while i < n and pattern[i] == "*":
                i += 1
            out.append(".*")
        elif c == "?":
            out.append(".")
            i += 1
        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                out.append(re.escape(c))
                i += 1
                continue
            body = pattern[i + 1 : j].replace("\\", "\\\\")
            if body[0] in "!^":
                body = "^" + body[1:]
            out.append(f"[{body}]")
            i = j + 1
        else:
            out.append(re.escape(c))
            i += 1
    return "".join(out)


def compile_globs(patterns: Iterable[str]) -> re.Pattern[str]:
    """Compile a set of globs into one pattern matching whole paths."""
    alternatives = [glob_to_regex(p) for pattern in patterns for p in expand_braces(pattern)]
    if not alternatives:
        return re.compile(r"(?!)")
    return re.compile("(?s:" + "|".join(f"(?:{a})" for a in alternatives) + r")\Z")


class FilterSet(BaseModel):
    """Immutable include/exclude rules applied to every relative path.

    Attributes:
        exclude_prefixes: paths whose subtree (or the path itself) is skipped.
        include_prefixes: when non-empty, only paths inside one of these are kept.
        exclude_globs: shell-style patterns matched against the full relative path.
    """

    model_config = ConfigDict(frozen=True)

    exclude_prefixes: tuple[str, ...] = Field(default=(), description="Exclude path prefixes")
    include_prefixes: tuple[str, ...] = Field(default=(), description="Include path prefixes")
    exclude_globs: tuple[str, ...] = Field(
        default=DEFAULT_EXCLUDE_GLOBS,
        description="Exclude glob patterns, built-in defaults included",
    )

    _glob_pattern: re.Pattern[str] = PrivateAttr()

    @classmethod
    def build(cls, excludes: Iterable[str] = (), includes: Iterable[str] = ()) -> FilterSet:
        """Build the filter set from user values.

        Every exclude value acts both as a path prefix and as a glob pattern; the
        built-in glob defaults are always part of the glob set.

        Args:
            excludes (Iterable[str]): user exclude values
            includes (Iterable[str]): user include prefixes

        Returns:
            FilterSet: the frozen filter set
        """
        exc = normalize_filter_values(excludes)
        return cls(
            exclude_prefixes=exc,
            include_prefixes=normalize_filter_values(includes),
            exclude_globs=(*exc, *DEFAULT_EXCLUDE_GLOBS),
        )

    def model_post_init(self, context: Any, /) -> None:  # noqa: ANN401
        """Compile the glob set into a single pattern once."""
        self._glob_pattern = compile_globs(self.exclude_globs)

    def matches_glob(self, rel: str) -> bool:
        """Check if a relative path matches any exclude glob.

        Matching is case-sensitive, `*` also matches `/`, `**/` may match no
        directory at all and `{a,b}` alternatives are expanded.

        Args:
            rel (str): the slash separated relative path

        Returns:
            bool: True if any pattern matches the whole path
        """
        return self._glob_pattern.match(rel) is not None

    def is_excluded_path(self, rel: str) -> bool:
        """Check if `rel` lies inside (or is) one of the exclude prefixes."""
        return any(is_child_of(rel, p) for p in self.exclude_prefixes)

    def is_included_path(self, rel: str) -> bool:
        """Check if `rel` passes the include prefixes (always True when none are set)."""
        if not self.include_prefixes:
            return True
        return any(is_child_of(rel, p) for p in self.include_prefixes)


def is_child_of(child: str, parent: str) -> bool:
    """Check if `child` is `parent` itself or a path below it.

    This is path containment on whole segments, not a glob match: "srcfoo/a.rs"
    is not a child of "src". A trailing slash on `parent` is ignored.

    Args:
        child (str): slash separated relative path
        parent (str): slash separated prefix path

    Returns:
        bool: True if `child` equals `parent` or starts with `parent` followed by "/"
    """
    parent = parent.rstrip("/")
    return child == parent or child.startswith(parent + "/")
