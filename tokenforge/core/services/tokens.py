"""
Token toolkit — read, write, flatten and resolve token trees.

A token tree maps a relative file path (``colors/base.json``) to that
file's parsed JSON.  Inside a file, any object holding both ``$type``
and ``$value`` is a token; everything else is a group.  A ``$value``
shaped like ``{colors.primary}`` references another token by its
dotted path; references embedded in a longer string
(``1px solid {colors.border}``) are substituted as text.

Files named ``*.dark.json`` hold dark-theme overrides.  They resolve
against the base tokens with their own entries taking precedence.

This module is handed to generator plugins as ``context.toolkit``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path, PurePosixPath
from typing import Any

from tokenforge.core.errors import (
    InvalidTokenPathError,
    TokenReferenceError,
    TokensDirNotFoundError,
    TokenValueError,
)
from tokenforge.core.services.colors import parse_color, to_space_rgb, to_unit_rgba

logger = logging.getLogger(__name__)

TokenTree = dict[str, Any]

DARK_SUFFIX = ".dark.json"

_REFERENCE_RE = re.compile(r"\{([^{}]+)\}")

__all__ = [
    "DARK_SUFFIX",
    "FlatToken",
    "TokenTree",
    "flatten_tokens",
    "is_dark_file",
    "parse_color",
    "read_token_tree",
    "reference_of",
    "resolve_tokens",
    "serialize_token_file",
    "split_by_theme",
    "to_space_rgb",
    "to_unit_rgba",
    "validate_token_path",
    "write_token_tree",
]


@dataclass(frozen=True)
class FlatToken:
    """One token lifted out of its file, with its dotted path."""

    path: tuple[str, ...]
    type: str
    value: Any
    file_path: str
    description: str = ""

    @property
    def dotted(self) -> str:
        return ".".join(self.path)

    @property
    def css_name(self) -> str:
        """CSS custom property name: ``colors.primary`` → ``--colors-primary``."""
        return "--" + "-".join(self.path)


# ── Paths ───────────────────────────────────────────────────────────


def validate_token_path(path: str) -> str:
    """Check a token file path and return it normalised.

    Raises:
        InvalidTokenPathError: Absolute, backslashed, escaping the root
            via ``..``, or not a ``.json`` file.
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidTokenPathError(str(path), "is empty")
    if "\\" in path:
        raise InvalidTokenPathError(path, "must use forward slashes")

    pure = PurePosixPath(path)
    if pure.is_absolute():
        raise InvalidTokenPathError(path, "must be relative to the token root")
    if ".." in pure.parts:
        raise InvalidTokenPathError(path, "must not contain '..' segments")
    if pure.suffix != ".json":
        raise InvalidTokenPathError(path, "must end in .json")

    return pure.as_posix()


def is_dark_file(path: str) -> bool:
    return path.endswith(DARK_SUFFIX)


# ── Read / write ────────────────────────────────────────────────────


def read_token_tree(tokens_dir: Path) -> TokenTree:
    """Load every ``*.json`` file under ``tokens_dir``, sorted by path.

    Raises:
        TokensDirNotFoundError: ``tokens_dir`` is not a directory.
        TokenValueError: A file is not valid JSON.
    """
    if not tokens_dir.is_dir():
        raise TokensDirNotFoundError(str(tokens_dir))

    tree: TokenTree = {}
    for file in sorted(tokens_dir.rglob("*.json")):
        if not file.is_file():
            continue
        rel = file.relative_to(tokens_dir).as_posix()
        try:
            tree[rel] = json.loads(file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise TokenValueError(rel, f"<{e.msg} at line {e.lineno}>", "valid JSON") from e

    logger.debug("Read %d token files from %s", len(tree), tokens_dir)
    return tree


def write_token_tree(tree: TokenTree, tokens_dir: Path) -> list[Path]:
    """Materialise a token tree on disk under ``tokens_dir``.

    Every path is validated before anything is written.

    Returns:
        The files written.
    """
    checked = {validate_token_path(path): content for path, content in tree.items()}

    written = []
    for rel, content in checked.items():
        target = tokens_dir / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(serialize_token_file(content), encoding="utf-8")
        written.append(target)
    return written


def serialize_token_file(content: Any) -> str:
    """Canonical on-disk form of a token file: 2-space JSON, trailing newline."""
    return json.dumps(content, indent=2, ensure_ascii=False) + "\n"


# ── Flatten / resolve ───────────────────────────────────────────────


def _is_token(value: Any) -> bool:
    return isinstance(value, dict) and "$type" in value and "$value" in value


def _walk(node: dict, file_path: str, prefix: tuple[str, ...], out: list[FlatToken]) -> None:
    for key, value in node.items():
        if key.startswith("$"):
            continue
        path = (*prefix, key)
        if _is_token(value):
            out.append(
                FlatToken(
                    path=path,
                    type=str(value["$type"]),
                    value=value["$value"],
                    file_path=file_path,
                    description=str(value.get("$description", "")),
                )
            )
        elif isinstance(value, dict):
            _walk(value, file_path, path, out)


def flatten_tokens(tree: TokenTree) -> list[FlatToken]:
    """All tokens in the tree, file by file, in document order."""
    tokens: list[FlatToken] = []
    for file_path, content in tree.items():
        if isinstance(content, dict):
            _walk(content, file_path, (), tokens)
    return tokens


def split_by_theme(tokens: list[FlatToken]) -> tuple[list[FlatToken], list[FlatToken]]:
    """(base tokens, dark-override tokens)."""
    base = [t for t in tokens if not is_dark_file(t.file_path)]
    dark = [t for t in tokens if is_dark_file(t.file_path)]
    return base, dark


def reference_of(value: Any) -> str | None:
    """The dotted path a ``{a.b}`` value points at, or None."""
    if not isinstance(value, str):
        return None
    m = _REFERENCE_RE.fullmatch(value.strip())
    return m.group(1) if m else None


def resolve_tokens(
    tokens: list[FlatToken],
    lookup: list[FlatToken] | None = None,
) -> list[FlatToken]:
    """Replace reference values with the values they point at.

    References resolve through ``lookup`` (default: ``tokens`` itself),
    with later entries winning on duplicate paths.  Unknown references
    are left as-is.

    Raises:
        TokenReferenceError: A reference chain loops back on itself.
    """
    table = {t.dotted: t.value for t in (lookup if lookup is not None else tokens)}
    resolved = []
    for token in tokens:
        value = _resolve_value(token.value, table, [token.dotted])
        resolved.append(replace(token, value=value) if value is not token.value else token)
    return resolved


def _resolve_value(value: Any, table: dict[str, Any], chain: list[str]) -> Any:
    ref = reference_of(value)
    if ref is not None:
        return _follow(ref, value, table, chain)
    if not isinstance(value, str) or "{" not in value:
        return value
    # "1px solid {colors.border}": substitute each reference as text
    return _REFERENCE_RE.sub(
        lambda m: str(_follow(m.group(1), m.group(0), table, chain)), value
    )


def _follow(ref: str, original: Any, table: dict[str, Any], chain: list[str]) -> Any:
    if ref in chain:
        raise TokenReferenceError([*chain, ref])
    if ref not in table:
        logger.warning("Unresolved token reference {%s} in %s", ref, chain[0])
        return original
    return _resolve_value(table[ref], table, [*chain, ref])
