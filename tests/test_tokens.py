"""
Tests for the token toolkit — paths, reading, flattening, references, colours.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tokenforge.core.errors import (
    InvalidTokenPathError,
    TokenReferenceError,
    TokensDirNotFoundError,
    TokenValueError,
)
from tokenforge.core.services.colors import RGBA, parse_color, to_space_rgb, to_unit_rgba
from tokenforge.core.services.tokens import (
    flatten_tokens,
    read_token_tree,
    reference_of,
    resolve_tokens,
    split_by_theme,
    validate_token_path,
    write_token_tree,
)


class TestValidateTokenPath:
    """Tests for token file path validation."""

    @pytest.mark.parametrize("path", ["colors.json", "colors/base.json", "a/b/c.dark.json"])
    def test_valid(self, path: str):
        assert validate_token_path(path) == path

    @pytest.mark.parametrize(
        "path",
        ["", "/etc/passwd.json", "../escape.json", "a/../../b.json", "colors\\base.json", "colors.txt"],
    )
    def test_rejected(self, path: str):
        with pytest.raises(InvalidTokenPathError):
            validate_token_path(path)


class TestReadWriteTree:
    """Tests for reading and materialising token trees."""

    def test_read_sorted_relative_paths(self, tokens_dir: Path):
        tree = read_token_tree(tokens_dir)
        assert list(tree) == ["colors/base.dark.json", "colors/base.json", "spacing.json"]
        assert tree["spacing.json"]["space"]["md"]["$value"] == "16px"

    def test_read_missing_dir(self, tmp_path: Path):
        with pytest.raises(TokensDirNotFoundError):
            read_token_tree(tmp_path / "missing")

    def test_read_invalid_json(self, tmp_path: Path):
        (tmp_path / "broken.json").write_text("{oops")
        with pytest.raises(TokenValueError) as exc:
            read_token_tree(tmp_path)
        assert "broken.json" in exc.value.detail

    def test_write_then_read(self, tmp_path: Path, token_tree: dict):
        written = write_token_tree(token_tree, tmp_path / "out")
        assert len(written) == 3
        assert read_token_tree(tmp_path / "out") == token_tree

    def test_write_validates_before_writing(self, tmp_path: Path):
        tree = {"ok.json": {}, "../evil.json": {}}
        with pytest.raises(InvalidTokenPathError):
            write_token_tree(tree, tmp_path / "out")
        assert not (tmp_path / "out").exists()
        assert not (tmp_path / "evil.json").exists()


class TestFlatten:
    """Tests for flatten_tokens() and split_by_theme()."""

    def test_flatten_paths_and_types(self, token_tree: dict):
        tokens = flatten_tokens(token_tree)
        by_path = {t.dotted: t for t in tokens}
        assert by_path["colors.primary"].type == "color"
        assert by_path["space.md"].css_name == "--space-md"
        assert by_path["font.weight"].value == "bold"

    def test_dollar_keys_are_not_groups(self):
        tree = {"a.json": {"$description": "meta", "x": {"$type": "number", "$value": 1}}}
        tokens = flatten_tokens(tree)
        assert [t.dotted for t in tokens] == ["x"]

    def test_split_by_theme(self, token_tree: dict):
        base, dark = split_by_theme(flatten_tokens(token_tree))
        assert all(not t.file_path.endswith(".dark.json") for t in base)
        assert {t.dotted for t in dark} == {"colors.primary", "colors.surface", "colors.ink"}


class TestResolve:
    """Tests for reference resolution."""

    def test_reference_of(self):
        assert reference_of("{colors.primary}") == "colors.primary"
        assert reference_of("#fff") is None
        assert reference_of(12) is None

    def test_resolves_chain(self):
        tree = {
            "t.json": {
                "a": {"$type": "color", "$value": "{b}"},
                "b": {"$type": "color", "$value": "{c}"},
                "c": {"$type": "color", "$value": "#000"},
            }
        }
        resolved = {t.dotted: t.value for t in resolve_tokens(flatten_tokens(tree))}
        assert resolved == {"a": "#000", "b": "#000", "c": "#000"}

    def test_dark_resolves_against_base(self, token_tree: dict):
        base, dark = split_by_theme(flatten_tokens(token_tree))
        dark = resolve_tokens(dark, lookup=base + dark)
        values = {t.dotted: t.value for t in dark}
        assert values["colors.surface"] == "#0f172a"

    def test_cycle_raises(self):
        tree = {
            "t.json": {
                "a": {"$type": "color", "$value": "{b}"},
                "b": {"$type": "color", "$value": "{a}"},
            }
        }
        with pytest.raises(TokenReferenceError) as exc:
            resolve_tokens(flatten_tokens(tree))
        assert exc.value.chain == ["a", "b", "a"]

    def test_unknown_reference_left_as_is(self):
        tree = {"t.json": {"a": {"$type": "color", "$value": "{missing}"}}}
        (token,) = resolve_tokens(flatten_tokens(tree))
        assert token.value == "{missing}"

    def test_reference_of_requires_whole_value(self):
        assert reference_of("1px solid {colors.border}") is None

    def test_embedded_references_substituted(self):
        tree = {
            "t.json": {
                "colors": {"border": {"$type": "color", "$value": "{colors.ink}"}},
                "line": {"$type": "border", "$value": "1px solid {colors.border}"},
                "gap": {"$type": "dimension", "$value": 8},
                "pad": {"$type": "string", "$value": "{gap}px {gap}px {nope}"},
            },
            "ink.json": {"colors": {"ink": {"$type": "color", "$value": "#0f172a"}}},
        }
        resolved = {t.dotted: t.value for t in resolve_tokens(flatten_tokens(tree))}
        assert resolved["line"] == "1px solid #0f172a"
        assert resolved["pad"] == "8px 8px {nope}"
        assert resolved["gap"] == 8

    def test_embedded_cycle_raises(self):
        tree = {
            "t.json": {
                "a": {"$type": "border", "$value": "1px solid {b}"},
                "b": {"$type": "border", "$value": "{a}"},
            }
        }
        with pytest.raises(TokenReferenceError) as exc:
            resolve_tokens(flatten_tokens(tree))
        assert exc.value.chain == ["a", "b", "a"]


class TestColors:
    """Tests for colour parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("#3b82f6", RGBA(59, 130, 246, 1.0)),
            ("#fff", RGBA(255, 255, 255, 1.0)),
            ("#00000080", RGBA(0, 0, 0, 0.5)),
            ("rgb(1, 2, 3)", RGBA(1, 2, 3, 1.0)),
            ("rgba(0, 0, 0, 0.25)", RGBA(0, 0, 0, 0.25)),
            ("rgb(10 20 30 / 50%)", RGBA(10, 20, 30, 0.5)),
            ("transparent", RGBA(0, 0, 0, 0.0)),
            ("White", RGBA(255, 255, 255, 1.0)),
            ("orange", RGBA(255, 165, 0, 1.0)),
            ("RebeccaPurple", RGBA(102, 51, 153, 1.0)),
            ("hsl(0, 100%, 50%)", RGBA(255, 0, 0, 1.0)),
            ("hsl(210, 40%, 98%)", RGBA(248, 250, 252, 1.0)),
            ("hsla(120, 100%, 25%, 0.5)", RGBA(0, 128, 0, 0.5)),
            ("hsl(120deg 100% 25% / 50%)", RGBA(0, 128, 0, 0.5)),
        ],
    )
    def test_parse(self, value: str, expected: RGBA):
        assert parse_color(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["not-a-colour", "#12", "rgb(1, 2)", "hsl(0, 50, 50)", "cmyk(0, 0, 0, 0)", 12],
    )
    def test_parse_rejects(self, value: object):
        with pytest.raises(ValueError):
            parse_color(value)  # type: ignore[arg-type]

    def test_space_rgb(self):
        assert to_space_rgb("#3b82f6") == "59 130 246"
        assert to_space_rgb("rgba(0, 0, 0, 0.5)") == "0 0 0 / 0.5"

    def test_unit_rgba(self):
        rgba = to_unit_rgba("#ff0000")
        assert rgba == {"r": 1.0, "g": 0.0, "b": 0.0, "a": 1.0}

