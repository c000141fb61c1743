"""
Tests for the token formatter — canonical JSON, check and dry-run modes.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tokenforge.core.errors import TokensDirNotFoundError, TokenValueError
from tokenforge.core.services.formatter import format_tokens
from tokenforge.core.services.tokens import serialize_token_file

CANONICAL = {"colors": {"primary": {"$type": "color", "$value": "#3b82f6"}}}


@pytest.fixture
def messy_dir(tmp_path: Path) -> Path:
    """One canonical file and one compact file."""
    root = tmp_path / "tokens"
    (root / "colors").mkdir(parents=True)
    (root / "colors" / "base.json").write_text(serialize_token_file(CANONICAL))
    (root / "spacing.json").write_text('{"space":{"md":{"$type":"dimension","$value":"16px"}}}')
    return root


class TestSerializeTokenFile:
    """Tests for the canonical on-disk form."""

    def test_two_space_indent_and_newline(self):
        text = serialize_token_file({"a": {"b": 1}})
        assert text == '{\n  "a": {\n    "b": 1\n  }\n}\n'

    def test_keeps_key_order_and_unicode(self):
        text = serialize_token_file({"z": "é", "a": 1})
        assert text.index('"z"') < text.index('"a"')
        assert "é" in text


class TestFormatTokens:
    """Tests for format_tokens()."""

    def test_rewrites_unformatted(self, messy_dir: Path):
        report = format_tokens(messy_dir)
        assert report.mode == "write"
        assert report.total == 2
        assert report.changed == ["spacing.json"]
        text = (messy_dir / "spacing.json").read_text()
        assert text == serialize_token_file(json.loads(text))

    def test_second_run_is_clean(self, messy_dir: Path):
        format_tokens(messy_dir)
        assert format_tokens(messy_dir).clean

    def test_check_writes_nothing(self, messy_dir: Path):
        before = (messy_dir / "spacing.json").read_text()
        report = format_tokens(messy_dir, check=True)
        assert report.mode == "check"
        assert report.changed == ["spacing.json"]
        assert (messy_dir / "spacing.json").read_text() == before

    def test_dry_run_writes_nothing(self, messy_dir: Path):
        before = (messy_dir / "spacing.json").read_text()
        report = format_tokens(messy_dir, dry_run=True)
        assert report.mode == "dry_run"
        assert report.changed == ["spacing.json"]
        assert (messy_dir / "spacing.json").read_text() == before

    def test_missing_trailing_newline_is_unformatted(self, tmp_path: Path):
        root = tmp_path / "tokens"
        root.mkdir()
        (root / "a.json").write_text(serialize_token_file(CANONICAL).rstrip("\n"))
        assert format_tokens(root, check=True).changed == ["a.json"]

    def test_empty_dir(self, tmp_path: Path):
        root = tmp_path / "tokens"
        root.mkdir()
        report = format_tokens(root)
        assert report.total == 0
        assert report.clean

    def test_missing_dir(self, tmp_path: Path):
        with pytest.raises(TokensDirNotFoundError):
            format_tokens(tmp_path / "nope")

    def test_invalid_json_writes_nothing(self, messy_dir: Path):
        (messy_dir / "broken.json").write_text("{not json")
        before = (messy_dir / "spacing.json").read_text()
        with pytest.raises(TokenValueError):
            format_tokens(messy_dir)
        assert (messy_dir / "spacing.json").read_text() == before

    def test_to_dict(self, messy_dir: Path):
        data = format_tokens(messy_dir, check=True).to_dict()
        assert data == {
            "tokens_dir": str(messy_dir),
            "mode": "check",
            "total": 2,
            "changed": ["spacing.json"],
            "clean": False,
        }
