"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import json
import textwrap
import urllib.error
from pathlib import Path

import pytest


SAMPLE_TOKENS = {
    "colors/base.json": {
        "colors": {
            "primary": {"$type": "color", "$value": "#3b82f6"},
            "surface": {"$type": "color", "$value": "#ffffff"},
            "overlay": {"$type": "color", "$value": "rgba(0, 0, 0, 0.5)"},
            "accent": {"$type": "color", "$value": "{colors.primary}"},
        }
    },
    "colors/base.dark.json": {
        "colors": {
            "primary": {"$type": "color", "$value": "#60a5fa"},
            "surface": {"$type": "color", "$value": "{colors.ink}"},
            "ink": {"$type": "color", "$value": "#0f172a"},
        }
    },
    "spacing.json": {
        "space": {
            "md": {"$type": "dimension", "$value": "16px"},
        },
        "font": {
            "weight": {"$type": "fontWeight", "$value": "bold"},
        },
    },
}


@pytest.fixture
def token_tree() -> dict:
    """A small token tree with base, dark and reference tokens."""
    return json.loads(json.dumps(SAMPLE_TOKENS))


@pytest.fixture
def tokens_dir(tmp_path: Path, token_tree: dict) -> Path:
    """The sample token tree written to ``tmp_path/tokens``."""
    root = tmp_path / "tokens"
    for rel, content in token_tree.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(content, indent=2))
    return root


@pytest.fixture
def write_plugin(tmp_path: Path):
    """Write a plugin module under ``tmp_path/plugins`` and return its path."""

    def _write(name: str, body: str) -> Path:
        plugins = tmp_path / "plugins"
        plugins.mkdir(exist_ok=True)
        path = plugins / f"{name}.py"
        path.write_text(textwrap.dedent(body))
        return path

    return _write


class FakeResponse:
    """Minimal stand-in for the object ``urlopen`` returns."""

    def __init__(self, body: bytes):
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


class FakeGitHub:
    """Routes ``urlopen`` calls to canned (status, body) pairs by URL."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, bytes]] = {}
        self.requests: list = []

    def add(self, url: str, body: bytes | str | dict | list, status: int = 200) -> None:
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[url] = (status, body)

    def add_release(self, repo: str, tag: str, assets: dict[str, str | bytes]) -> None:
        """Register a release and one download route per asset."""
        entries = []
        for name, content in assets.items():
            url = f"https://github.com/{repo}/releases/download/{tag}/{name}"
            entries.append({"name": name, "browser_download_url": url, "size": len(content)})
            self.add(url, content)
        self.add(
            f"https://api.github.com/repos/{repo}/releases/tags/{tag}",
            {"tag_name": tag, "assets": entries},
        )

    def __call__(self, req, timeout=None):  # type: ignore[no-untyped-def]
        self.requests.append(req)
        url = req.full_url
        if url not in self.routes:
            raise urllib.error.HTTPError(url, 404, "Not Found", {}, None)
        status, body = self.routes[url]
        if status >= 400:
            raise urllib.error.HTTPError(url, status, "error", {}, None)
        return FakeResponse(body)

    @property
    def urls(self) -> list[str]:
        return [r.full_url for r in self.requests]


@pytest.fixture
def fake_github(monkeypatch: pytest.MonkeyPatch) -> FakeGitHub:
    """Patch the release client's ``urlopen`` with a FakeGitHub."""
    fake = FakeGitHub()
    monkeypatch.setattr(
        "tokenforge.core.services.release_client.urllib.request.urlopen", fake
    )
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    return fake
