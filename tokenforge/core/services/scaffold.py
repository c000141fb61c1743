"""
Project scaffolding — ``tokenforge init --producer | --consumer``.

Producer: config, example tokens and a release workflow.
Consumer: config pointing at a placeholder release.
Existing configs are never overwritten.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from tokenforge.core.config.loader import CONSUMER_CONFIG_FILE, PRODUCER_CONFIG_FILE
from tokenforge.core.errors import ConfigExistsError

logger = logging.getLogger(__name__)

WORKFLOW_FILE = ".github/workflows/tokenforge-release.yml"

_EXAMPLE_TOKENS = {
    "color": {
        "primary": {"$type": "color", "$value": "#3b82f6"},
        "secondary": {"$type": "color", "$value": "#64748b"},
    }
}

_RELEASE_WORKFLOW = """\
name: Generate and Release

on:
  push:
    branches: [main]

jobs:
  release:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4

      - uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - run: pip install tokenforge

      - run: tokenforge generate

      - name: Get version
        id: version
        run: echo "version=$(date +%Y%m%d.%H%M%S)" >> $GITHUB_OUTPUT

      - name: Create Release
        uses: softprops/action-gh-release@v2
        with:
          tag_name: v${{ steps.version.outputs.version }}
          name: Design Tokens v${{ steps.version.outputs.version }}
          generate_release_notes: true
          files: |
            build/**/*
        env:
          GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }}
"""


def _write_json(path: Path, data: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def init_producer(root: Path) -> list[str]:
    """Create producer config, example tokens and the release workflow.

    Returns:
        Relative paths of the files created.

    Raises:
        ConfigExistsError: A producer config is already present.
    """
    config_path = root / PRODUCER_CONFIG_FILE
    if config_path.exists():
        raise ConfigExistsError(PRODUCER_CONFIG_FILE)

    created = []

    _write_json(
        config_path,
        {
            "tokens": "./tokens",
            "output": "./build",
            "generators": {"tailwind": True, "figma": True},
        },
    )
    created.append(PRODUCER_CONFIG_FILE)

    example = root / "tokens" / "colors" / "primitives.json"
    if not example.exists():
        _write_json(example, _EXAMPLE_TOKENS)
        created.append("tokens/colors/primitives.json")

    workflow = root / WORKFLOW_FILE
    if not workflow.exists():
        workflow.parent.mkdir(parents=True, exist_ok=True)
        workflow.write_text(_RELEASE_WORKFLOW, encoding="utf-8")
        created.append(WORKFLOW_FILE)

    for rel in created:
        logger.info("Created %s", rel)
    return created


def init_consumer(root: Path, repo: str | None = None) -> list[str]:
    """Create a consumer config.

    Raises:
        ConfigExistsError: A consumer config is already present.
    """
    config_path = root / CONSUMER_CONFIG_FILE
    if config_path.exists():
        raise ConfigExistsError(CONSUMER_CONFIG_FILE)

    _write_json(
        config_path,
        {
            "repo": repo or "YourOrg/design-system",
            "version": "v1.0.0",
            "files": {
                "base.css": "src/styles/tokens.css",
                "dark.css": "src/styles/tokens.dark.css",
                "tailwind.config.js": "./tailwind.tokens.js",
            },
        },
    )
    logger.info("Created %s", CONSUMER_CONFIG_FILE)
    return [CONSUMER_CONFIG_FILE]
