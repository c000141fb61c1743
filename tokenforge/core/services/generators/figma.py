"""
Figma generator — variables.json for the Figma variables importer.

Two collections, ``Light`` (base files) and ``Dark`` (``*.dark.json``),
each with a single ``Default`` mode.  Figma wants concrete values, so
references are fully resolved and colours become 0–1 RGBA objects.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from tokenforge.core.errors import TokenValueError
from tokenforge.core.models.generation import GeneratorContext
from tokenforge.core.services.colors import to_unit_rgba
from tokenforge.core.services.tokens import (
    FlatToken,
    flatten_tokens,
    resolve_tokens,
    split_by_theme,
)

logger = logging.getLogger(__name__)

FONT_WEIGHTS = {"normal": 400, "medium": 500, "semibold": 600, "bold": 700}

_FLOAT_TYPES = {"dimension", "fontWeight", "fontSize", "lineHeight", "letterSpacing"}
_LEADING_NUMBER_RE = re.compile(r"^-?\d*\.?\d+")


def variable_type(token_type: str) -> str:
    if token_type == "color":
        return "COLOR"
    if token_type in _FLOAT_TYPES:
        return "FLOAT"
    return "STRING"


def parse_dimension(value: Any) -> float:
    """Leading number of a dimension: ``16px`` → 16.0, ``1.5rem`` → 1.5."""
    m = _LEADING_NUMBER_RE.match(str(value).replace("px", "").strip())
    if m is None:
        raise ValueError(f"no leading number in {value!r}")
    return float(m.group(0))


def variable_value(token: FlatToken) -> Any:
    value = token.value
    try:
        if token.type == "color":
            return to_unit_rgba(value)
        if token.type == "dimension":
            return parse_dimension(value)
        if token.type == "fontWeight":
            return FONT_WEIGHTS.get(str(value)) or int(value)
    except (TypeError, ValueError):
        raise TokenValueError(token.dotted, value, f"a {token.type} value") from None
    return value


def collection(name: str, tokens: list[FlatToken]) -> dict[str, Any]:
    variables = [
        {
            "name": "/".join(token.path),
            "type": variable_type(token.type),
            "value": variable_value(token),
        }
        for token in tokens
    ]
    return {"name": name, "modes": [{"name": "Default", "variables": variables}]}


def generate(context: GeneratorContext) -> None:
    """Write variables.json."""
    base, dark = split_by_theme(flatten_tokens(context.token_tree))
    base = resolve_tokens(base)
    dark = resolve_tokens(dark, lookup=base + dark)

    collections = [collection("Light", base), collection("Dark", dark)]

    out = context.output_dir
    out.mkdir(parents=True, exist_ok=True)
    (out / "variables.json").write_text(
        json.dumps(collections, indent=2) + "\n", encoding="utf-8"
    )
    logger.info("figma: %d light, %d dark variables", len(base), len(dark))
