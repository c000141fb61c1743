"""
Tailwind generator — CSS custom properties plus a theme fragment.

Outputs (under ``<output>/tailwind/``):
    base.css            ``:root`` variables from the base token files
    dark.css            ``.dark`` overrides from ``*.dark.json`` files
    tailwind.config.js  ``theme.extend`` entries pointing at the variables

Colours are written as space-separated channels (``59 130 246``) so
Tailwind's ``<alpha-value>`` placeholder keeps working.  This is also
the profile the on-demand preview service runs.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from tokenforge.core.errors import TokenValueError
from tokenforge.core.models.generation import GeneratorContext
from tokenforge.core.services.colors import to_space_rgb
from tokenforge.core.services.tokens import (
    FlatToken,
    flatten_tokens,
    resolve_tokens,
    split_by_theme,
)

logger = logging.getLogger(__name__)

_HEADER = "/* Generated by tokenforge. Do not edit. */\n"

# Token $type → tailwind theme key
_THEME_KEYS = {
    "color": "colors",
    "dimension": "spacing",
    "fontFamily": "fontFamily",
    "fontSize": "fontSize",
    "fontWeight": "fontWeight",
    "lineHeight": "lineHeight",
    "letterSpacing": "letterSpacing",
    "borderRadius": "borderRadius",
    "shadow": "boxShadow",
}


def css_value(token: FlatToken) -> str | None:
    """Render a resolved token value for CSS; None for composites."""
    value = token.value
    if token.type == "color":
        try:
            return to_space_rgb(value)
        except ValueError:
            raise TokenValueError(token.dotted, value, "a CSS colour") from None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return f"{value:g}"
    if isinstance(value, list) and token.type == "fontFamily":
        return ", ".join(str(v) for v in value)
    if isinstance(value, str):
        return value
    return None


def render_block(selector: str, tokens: list[FlatToken]) -> str:
    lines = [f"{selector} {{"]
    for token in tokens:
        rendered = css_value(token)
        if rendered is None:
            logger.debug("Skipping composite token %s", token.dotted)
            continue
        lines.append(f"  {token.css_name}: {rendered};")
    lines.append("}")
    return _HEADER + "\n".join(lines) + "\n"


def theme_extension(tokens: list[FlatToken]) -> dict[str, dict[str, str]]:
    extend: dict[str, dict[str, str]] = {}
    for token in tokens:
        key = _THEME_KEYS.get(token.type)
        if key is None:
            continue
        name = "-".join(token.path)
        if token.type == "color":
            ref = f"rgb(var({token.css_name}) / <alpha-value>)"
        else:
            ref = f"var({token.css_name})"
        extend.setdefault(key, {})[name] = ref
    return extend


def generate(context: GeneratorContext) -> None:
    """Write base.css, dark.css and tailwind.config.js."""
    base, dark = split_by_theme(flatten_tokens(context.token_tree))
    base = resolve_tokens(base)
    dark = resolve_tokens(dark, lookup=base + dark)

    out = context.output_dir
    out.mkdir(parents=True, exist_ok=True)

    (out / "base.css").write_text(render_block(":root", base), encoding="utf-8")
    (out / "dark.css").write_text(render_block(".dark", dark), encoding="utf-8")

    config: dict[str, Any] = {"theme": {"extend": theme_extension(base)}}
    (out / "tailwind.config.js").write_text(
        "/** Generated by tokenforge. Do not edit. */\n"
        f"module.exports = {json.dumps(config, indent=2)};\n",
        encoding="utf-8",
    )

    logger.info("tailwind: %d base tokens, %d dark overrides", len(base), len(dark))
