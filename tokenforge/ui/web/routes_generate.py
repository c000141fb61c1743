"""
Generate route — on-demand CSS for the token editor.

POST /generate   body: {"<token file path>": <token JSON>, ...}

    200 {"success": true,  "baseCSS": "...", "darkCSS": "..."}
    200 {"success": false, "error": {"message": "..."}, "baseCSS"?, "darkCSS"?}
    400 {"success": false, "error": {"message": "..."}}   (body not an object)

On failure the CSS fields, when present, are the last successful
output, so the editor can keep showing the previous preview.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from tokenforge.core.models.generation import GenerationResult
from tokenforge.core.services.on_demand import OnDemandGenerationService

logger = logging.getLogger(__name__)

generate_bp = Blueprint("generate", __name__)


def _service() -> OnDemandGenerationService:
    from tokenforge.ui.web.server import SERVICE_KEY

    return current_app.extensions[SERVICE_KEY]


def to_response(result: GenerationResult) -> dict:
    """Shape a result the way the editor expects it."""
    if result.success:
        return {
            "success": True,
            "baseCSS": result.base_css or "",
            "darkCSS": result.dark_css or "",
        }

    body: dict = {"success": False, "error": {"message": result.error or "Generation failed"}}
    if result.base_css is not None:
        body["baseCSS"] = result.base_css
    if result.dark_css is not None:
        body["darkCSS"] = result.dark_css
    return body


@generate_bp.route("/generate", methods=["POST"])
def api_generate():  # type: ignore[no-untyped-def]
    """Generate preview CSS from an in-memory token tree."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({
            "success": False,
            "error": {"message": "Request body must be a JSON object of token files"},
        }), 400

    result = _service().submit(data)
    if not result.success:
        logger.info("Generation failed, serving last good output: %s", result.error)
    return jsonify(to_response(result))
