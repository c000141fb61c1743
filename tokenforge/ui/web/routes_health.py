"""
Health route — liveness probe.

GET /health → {"status": "ok", "timestamp": ..., "environment": ...}
"""

from __future__ import annotations

from datetime import UTC, datetime

from flask import Blueprint, current_app, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/health")
def api_health():  # type: ignore[no-untyped-def]
    settings = current_app.config["SETTINGS"]
    return jsonify({
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": settings.environment,
    })
