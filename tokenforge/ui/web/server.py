"""
Generation server — Flask app factory.

Serves the editor's on-demand preview endpoint and a health check.
One ``OnDemandGenerationService`` is created per app and shared by
every request thread; it serialises the actual generation work.
"""

from __future__ import annotations

import logging

from flask import Flask, request

from tokenforge.core.config.settings import ServerSettings, load_settings
from tokenforge.core.services.on_demand import OnDemandGenerationService

logger = logging.getLogger(__name__)

SERVICE_KEY = "tokenforge.generation"

_ALLOWED_METHODS = "GET, POST, OPTIONS"
_ALLOWED_HEADERS = "Content-Type, Accept"


def create_app(
    settings: ServerSettings | None = None,
    service: OnDemandGenerationService | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Server settings (default: read from the environment).
        service: Generation service (default: one running the configured
            preview generator).

    Returns:
        Configured Flask application.
    """
    settings = settings or load_settings()

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024  # token payloads only
    app.extensions[SERVICE_KEY] = service or OnDemandGenerationService(
        profile=(settings.preview_generator,)
    )

    from tokenforge.ui.web.routes_generate import generate_bp
    from tokenforge.ui.web.routes_health import health_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(generate_bp)

    @app.before_request
    def _preflight():  # type: ignore[no-untyped-def]
        if request.method == "OPTIONS":
            return app.response_class(status=204)
        return None

    @app.after_request
    def _cors(response):  # type: ignore[no-untyped-def]
        origin = request.headers.get("Origin")
        if settings.is_origin_allowed(origin):
            if origin:
                response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Methods"] = _ALLOWED_METHODS
            response.headers["Access-Control-Allow-Headers"] = _ALLOWED_HEADERS
        return response

    logger.info("Generation server app created (env=%s)", settings.environment)
    return app


def run_server(app: Flask, host: str = "127.0.0.1", port: int = 3001) -> None:
    """Run the Flask development server (threaded)."""
    logger.info("Starting generation server on %s:%d", host, port)
    try:
        app.run(host=host, port=port, threaded=True, use_reloader=False)
    finally:
        app.extensions[SERVICE_KEY].close(timeout=5)
