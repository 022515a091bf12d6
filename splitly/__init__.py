"""
Application factory with request timing middleware and domain error mapping.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

from flask import Flask, Response, current_app, g, jsonify

from splitly.errors import ConversionError, SplitlyError
from splitly.utils.performance import RequestTimer

DEFAULT_CONFIG = {
    "DEFAULT_CURRENCY": "USD",
    "REFERENCE_CURRENCY": "USD",
    "DAILY_WINDOW_DAYS": 30,
    "SUMMARY_ALL_COUNTERPARTIES": False,
    "LOG_LEVEL": "INFO",
}


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Create and configure the Flask application.

    Configuration is layered: :data:`DEFAULT_CONFIG`, then ``SPLITLY_*``
    environment variables, then *config*.
    """
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env("SPLITLY")
    if config:
        app.config.from_mapping(config)
    app.json.sort_keys = False

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    level = str(app.config["LOG_LEVEL"]).upper()
    app.logger.setLevel(level)
    logging.getLogger("splitly").setLevel(level)

    timer = RequestTimer()
    app.extensions["request_timer"] = timer

    # ── Timing middleware ───────────────────────────────────────────────────

    @app.before_request
    def _start_timer() -> None:
        g.start_time = time.perf_counter()

    @app.after_request
    def _stop_timer(response: Response) -> Response:
        elapsed = (time.perf_counter() - g.start_time) * 1_000
        timer.record(elapsed)
        response.headers["X-Response-Time-Ms"] = f"{elapsed:.4f}"
        return response

    # ── Error handlers ──────────────────────────────────────────────────────

    @app.errorhandler(ConversionError)
    def conversion_failed(exc: ConversionError) -> tuple[Response, int]:
        current_app.logger.warning("Conversion failed: %s", exc)
        return jsonify({"error": str(exc), "kind": exc.kind}), 422

    @app.errorhandler(SplitlyError)
    def rejected(exc: SplitlyError) -> tuple[Response, int]:
        current_app.logger.warning("Rejected request (%s): %s", exc.kind, exc)
        return jsonify({"error": str(exc), "kind": exc.kind}), 422

    @app.errorhandler(400)
    def bad_request(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Bad Request", "message": str(exc)}), 400

    @app.errorhandler(404)
    def not_found(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Not Found", "message": str(exc)}), 404

    @app.errorhandler(405)
    def method_not_allowed(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Method Not Allowed", "message": str(exc)}), 405

    @app.errorhandler(422)
    def unprocessable(exc: Any) -> tuple[Response, int]:
        return jsonify({"error": "Unprocessable Entity", "message": str(exc)}), 422

    @app.errorhandler(500)
    def internal_error(exc: Any) -> tuple[Response, int]:
        current_app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal Server Error", "message": str(exc)}), 500

    # ── Register blueprints ─────────────────────────────────────────────────

    from splitly.routes.groups import groups_bp
    from splitly.routes.insights import insights_bp
    from splitly.routes.performance import performance_bp

    app.register_blueprint(groups_bp)
    app.register_blueprint(insights_bp)
    app.register_blueprint(performance_bp)

    return app
