"""
Performance metrics route.

Endpoint
--------
GET /splitly/v1/performance

Returns the duration of the most recently completed request, the process
RSS memory, the active thread count, the number of completed requests and
the service uptime.
"""

from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify

from splitly.utils.performance import collect_performance_snapshot

performance_bp = Blueprint("performance", __name__)

BASE = "/splitly/v1"


@performance_bp.route(f"{BASE}/performance", methods=["GET"])
def get_performance() -> tuple[Response, int]:
    snapshot = collect_performance_snapshot(current_app.extensions["request_timer"])
    return jsonify(snapshot), 200
