"""
Spending insights routes.

Endpoints
---------
POST /splitly/v1/insights:expenses
    Totals, category breakdown and time series for personal trip expenses.
POST /splitly/v1/insights:funds
    Remaining budget / miscellaneous / safety funds of one trip.
POST /splitly/v1/insights:trips
    Trip counts, most frequent destination, average length and total funds.
"""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, Response, current_app, jsonify, request

from splitly.routes.payloads import parse_rates, parse_record, parse_today, parse_trip
from splitly.services.fund_service import fund_status
from splitly.services.insights_service import expense_summary
from splitly.services.trip_service import trip_summary
from splitly.utils.money import to_decimal

insights_bp = Blueprint("insights", __name__)

BASE = "/splitly/v1"


@insights_bp.route(f"{BASE}/insights:expenses", methods=["POST"])
def insights_expenses() -> tuple[Response, int]:
    body: Dict[str, Any] | None = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    records_raw = body.get("records")
    if not isinstance(records_raw, list):
        return jsonify({"error": "'records' must be a list."}), 422

    config = current_app.config
    try:
        records = [parse_record(r, i) for i, r in enumerate(records_raw)]
        rates = parse_rates(body, config["REFERENCE_CURRENCY"])
        today = parse_today(body)
    except (ValueError, TypeError, KeyError) as exc:
        return jsonify({"error": str(exc)}), 422

    summary = expense_summary(
        records,
        rates,
        display_currency=body.get("displayCurrency") or config["DEFAULT_CURRENCY"],
        default_currency=body.get("defaultCurrency") or config["DEFAULT_CURRENCY"],
        today=today,
        window_days=config["DAILY_WINDOW_DAYS"],
    )
    return jsonify(summary.to_dict()), 200


@insights_bp.route(f"{BASE}/insights:funds", methods=["POST"])
def insights_funds() -> tuple[Response, int]:
    body: Dict[str, Any] | None = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    try:
        budget = to_decimal(body.get("budget", 0))
        misc = to_decimal(body.get("miscellaneousFunds", 0))
        safety = to_decimal(body.get("safetyFunds", 0))
        expenses = [parse_record(r, i) for i, r in enumerate(body.get("expenses") or [])]
    except (ValueError, TypeError, KeyError) as exc:
        return jsonify({"error": str(exc)}), 422

    status = fund_status(budget, misc, safety, expenses)
    return jsonify(status.to_dict()), 200


@insights_bp.route(f"{BASE}/insights:trips", methods=["POST"])
def insights_trips() -> tuple[Response, int]:
    body: Dict[str, Any] | None = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    trips_raw = body.get("trips")
    if not isinstance(trips_raw, list):
        return jsonify({"error": "'trips' must be a list."}), 422

    config = current_app.config
    try:
        trips = [parse_trip(t, i) for i, t in enumerate(trips_raw)]
        rates = parse_rates(body, config["REFERENCE_CURRENCY"])
        today = parse_today(body)
    except (ValueError, TypeError, KeyError) as exc:
        return jsonify({"error": str(exc)}), 422

    summary = trip_summary(
        trips,
        rates,
        display_currency=body.get("displayCurrency") or config["DEFAULT_CURRENCY"],
        today=today,
    )
    return jsonify(summary.to_dict()), 200
