from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, Response, current_app, jsonify, request

from splitly.routes.payloads import (
    parse_expense,
    parse_group,
    parse_rates,
    parse_settlement,
    require_field,
    require_str,
)
from splitly.services.balance_service import compute_balances
from splitly.services.group_service import (
    add_expense,
    add_settlement,
    normalize_expense,
    remove_member,
)
from splitly.services.summary_service import overall_net, summarize, summarize_groups
from splitly.utils.money import decimal_to_float

groups_bp = Blueprint("groups", __name__)

BASE = "/splitly/v1"

PAYLOAD_ERRORS = (ValueError, TypeError, KeyError)


def _json_body() -> Dict[str, Any] | None:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


def _display_currency(body: Dict[str, Any]) -> str:
    return body.get("displayCurrency") or current_app.config["DEFAULT_CURRENCY"]


def _rates(body: Dict[str, Any]):
    return parse_rates(body, current_app.config["REFERENCE_CURRENCY"])


def _all_counterparties(body: Dict[str, Any]) -> bool:
    flag = body.get("allCounterparties", current_app.config["SUMMARY_ALL_COUNTERPARTIES"])
    if not isinstance(flag, bool):
        raise ValueError("'allCounterparties' must be true or false.")
    return flag


#Endpoint: balances
@groups_bp.route(f"{BASE}/groups:balances", methods=["POST"])
def group_balances() -> tuple[Response, int]:
    body = _json_body()
    if body is None:
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    try:
        group = parse_group(body)
    except PAYLOAD_ERRORS as exc:
        return jsonify({"error": str(exc)}), 422

    balances = compute_balances(group)
    return jsonify({"balances": [b.to_dict() for b in balances]}), 200


#Endpoint: summary for one group
@groups_bp.route(f"{BASE}/groups:summary", methods=["POST"])
def group_summary() -> tuple[Response, int]:
    body = _json_body()
    if body is None:
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    try:
        group = parse_group(require_field(body, "group"))
        rates = _rates(body)
        all_counterparties = _all_counterparties(body)
    except PAYLOAD_ERRORS as exc:
        return jsonify({"error": str(exc)}), 422

    viewer_id = body.get("viewerMemberId")
    if viewer_id is None:
        if not group.members:
            return jsonify({"error": "Group has no members to summarise for."}), 422
        viewer_id = group.members[0].id

    summary = summarize(
        group,
        viewer_id,
        rates,
        _display_currency(body),
        all_counterparties=all_counterparties,
    )
    return jsonify(summary.to_dict()), 200


#Endpoint: summaries across groups
@groups_bp.route(f"{BASE}/groups:summaries", methods=["POST"])
def group_summaries() -> tuple[Response, int]:
    body = _json_body()
    if body is None:
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    groups_raw = body.get("groups")
    if not isinstance(groups_raw, list):
        return jsonify({"error": "'groups' must be a list."}), 422

    try:
        groups = [parse_group(g) for g in groups_raw]
        rates = _rates(body)
        all_counterparties = _all_counterparties(body)
    except PAYLOAD_ERRORS as exc:
        return jsonify({"error": str(exc)}), 422

    summaries = summarize_groups(
        groups,
        rates,
        _display_currency(body),
        all_counterparties=all_counterparties,
    )
    return jsonify({
        "summaries": [s.to_dict() for s in summaries],
        "overallNet": decimal_to_float(overall_net(summaries)),
    }), 200


#Endpoint: remove member
@groups_bp.route(f"{BASE}/groups/members:remove", methods=["POST"])
def group_remove_member() -> tuple[Response, int]:
    body = _json_body()
    if body is None:
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    try:
        group = parse_group(require_field(body, "group"))
        member_id = require_str(body, "memberId")
    except PAYLOAD_ERRORS as exc:
        return jsonify({"error": str(exc)}), 422

    return jsonify(remove_member(group, member_id).to_dict()), 200


#Endpoint: add expense
@groups_bp.route(f"{BASE}/groups/expenses:add", methods=["POST"])
def group_add_expense() -> tuple[Response, int]:
    body = _json_body()
    if body is None:
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    try:
        group = parse_group(require_field(body, "group"))
        expense = parse_expense(require_field(body, "expense"), group.base_currency)
        rates = _rates(body)
    except PAYLOAD_ERRORS as exc:
        return jsonify({"error": str(exc)}), 422

    expense = normalize_expense(expense, group.base_currency, rates)
    return jsonify(add_expense(group, expense).to_dict()), 200


#Endpoint: add settlement
@groups_bp.route(f"{BASE}/groups/settlements:add", methods=["POST"])
def group_add_settlement() -> tuple[Response, int]:
    body = _json_body()
    if body is None:
        return jsonify({"error": "Invalid or missing JSON body."}), 400

    try:
        group = parse_group(require_field(body, "group"))
        settlement = parse_settlement(require_field(body, "settlement"))
    except PAYLOAD_ERRORS as exc:
        return jsonify({"error": str(exc)}), 422

    return jsonify(add_settlement(group, settlement).to_dict()), 200
