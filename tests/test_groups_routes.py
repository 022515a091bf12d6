from flask.testing import FlaskClient

BASE = "/splitly/v1"


def group_payload():
    return {
        "id": "g1",
        "name": "Dinner club",
        "baseCurrency": "USD",
        "members": [
            {"id": "a", "name": "Ana"},
            {"id": "b", "name": "Ben"},
            {"id": "c", "name": "Cleo"},
        ],
        "expenses": [
            {
                "id": "e1",
                "title": "Dinner",
                "amount": 90,
                "currency": "USD",
                "paidBy": "a",
                "date": "2024-03-15",
                "participants": [
                    {"memberId": "a", "amount": 30},
                    {"memberId": "b", "amount": 30},
                    {"memberId": "c", "amount": 30},
                ],
                "splitType": "equal",
            }
        ],
        "settlements": [],
    }


def test_balances(client: FlaskClient):
    response = client.post(f"{BASE}/groups:balances", json=group_payload())

    assert response.status_code == 200
    assert "X-Response-Time-Ms" in response.headers
    assert response.get_json() == {
        "balances": [
            {"from": "b", "to": "a", "amount": 30.0},
            {"from": "c", "to": "a", "amount": 30.0},
        ]
    }


def test_balances_unknown_member_is_422(client: FlaskClient):
    payload = group_payload()
    payload["expenses"][0]["participants"].append({"memberId": "ghost", "amount": 1})

    response = client.post(f"{BASE}/groups:balances", json=payload)

    assert response.status_code == 422
    assert response.get_json()["kind"] == "unknown_member"


def test_balances_missing_body_is_400(client: FlaskClient):
    response = client.post(f"{BASE}/groups:balances", data="not json")

    assert response.status_code == 400


def test_balances_malformed_group_is_422(client: FlaskClient):
    payload = group_payload()
    del payload["baseCurrency"]

    response = client.post(f"{BASE}/groups:balances", json=payload)

    assert response.status_code == 422
    assert "baseCurrency" in response.get_json()["error"]


def test_summary_in_display_currency(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summary",
        json={
            "group": group_payload(),
            "displayCurrency": "EUR",
            "rates": {"EUR": 0.5},
        },
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["viewerMemberId"] == "a"
    assert data["totalGroupExpense"] == 45.0
    assert data["userPaid"] == 45.0
    assert data["userIsOwed"] == 15.0
    assert data["netBalance"] == 15.0


def test_summary_all_counterparties(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summary",
        json={"group": group_payload(), "allCounterparties": True},
    )

    assert response.get_json()["userIsOwed"] == 60.0


def test_summary_unknown_currency_is_422(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summary",
        json={"group": group_payload(), "displayCurrency": "GBP", "rates": {}},
    )

    assert response.status_code == 422
    assert response.get_json()["kind"] == "unknown_currency"


def test_summaries_overall_net(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summaries",
        json={"groups": [group_payload()], "displayCurrency": "USD"},
    )

    data = response.get_json()
    assert response.status_code == 200
    assert len(data["summaries"]) == 1
    assert data["overallNet"] == 30.0


def test_remove_member_in_use_is_rejected(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups/members:remove",
        json={"group": group_payload(), "memberId": "a"},
    )

    assert response.status_code == 422
    assert response.get_json()["kind"] == "member_in_use"


def test_remove_free_member(client: FlaskClient):
    payload = group_payload()
    payload["members"].append({"id": "d", "name": "Dev"})

    response = client.post(
        f"{BASE}/groups/members:remove",
        json={"group": payload, "memberId": "d"},
    )

    assert response.status_code == 200
    assert [m["id"] for m in response.get_json()["members"]] == ["a", "b", "c"]


def test_add_foreign_currency_expense_is_normalised(client: FlaskClient):
    expense = {
        "id": "e2",
        "title": "Taxi",
        "amount": 20,
        "currency": "EUR",
        "paidBy": "b",
        "participants": [{"memberId": "a", "amount": 10}, {"memberId": "b", "amount": 10}],
        "splitType": "custom",
    }

    response = client.post(
        f"{BASE}/groups/expenses:add",
        json={"group": group_payload(), "expense": expense, "rates": {"EUR": 0.5}},
    )

    assert response.status_code == 200
    added = response.get_json()["expenses"][-1]
    assert added["amount"] == 40.0
    assert added["originalAmount"] == 20.0
    assert [p["amount"] for p in added["participants"]] == [20.0, 20.0]


def test_add_expense_with_bad_split_is_422(client: FlaskClient):
    expense = {
        "id": "e2",
        "amount": 20,
        "paidBy": "b",
        "participants": [{"memberId": "a", "amount": 5}],
        "splitType": "custom",
    }

    response = client.post(
        f"{BASE}/groups/expenses:add",
        json={"group": group_payload(), "expense": expense},
    )

    assert response.status_code == 422
    assert response.get_json()["kind"] == "invalid_split"


def test_add_settlement_then_balances(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups/settlements:add",
        json={
            "group": group_payload(),
            "settlement": {"id": "s1", "paidBy": "b", "paidTo": "a", "amount": 30},
        },
    )
    assert response.status_code == 200

    balances = client.post(f"{BASE}/groups:balances", json=response.get_json()).get_json()

    assert balances["balances"] == [{"from": "c", "to": "a", "amount": 30.0}]


def test_balances_nan_share_is_422(client: FlaskClient):
    payload = group_payload()
    payload["expenses"][0]["participants"][1]["amount"] = "NaN"

    response = client.post(f"{BASE}/groups:balances", json=payload)

    assert response.status_code == 422
    assert "finite" in response.get_json()["error"]


def test_balances_infinite_amount_is_422(client: FlaskClient):
    payload = group_payload()
    payload["expenses"][0]["amount"] = "Infinity"

    response = client.post(f"{BASE}/groups:balances", json=payload)

    assert response.status_code == 422


def test_settlement_with_infinite_amount_is_422(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups/settlements:add",
        json={
            "group": group_payload(),
            "settlement": {"id": "s1", "paidBy": "b", "paidTo": "a", "amount": float("inf")},
        },
    )

    assert response.status_code == 422


def test_summary_flag_must_be_boolean(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summary",
        json={"group": group_payload(), "allCounterparties": "false"},
    )

    assert response.status_code == 422
    assert "allCounterparties" in response.get_json()["error"]


def test_summary_flag_false_keeps_first_counterparty(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summary",
        json={"group": group_payload(), "allCounterparties": False},
    )

    assert response.get_json()["userIsOwed"] == 30.0


def test_summaries_honour_all_counterparties(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summaries",
        json={"groups": [group_payload()], "allCounterparties": True},
    )

    data = response.get_json()
    assert response.status_code == 200
    assert data["summaries"][0]["userIsOwed"] == 60.0
    assert data["overallNet"] == 60.0


def test_summaries_flag_must_be_boolean(client: FlaskClient):
    response = client.post(
        f"{BASE}/groups:summaries",
        json={"groups": [group_payload()], "allCounterparties": 1},
    )

    assert response.status_code == 422
