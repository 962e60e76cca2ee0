from datetime import date
from decimal import Decimal

from sqlalchemy import func, select

from salon_api.models.expense import FixedExpenseAmount
from salon_api.services import fixed_expense_service


def _create_salon(client, name: str = "Salon Bellecour") -> str:
    res = client.post("/api/salons", json={"name": name, "city": "Lyon"})
    assert res.status_code == 201, res.text
    return res.json()["id"]


def _create_fixed_expense(client, **overrides) -> dict:
    payload = {
        "name": "Loyer",
        "category": "rent",
        "amount": 1000,
        "effective_from": "2024-01-01",
    }
    payload.update(overrides)
    res = client.post("/api/fixed-expenses", json=payload)
    assert res.status_code == 201, res.text
    return res.json()


def _amount_rows(session_local, fixed_expense_id: str) -> int:
    db = session_local()
    try:
        return db.execute(
            select(func.count(FixedExpenseAmount.id)).where(
                FixedExpenseAmount.fixed_expense_id == fixed_expense_id
            )
        ).scalar_one()
    finally:
        db.close()


def test_amount_in_force_follows_effective_dates(test_context):
    client, session_local = test_context
    expense = _create_fixed_expense(client)
    assert expense["amount"] == 1000.0
    assert expense["amount_effective_from"] == "2024-01-01"

    raise_res = client.post(
        f"/api/fixed-expenses/{expense['id']}/amount",
        json={"amount": 1200, "effective_from": "2024-03-01"},
    )
    assert raise_res.status_code == 200, raise_res.text
    assert raise_res.json() == {
        "message": "Montant mis à jour",
        "amount": 1200.0,
        "effective_from": "2024-03-01",
    }

    db = session_local()
    try:
        assert fixed_expense_service.get_effective_amount(db, expense["id"], date(2024, 2, 15)) == Decimal("1000.00")
        assert fixed_expense_service.get_effective_amount(db, expense["id"], date(2024, 3, 1)) == Decimal("1200.00")
        assert fixed_expense_service.get_effective_amount(db, expense["id"], date(2025, 6, 1)) == Decimal("1200.00")
        resolved = fixed_expense_service.resolve_amount(db, expense["id"], date(2024, 2, 29))
        assert resolved.effective_from == date(2024, 1, 1)
    finally:
        db.close()

    feb = client.get("/api/fixed-expenses", params={"month": "2024-02"})
    assert feb.status_code == 200, feb.text
    assert [(row["name"], row["amount"]) for row in feb.json()] == [("Loyer", 1000.0)]

    march = client.get("/api/fixed-expenses", params={"month": "2024-03"})
    assert march.json()[0]["amount"] == 1200.0
    assert march.json()[0]["amount_effective_from"] == "2024-03-01"


def test_amount_is_zero_before_history_starts(test_context):
    client, session_local = test_context
    expense = _create_fixed_expense(client, effective_from="2024-05-01")

    db = session_local()
    try:
        resolved = fixed_expense_service.resolve_amount(db, expense["id"], date(2024, 4, 30))
        assert resolved.amount == Decimal("0.00")
        assert resolved.effective_from is None
    finally:
        db.close()

    res = client.get("/api/fixed-expenses", params={"month": "2024-04"})
    assert res.status_code == 200, res.text
    assert res.json()[0]["amount"] == 0.0
    assert res.json()[0]["amount_effective_from"] is None

    total_res = client.get("/api/fixed-expenses/total/2024-04")
    assert total_res.json() == {"total": 0.0}


def test_upsert_on_same_date_overwrites_without_new_row(test_context):
    client, session_local = test_context
    expense = _create_fixed_expense(client)
    url = f"/api/fixed-expenses/{expense['id']}/amount"

    assert client.post(url, json={"amount": 1200, "effective_from": "2024-03-01"}).status_code == 200
    assert _amount_rows(session_local, expense["id"]) == 2

    again = client.post(url, json={"amount": 1250.5, "effective_from": "2024-03-01"})
    assert again.status_code == 200, again.text
    assert again.json()["amount"] == 1250.5
    assert _amount_rows(session_local, expense["id"]) == 2

    history = client.get(f"/api/fixed-expenses/{expense['id']}/history").json()
    assert [(row["effective_from"], row["amount"]) for row in history] == [
        ("2024-03-01", 1250.5),
        ("2024-01-01", 1000.0),
    ]

    detail = client.get(f"/api/fixed-expenses/{expense['id']}")
    assert detail.status_code == 200, detail.text
    assert len(detail.json()["amounts"]) == 2


def test_total_for_month_sums_active_expenses_by_salon(test_context):
    client, _ = test_context
    salon_id = _create_salon(client)
    _create_fixed_expense(client, name="Loyer", amount=1000, salon_id=salon_id)
    _create_fixed_expense(client, name="Assurance", category="insurance", amount=150.25, salon_id=salon_id)
    _create_fixed_expense(client, name="Comptable", category="other", amount=300)

    assert client.get("/api/fixed-expenses/total/2024-02").json() == {"total": 1450.25}
    salon_total = client.get("/api/fixed-expenses/total/2024-02", params={"salon_id": salon_id})
    assert salon_total.json() == {"total": 1150.25}

    salon_list = client.get("/api/fixed-expenses", params={"salon_id": salon_id, "month": "2024-02"}).json()
    assert {row["name"] for row in salon_list} == {"Loyer", "Assurance"}
    assert all(row["salon_name"] == "Salon Bellecour" for row in salon_list)


def test_delete_is_soft_and_keeps_history(test_context):
    client, session_local = test_context
    expense = _create_fixed_expense(client)
    client.post(
        f"/api/fixed-expenses/{expense['id']}/amount",
        json={"amount": 1100, "effective_from": "2024-02-01"},
    )

    delete_res = client.delete(f"/api/fixed-expenses/{expense['id']}")
    assert delete_res.status_code == 200, delete_res.text
    body = delete_res.json()
    assert body["message"] == "Dépense fixe supprimée"
    assert body["expense"]["is_active"] is False

    assert client.get("/api/fixed-expenses", params={"month": "2024-03"}).json() == []
    assert client.get("/api/fixed-expenses/total/2024-03").json() == {"total": 0.0}

    detail = client.get(f"/api/fixed-expenses/{expense['id']}")
    assert detail.status_code == 200
    assert detail.json()["is_active"] is False
    assert _amount_rows(session_local, expense["id"]) == 2


def test_update_changes_details_but_not_amount(test_context):
    client, _ = test_context
    expense = _create_fixed_expense(client)

    res = client.put(
        f"/api/fixed-expenses/{expense['id']}",
        json={"name": "Loyer boutique", "description": "Bail 3-6-9", "amount": 5},
    )
    assert res.status_code == 200, res.text
    assert res.json()["name"] == "Loyer boutique"
    assert res.json()["description"] == "Bail 3-6-9"

    listed = client.get("/api/fixed-expenses", params={"month": "2024-06"}).json()
    assert listed[0]["amount"] == 1000.0


def test_create_with_unknown_salon_leaves_nothing_behind(test_context):
    client, session_local = test_context
    res = client.post(
        "/api/fixed-expenses",
        json={"name": "Loyer", "amount": 1000, "salon_id": "missing-salon"},
    )
    assert res.status_code == 409, res.text
    assert res.json()["code"] == "conflict"

    db = session_local()
    try:
        assert db.execute(select(func.count(FixedExpenseAmount.id))).scalar_one() == 0
    finally:
        db.close()
    assert client.get("/api/fixed-expenses").json() == []


def test_fixed_expense_not_found_and_bad_month(test_context):
    client, _ = test_context

    missing = client.get("/api/fixed-expenses/nope")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Dépense fixe non trouvée"

    amount_missing = client.post(
        "/api/fixed-expenses/nope/amount",
        json={"amount": 10, "effective_from": "2024-01-01"},
    )
    assert amount_missing.status_code == 404

    assert client.get("/api/fixed-expenses/nope/history").json() == []

    bad_month = client.get("/api/fixed-expenses/total/2024-13")
    assert bad_month.status_code == 400
    assert bad_month.json()["error"] == "Format de mois invalide (YYYY-MM)"


def test_monthly_totals_follow_a_mid_year_raise(test_context):
    client, _ = test_context
    expense = _create_fixed_expense(client)
    res = client.post(
        f"/api/fixed-expenses/{expense['id']}/amount",
        json={"amount": 1200, "effective_from": "2024-03-01"},
    )
    assert res.status_code == 200, res.text

    totals = [client.get(f"/api/fixed-expenses/total/2024-0{month}").json()["total"] for month in (1, 2, 3)]
    assert totals == [1000.0, 1000.0, 1200.0]


def test_upsert_overwrites_a_version_inserted_concurrently(test_context, monkeypatch):
    client, session_local = test_context
    expense = _create_fixed_expense(client)
    original_find = fixed_expense_service.find_amount
    calls = []

    def find_after_other_writer(db, fixed_expense_id, effective_from):
        calls.append(effective_from)
        # The first lookup misses the row another request has just committed.
        if len(calls) == 1:
            return None
        return original_find(db, fixed_expense_id, effective_from)

    monkeypatch.setattr(fixed_expense_service, "find_amount", find_after_other_writer)

    res = client.post(
        f"/api/fixed-expenses/{expense['id']}/amount",
        json={"amount": 1100, "effective_from": "2024-01-01"},
    )
    assert res.status_code == 200, res.text
    assert res.json()["amount"] == 1100.0
    assert len(calls) == 2
    assert _amount_rows(session_local, expense["id"]) == 1
