from datetime import datetime

import pytest

from salon_api.core import dates


@pytest.fixture()
def frozen_now(monkeypatch):
    # Thursday; the week started on Monday 2024-03-11.
    monkeypatch.setattr(dates, "now_local", lambda: datetime(2024, 3, 14, 18, 0))


def _post(client, url: str, payload: dict) -> dict:
    res = client.post(url, json=payload)
    assert res.status_code == 201, res.text
    return res.json()


def _seed(client) -> dict:
    salon_a = _post(client, "/api/salons", {"name": "Salon Bellecour"})["id"]
    salon_b = _post(client, "/api/salons", {"name": "Salon Gerland"})["id"]
    lea = _post(client, "/api/hairdressers", {"first_name": "Léa", "last_name": "Martin"})["id"]
    hugo = _post(client, "/api/hairdressers", {"first_name": "Hugo", "last_name": "Bernard"})["id"]
    coupe = _post(
        client,
        "/api/services",
        {"name": "Coupe femme", "price_salon": 35, "price_coiffeur": 17.5},
    )["id"]

    rows = [
        ("2024-03-14T10:00:00", salon_a, lea, "Coupe femme", 35, 17.5, "card"),
        ("2024-03-12T15:00:00", salon_a, hugo, "Brushing", 20, 10, "cash"),
        ("2024-03-02T11:00:00", salon_b, lea, "Coupe femme", 35, 17.5, "cash"),
        ("2024-02-20T09:30:00", salon_b, hugo, "Couleur", 60, 30, "card"),
    ]
    transactions = []
    for when, salon_id, hairdresser_id, name, price_salon, price_coiffeur, method in rows:
        transactions.append(
            _post(
                client,
                "/api/transactions",
                {
                    "service_date_time": when,
                    "salon_id": salon_id,
                    "hairdresser_id": hairdresser_id,
                    "service_id": coupe if name == "Coupe femme" else None,
                    "service_name": name,
                    "price_salon": price_salon,
                    "price_coiffeur": price_coiffeur,
                    "payment_method": method,
                },
            )
        )
    return {
        "salon_a": salon_a,
        "salon_b": salon_b,
        "lea": lea,
        "hugo": hugo,
        "transactions": transactions,
    }


def test_transaction_listing_windows(test_context, frozen_now):
    client, _ = test_context
    ids = _seed(client)

    assert len(client.get("/api/transactions").json()) == 4
    assert len(client.get("/api/transactions/today").json()) == 1
    assert len(client.get("/api/transactions/week").json()) == 2
    assert len(client.get("/api/transactions/month").json()) == 3

    on_day = client.get("/api/transactions", params={"date": "2024-03-14"}).json()
    assert [row["service_name"] for row in on_day] == ["Coupe femme"]
    assert on_day[0]["hairdresser_name"] == "Léa Martin"
    assert on_day[0]["salon_name"] == "Salon Bellecour"
    assert on_day[0]["service_display_name"] == "Coupe femme"

    ranged = client.get(
        "/api/transactions",
        params={"start_date": "2024-03-01", "end_date": "2024-03-12"},
    ).json()
    assert [row["service_date_time"][:10] for row in ranged] == ["2024-03-12", "2024-03-02"]

    # A lone bound is ignored.
    assert len(client.get("/api/transactions", params={"start_date": "2024-03-13"}).json()) == 4

    hugo_rows = client.get(f"/api/transactions/hairdresser/{ids['hugo']}").json()
    assert {row["service_name"] for row in hugo_rows} == {"Brushing", "Couleur"}

    by_salon = client.get("/api/transactions", params={"salon_id": ids["salon_b"]}).json()
    assert len(by_salon) == 2


def test_transaction_update_delete_and_errors(test_context):
    client, _ = test_context
    ids = _seed(client)
    transaction = ids["transactions"][1]

    updated = client.put(
        f"/api/transactions/{transaction['id']}",
        json={"price_salon": 22, "payment_method": " CARD "},
    )
    assert updated.status_code == 200, updated.text
    assert updated.json()["price_salon"] == 22.0
    assert updated.json()["payment_method"] == "card"
    assert updated.json()["service_name"] == "Brushing"

    unknown_salon = client.post(
        "/api/transactions",
        json={"salon_id": "missing", "hairdresser_id": ids["lea"], "service_name": "Coupe"},
    )
    assert unknown_salon.status_code == 409

    deleted = client.delete(f"/api/transactions/{transaction['id']}")
    assert deleted.status_code == 200
    missing = client.get(f"/api/transactions/{transaction['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Transaction non trouvée"


def test_dashboard_kpis(test_context, frozen_now):
    client, _ = test_context
    _seed(client)

    res = client.get("/api/analytics/dashboard")
    assert res.status_code == 200, res.text
    assert res.json() == {
        "todayRevenue": 35.0,
        "todayServices": 1,
        "weekRevenue": 55.0,
        "monthRevenue": 90.0,
        "activeSalons": 2,
        "activeHairdressers": 2,
    }


def test_daily_revenue_fills_empty_days(test_context, frozen_now):
    client, _ = test_context
    _seed(client)

    res = client.get("/api/analytics/daily-revenue", params={"days": 3})
    assert res.status_code == 200, res.text
    assert res.json() == [
        {"date": "2024-03-12", "label": "mar. 12", "revenue": 20.0, "count": 1},
        {"date": "2024-03-13", "label": "mer. 13", "revenue": 0.0, "count": 0},
        {"date": "2024-03-14", "label": "jeu. 14", "revenue": 35.0, "count": 1},
    ]
    assert len(client.get("/api/analytics/daily-revenue").json()) == 7


def test_breakdowns_by_period(test_context, frozen_now):
    client, _ = test_context
    ids = _seed(client)

    salons = client.get("/api/analytics/revenue-by-salon").json()
    assert [(row["id"], row["revenue"], row["count"]) for row in salons] == [
        (ids["salon_a"], 55.0, 2),
        (ids["salon_b"], 35.0, 1),
    ]

    top_month = client.get("/api/analytics/top-hairdressers").json()
    assert [(row["first_name"], row["revenue"]) for row in top_month] == [("Léa", 70.0), ("Hugo", 20.0)]

    top_all = client.get("/api/analytics/top-hairdressers", params={"period": "all", "limit": 1}).json()
    assert [(row["first_name"], row["revenue"], row["count"]) for row in top_all] == [("Hugo", 80.0, 2)]

    services = client.get("/api/analytics/service-breakdown").json()
    assert services[0] == {"service_name": "Coupe femme", "count": 2, "revenue": 70.0}

    methods = client.get("/api/analytics/payment-methods").json()
    assert methods == {"cash": {"count": 2, "total": 55.0}, "card": {"count": 1, "total": 35.0}}

    recent = client.get("/api/analytics/recent-transactions", params={"limit": 2}).json()
    assert [row["service_date_time"][:10] for row in recent] == ["2024-03-14", "2024-03-12"]

    bad_period = client.get("/api/analytics/revenue-by-salon", params={"period": "decade"})
    assert bad_period.status_code == 400


def test_payment_methods_default_to_zero(test_context):
    client, _ = test_context

    res = client.get("/api/analytics/payment-methods")
    assert res.json() == {"cash": {"count": 0, "total": 0.0}, "card": {"count": 0, "total": 0.0}}


def test_payroll_adds_fixed_salary_of_running_contracts(test_context, frozen_now):
    client, _ = test_context
    ids = _seed(client)
    _post(
        client,
        "/api/assignments",
        {
            "hairdresser_id": ids["hugo"],
            "salon_id": ids["salon_a"],
            "start_date": "2024-01-01",
            "compensation_type": "fixed",
            "fixed_salary": 1000,
        },
    )
    _post(
        client,
        "/api/assignments",
        {
            "hairdresser_id": ids["lea"],
            "salon_id": ids["salon_b"],
            "start_date": "2023-01-01",
            "end_date": "2023-12-31",
            "fixed_salary": 500,
        },
    )

    res = client.get("/api/analytics/payroll", params={"month": "2024-03"})
    assert res.status_code == 200, res.text
    lines = {line["hairdresser"]["first_name"]: line for line in res.json()}
    assert lines["Léa"]["transactionCount"] == 2
    assert lines["Léa"]["totalSalon"] == 70.0
    assert lines["Léa"]["totalCoiffeur"] == 35.0
    assert lines["Léa"]["fixedSalary"] == 0.0
    assert lines["Hugo"]["totalCoiffeur"] == 10.0
    assert lines["Hugo"]["fixedSalary"] == 1000.0
    assert lines["Hugo"]["totalEarnings"] == 1010.0

    salon_only = client.get(
        "/api/analytics/payroll",
        params={"month": "2024-03", "salon_id": ids["salon_a"]},
    ).json()
    lines = {line["hairdresser"]["first_name"]: line for line in salon_only}
    assert lines["Léa"]["transactionCount"] == 1

    assert client.get("/api/analytics/payroll", params={"month": "03-2024"}).status_code == 400


def test_hairdresser_personal_stats(test_context, frozen_now):
    client, _ = test_context
    ids = _seed(client)

    res = client.get(f"/api/analytics/hairdresser/{ids['lea']}")
    assert res.status_code == 200, res.text
    stats = res.json()
    assert stats["todayEarnings"] == 17.5
    assert stats["todayServices"] == 1
    assert stats["weekEarnings"] == 17.5
    assert stats["monthEarnings"] == 35.0
    assert stats["monthServices"] == 2
    assert len(stats["weeklyData"]) == 7
    assert stats["weeklyData"][-1] == {"label": "jeu. 14", "earnings": 17.5, "services": 1}
    assert [row["salon_name"] for row in stats["recentTransactions"]] == ["Salon Bellecour", "Salon Gerland"]


def test_monthly_costs_combine_fixed_and_variable(test_context):
    client, _ = test_context
    salon_id = _post(client, "/api/salons", {"name": "Salon Bellecour"})["id"]
    _post(
        client,
        "/api/fixed-expenses",
        {"name": "Loyer", "amount": 1000, "effective_from": "2024-01-01", "salon_id": salon_id},
    )
    _post(client, "/api/expenses", {"salon_id": salon_id, "amount": 84.5, "date": "2024-03-02"})
    _post(client, "/api/expenses", {"salon_id": salon_id, "amount": 50, "date": "2024-03-05", "type": "fixed"})
    _post(client, "/api/expenses", {"salon_id": salon_id, "amount": 99, "date": "2024-04-01"})

    res = client.get("/api/analytics/fixed-costs/2024-03", params={"salon_id": salon_id})
    assert res.status_code == 200, res.text
    assert res.json() == {
        "month": "2024-03",
        "salon_id": salon_id,
        "fixed_total": 1000.0,
        "variable_total": 84.5,
        "total": 1084.5,
        "reference_date": "2024-03-01",
    }
