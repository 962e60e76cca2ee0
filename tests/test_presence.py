from datetime import datetime

import pytest

from salon_api.core import dates


def _seed(client) -> tuple[str, str]:
    salon = client.post("/api/salons", json={"name": "Salon Croix-Rousse"})
    assert salon.status_code == 201, salon.text
    hairdresser = client.post("/api/hairdressers", json={"first_name": "Léa", "last_name": "Martin"})
    assert hairdresser.status_code == 201, hairdresser.text
    return salon.json()["id"], hairdresser.json()["id"]


@pytest.fixture()
def frozen_today(monkeypatch):
    monkeypatch.setattr(dates, "now_local", lambda: datetime(2024, 3, 14, 10, 0))


def test_toggle_adds_then_removes_then_adds(test_context):
    client, _ = test_context
    salon_id, hairdresser_id = _seed(client)
    payload = {"hairdresser_id": hairdresser_id, "salon_id": salon_id, "date": "2024-03-14"}

    first = client.post("/api/presence/toggle", json=payload)
    assert first.status_code == 200, first.text
    assert first.json()["action"] == "added"
    assert first.json()["isPresent"] is True
    assert first.json()["record"]["date"] == "2024-03-14"

    second = client.post("/api/presence/toggle", json=payload)
    assert second.json() == {"action": "removed", "isPresent": False}

    third = client.post("/api/presence/toggle", json=payload)
    assert third.json()["action"] == "added"

    records = client.get("/api/presence", params={"date": "2024-03-14"}).json()
    assert len(records) == 1
    assert records[0]["first_name"] == "Léa"
    assert records[0]["salon_name"] == "Salon Croix-Rousse"


def test_check_reports_presence(test_context):
    client, _ = test_context
    salon_id, hairdresser_id = _seed(client)
    params = {"hairdresser_id": hairdresser_id, "salon_id": salon_id, "date": "2024-03-14"}

    assert client.get("/api/presence/check", params=params).json() == {"isPresent": False, "record": None}

    client.post("/api/presence/toggle", json=params)
    checked = client.get("/api/presence/check", params=params).json()
    assert checked["isPresent"] is True
    assert checked["record"]["hairdresser_id"] == hairdresser_id


def test_duplicate_presence_is_rejected(test_context):
    client, _ = test_context
    salon_id, hairdresser_id = _seed(client)
    payload = {"hairdresser_id": hairdresser_id, "salon_id": salon_id, "date": "2024-03-14"}

    created = client.post("/api/presence", json=payload)
    assert created.status_code == 201, created.text

    duplicate = client.post("/api/presence", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Présence déjà enregistrée"
    assert duplicate.json()["code"] == "conflict"


def test_create_defaults_to_today_and_lists_today(test_context, frozen_today):
    client, _ = test_context
    salon_id, hairdresser_id = _seed(client)

    created = client.post("/api/presence", json={"hairdresser_id": hairdresser_id, "salon_id": salon_id})
    assert created.status_code == 201, created.text
    assert created.json()["date"] == "2024-03-14"

    today_rows = client.get("/api/presence/today").json()
    assert [row["id"] for row in today_rows] == [created.json()["id"]]


def test_presence_for_unknown_hairdresser_conflicts(test_context):
    client, _ = test_context
    salon_id, _ = _seed(client)

    res = client.post(
        "/api/presence",
        json={"hairdresser_id": "missing", "salon_id": salon_id, "date": "2024-03-14"},
    )
    assert res.status_code == 409


def test_delete_presence(test_context):
    client, _ = test_context
    salon_id, hairdresser_id = _seed(client)
    created = client.post(
        "/api/presence",
        json={"hairdresser_id": hairdresser_id, "salon_id": salon_id, "date": "2024-03-14"},
    ).json()

    deleted = client.delete(f"/api/presence/{created['id']}")
    assert deleted.status_code == 200, deleted.text
    assert deleted.json()["message"] == "Présence supprimée"

    missing = client.delete(f"/api/presence/{created['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Présence non trouvée"
