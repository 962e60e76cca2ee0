from sqlalchemy import select

from salon_api.models.user import User


def test_health_and_ready(test_context):
    client, _ = test_context

    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert health.json()["timestamp"]
    assert health.headers["X-Request-ID"]
    assert health.headers["X-API-Timeout-Hint-Ms"]

    assert client.get("/api/ready").json() == {"ok": True}


def test_unknown_route_uses_error_envelope(test_context):
    client, _ = test_context

    res = client.get("/api/does-not-exist", headers={"X-Request-ID": "req-123"})
    assert res.status_code == 404
    body = res.json()
    assert body["error"] == "Route not found"
    assert body["code"] == "not_found"
    assert body["request_id"] == "req-123"
    assert body["path"] == "/api/does-not-exist"


def test_validation_error_is_400_with_details(test_context):
    client, _ = test_context

    res = client.post("/api/salons", json={"city": "Lyon"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Requête invalide"
    assert body["code"] == "validation_error"
    assert any(issue["field"] == "name" for issue in body["details"])

    blank = client.post("/api/salons", json={"name": "   "})
    assert blank.status_code == 400


def test_salon_crud(test_context):
    client, _ = test_context

    created = client.post("/api/salons", json={"name": "Salon Vieux-Lyon", "city": "Lyon"})
    assert created.status_code == 201, created.text
    salon = created.json()
    assert salon["is_active"] is True
    assert salon["address"] == ""

    client.post("/api/salons", json={"name": "Salon Annecy", "is_active": False})
    assert [row["name"] for row in client.get("/api/salons/active").json()] == ["Salon Vieux-Lyon"]
    assert len(client.get("/api/salons").json()) == 2

    updated = client.put(f"/api/salons/{salon['id']}", json={"phone": "0478000000"})
    assert updated.status_code == 200, updated.text
    assert updated.json()["phone"] == "0478000000"
    assert updated.json()["name"] == "Salon Vieux-Lyon"

    deleted = client.delete(f"/api/salons/{salon['id']}")
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Salon supprimé"
    assert deleted.json()["salon"]["id"] == salon["id"]

    missing = client.get(f"/api/salons/{salon['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Salon non trouvé"


def test_salon_referenced_by_assignment_cannot_be_deleted(test_context):
    client, _ = test_context
    salon_id = client.post("/api/salons", json={"name": "Salon Part-Dieu"}).json()["id"]
    hairdresser_id = client.post(
        "/api/hairdressers", json={"first_name": "Hugo", "last_name": "Bernard"}
    ).json()["id"]
    res = client.post(
        "/api/assignments",
        json={"hairdresser_id": hairdresser_id, "salon_id": salon_id, "start_date": "2024-01-01"},
    )
    assert res.status_code == 201, res.text

    deleted = client.delete(f"/api/salons/{salon_id}")
    assert deleted.status_code == 409
    assert deleted.json()["error"] == "Salon encore référencé"
    assert client.get(f"/api/salons/{salon_id}").status_code == 200


def test_hairdresser_crud_creates_and_removes_login(test_context):
    client, session_local = test_context

    created = client.post(
        "/api/hairdressers",
        json={
            "matricule": "C-001",
            "first_name": "Camille",
            "last_name": "Durand",
            "email": "camille@example.com",
            "phone": "0611223344",
        },
    )
    assert created.status_code == 201, created.text
    hairdresser = created.json()

    db = session_local()
    try:
        user = db.execute(select(User).where(User.hairdresser_id == hairdresser["id"])).scalar_one()
        assert user.username == "camille@example.com"
        assert user.role == "coiffeur"
        assert user.password_hash != "0611223344"
    finally:
        db.close()

    duplicate = client.post(
        "/api/hairdressers",
        json={"matricule": "C-001", "first_name": "Other", "last_name": "Person"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Matricule déjà utilisé"

    updated = client.put(f"/api/hairdressers/{hairdresser['id']}", json={"is_active": False, "rib_1": "FR76"})
    assert updated.status_code == 200, updated.text
    assert updated.json()["is_active"] is False
    assert updated.json()["rib_1"] == "FR76"
    assert client.get("/api/hairdressers/active").json() == []

    deleted = client.delete(f"/api/hairdressers/{hairdresser['id']}")
    assert deleted.status_code == 200, deleted.text
    assert deleted.json()["message"] == "Coiffeur supprimé"

    db = session_local()
    try:
        assert db.execute(select(User)).scalars().all() == []
    finally:
        db.close()

    missing = client.get(f"/api/hairdressers/{hairdresser['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Coiffeur non trouvé"


def test_hairdresser_without_phone_gets_no_login(test_context):
    client, session_local = test_context
    res = client.post(
        "/api/hairdressers",
        json={"first_name": "Nina", "last_name": "Roux", "email": "nina@example.com"},
    )
    assert res.status_code == 201, res.text

    db = session_local()
    try:
        assert db.execute(select(User)).scalars().all() == []
    finally:
        db.close()


def test_service_crud(test_context):
    client, _ = test_context

    created = client.post(
        "/api/services",
        json={"name": "Coupe femme", "price_salon": 35, "price_coiffeur": 17.5, "duration_minutes": 45},
    )
    assert created.status_code == 201, created.text
    service = created.json()
    assert service["price_salon"] == 35.0
    assert service["price_coiffeur"] == 17.5

    defaults = client.post("/api/services", json={"name": "Brushing"}).json()
    assert defaults["duration_minutes"] == 30
    assert defaults["price_salon"] == 0.0

    names = [row["name"] for row in client.get("/api/services").json()]
    assert names == ["Brushing", "Coupe femme"]

    updated = client.put(f"/api/services/{service['id']}", json={"price_salon": 38.456})
    assert updated.json()["price_salon"] == 38.46
    assert updated.json()["name"] == "Coupe femme"

    negative = client.post("/api/services", json={"name": "Gratuit", "price_salon": -1})
    assert negative.status_code == 400

    assert client.delete(f"/api/services/{service['id']}").json()["message"] == "Service supprimé"
    missing = client.get(f"/api/services/{service['id']}")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Service non trouvé"


def test_product_categories_are_unique(test_context):
    client, _ = test_context

    created = client.post("/api/product-categories", json={"name": "Shampooings"})
    assert created.status_code == 201, created.text

    duplicate = client.post("/api/product-categories", json={"name": "Shampooings"})
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "Catégorie déjà existante"

    deleted = client.delete(f"/api/product-categories/{created.json()['id']}")
    assert deleted.json()["message"] == "Catégorie supprimée"
    assert client.get(f"/api/product-categories/{created.json()['id']}").status_code == 404


def test_assignments_lifecycle(test_context):
    client, _ = test_context
    salon_id = client.post("/api/salons", json={"name": "Salon Brotteaux"}).json()["id"]
    hairdresser_id = client.post(
        "/api/hairdressers", json={"first_name": "Inès", "last_name": "Petit"}
    ).json()["id"]

    created = client.post(
        "/api/assignments",
        json={
            "hairdresser_id": hairdresser_id,
            "salon_id": salon_id,
            "start_date": "2024-01-01",
            "compensation_type": "fixed",
            "fixed_salary": 1800,
        },
    )
    assert created.status_code == 201, created.text
    assignment = created.json()
    assert assignment["commission_percentage"] == 50.0
    assert assignment["end_date"] is None

    listed = client.get("/api/assignments").json()
    assert listed[0]["first_name"] == "Inès"
    assert listed[0]["salon_name"] == "Salon Brotteaux"
    assert len(client.get("/api/assignments/active").json()) == 1
    assert len(client.get(f"/api/assignments/salon/{salon_id}").json()) == 1
    assert len(client.get(f"/api/assignments/hairdresser/{hairdresser_id}").json()) == 1

    backwards = client.put(f"/api/assignments/{assignment['id']}", json={"end_date": "2023-12-31"})
    assert backwards.status_code == 400

    ended = client.put(f"/api/assignments/{assignment['id']}", json={"end_date": "2024-02-29"})
    assert ended.status_code == 200, ended.text
    assert client.get("/api/assignments/active").json() == []

    bad_create = client.post(
        "/api/assignments",
        json={
            "hairdresser_id": hairdresser_id,
            "salon_id": salon_id,
            "start_date": "2024-02-01",
            "end_date": "2024-01-01",
        },
    )
    assert bad_create.status_code == 400

    deleted = client.delete(f"/api/assignments/{assignment['id']}")
    assert deleted.json()["message"] == "Affectation supprimée"
    missing = client.get(f"/api/assignments/{assignment['id']}")
    assert missing.json()["error"] == "Affectation non trouvée"


def test_expenses_filters_and_categories(test_context):
    client, _ = test_context
    salon_id = client.post("/api/salons", json={"name": "Salon Confluence"}).json()["id"]

    for payload in (
        {"salon_id": salon_id, "category": "supplies", "amount": 84.5, "date": "2024-03-02"},
        {"salon_id": salon_id, "category": "marketing", "amount": 120, "date": "2024-03-20"},
        {"category": "supplies", "amount": 40, "date": "2024-04-01"},
    ):
        res = client.post("/api/expenses", json=payload)
        assert res.status_code == 201, res.text

    march = client.get("/api/expenses", params={"month": "2024-03"}).json()
    assert {row["amount"] for row in march} == {84.5, 120.0}
    assert all(row["salon_name"] == "Salon Confluence" for row in march)

    supplies = client.get("/api/expenses", params={"category": "supplies"}).json()
    assert len(supplies) == 2
    assert len(client.get(f"/api/expenses/salon/{salon_id}").json()) == 2

    bad_month = client.get("/api/expenses", params={"month": "march"})
    assert bad_month.status_code == 400

    categories = client.get("/api/expenses/categories").json()
    assert len(categories) == 10
    assert categories[0] == {"value": "rent", "label": "Loyer"}
    assert categories[-1] == {"value": "other", "label": "Autre"}

    missing = client.get("/api/expenses/nope")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Dépense non trouvée"
