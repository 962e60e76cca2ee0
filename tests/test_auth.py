from salon_api.core.security import hash_password, verify_password


def _hairdresser_with_login(client) -> dict:
    res = client.post(
        "/api/hairdressers",
        json={
            "first_name": "Camille",
            "last_name": "Durand",
            "email": "Camille.Durand@example.com",
            "phone": "0611223344",
        },
    )
    assert res.status_code == 201, res.text
    return res.json()


def test_admin_login_and_me(test_context):
    client, _ = test_context

    res = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert res.status_code == 200, res.text
    assert res.json() == {
        "success": True,
        "user": {"id": "admin", "role": "admin", "name": "Administrateur", "username": "admin"},
    }

    me = client.get("/api/auth/me", headers={"X-User-Id": "admin"})
    assert me.json() == {"id": "admin", "role": "admin", "name": "Administrateur"}


def test_hairdresser_logs_in_with_email_and_phone(test_context):
    client, _ = test_context
    hairdresser = _hairdresser_with_login(client)

    res = client.post(
        "/api/auth/login",
        json={"username": "camille.durand@example.com", "password": "0611223344"},
    )
    assert res.status_code == 200, res.text
    user = res.json()["user"]
    assert user["role"] == "coiffeur"
    assert user["name"] == "Camille Durand"
    assert user["hairdresserId"] == hairdresser["id"]

    me = client.get("/api/auth/me", headers={"X-User-Id": user["id"]})
    assert me.status_code == 200, me.text
    assert me.json()["hairdresser_id"] == hairdresser["id"]
    assert me.json()["username"] == "Camille.Durand@example.com"


def test_phone_change_updates_credentials(test_context):
    client, _ = test_context
    hairdresser = _hairdresser_with_login(client)

    res = client.put(
        f"/api/hairdressers/{hairdresser['id']}",
        json={"email": "camille@example.com", "phone": "0700000000"},
    )
    assert res.status_code == 200, res.text

    old = client.post(
        "/api/auth/login",
        json={"username": "Camille.Durand@example.com", "password": "0611223344"},
    )
    assert old.status_code == 401

    new = client.post("/api/auth/login", json={"username": "camille@example.com", "password": "0700000000"})
    assert new.status_code == 200, new.text


def test_bad_credentials_and_missing_user(test_context):
    client, _ = test_context
    _hairdresser_with_login(client)

    wrong = client.post(
        "/api/auth/login",
        json={"username": "camille.durand@example.com", "password": "nope"},
    )
    assert wrong.status_code == 401
    assert wrong.json()["error"] == "Identifiants incorrects"
    assert wrong.json()["code"] == "unauthorized"

    empty = client.post("/api/auth/login", json={})
    assert empty.status_code == 401

    anonymous = client.get("/api/auth/me")
    assert anonymous.status_code == 401
    assert anonymous.json()["error"] == "Non authentifié"

    unknown = client.get("/api/auth/me", headers={"X-User-Id": "ghost"})
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "Utilisateur non trouvé"


def test_password_helpers():
    hashed = hash_password("0611223344")
    assert hashed != "0611223344"
    assert verify_password("0611223344", hashed)
    assert not verify_password("0611223345", hashed)
    assert not verify_password("0611223344", "plain-text-value")
    assert not verify_password("", hashed)
