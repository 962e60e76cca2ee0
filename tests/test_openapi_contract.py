import json
from pathlib import Path

from salon_api.core.config import Settings
from salon_api.main import app


def test_openapi_paths_snapshot():
    snapshot_path = Path(__file__).parent / "snapshots" / "openapi_paths_snapshot.json"
    expected_paths = json.loads(snapshot_path.read_text(encoding="utf-8"))
    actual_paths = sorted(app.openapi()["paths"].keys())
    assert actual_paths == expected_paths


def test_openapi_error_envelope_is_documented():
    schema = app.openapi()
    responses = schema["paths"]["/api/salons/{salon_id}"]["get"]["responses"]
    assert "404" in responses
    assert "ErrorOut" in json.dumps(responses["404"])


def test_login_documents_hashed_phone_check():
    description = app.openapi()["paths"]["/api/auth/login"]["post"]["description"]
    assert "bcrypt" in description


def test_amount_upsert_documents_conflict():
    responses = app.openapi()["paths"]["/api/fixed-expenses/{fixed_expense_id}/amount"]["post"]["responses"]
    assert "409" in responses


def test_settings_only_declare_used_keys():
    assert "port" not in Settings.model_fields
