import pytest
import os
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")

import salon_api.models  # noqa: F401
from salon_api.core.config import settings
from salon_api.core.deps import get_db
from salon_api.db.base import Base
from salon_api.db.session import enable_sqlite_foreign_keys
from salon_api.main import app


@pytest.fixture()
def test_context():
    original_admin = (settings.admin_username, settings.admin_password)
    settings.admin_username = "admin"
    settings.admin_password = "admin123"

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client, session_local

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)
    settings.admin_username, settings.admin_password = original_admin
