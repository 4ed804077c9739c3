import os

# Use in-memory sqlite for tests; must be set before the app modules import settings
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("GEMINI_API_KEY", "")

import pytest  # noqa: E402

from stride_pulse.db import Base, SessionLocal, engine  # noqa: E402
from stride_pulse.models.blob import Blob  # noqa: E402,F401
from stride_pulse.services.store import BlobStore  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        db.query(Blob).delete()
        db.commit()
    yield


@pytest.fixture
def store():
    return BlobStore(SessionLocal, "UTC")


@pytest.fixture
def client():
    from fastapi.testclient import TestClient  # noqa: WPS433
    from stride_pulse.main import app  # noqa: WPS433

    with TestClient(app) as c:
        yield c
