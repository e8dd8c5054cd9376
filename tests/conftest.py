import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

_TMP_ROOT = Path(tempfile.mkdtemp(prefix='litterwarden-tests-'))
TEST_DB_URL = os.getenv("TEST_DB_URL", f"sqlite:///{_TMP_ROOT / 'test.db'}")
TEST_EVIDENCE_DIR = _TMP_ROOT / 'evidence'

os.environ["DB_URL"] = TEST_DB_URL
os.environ["EVIDENCE_DIR"] = str(TEST_EVIDENCE_DIR)
for key in ("GOOGLE_MAPS_API_KEY", "AZURE_CV_KEY", "AZURE_CV_ENDPOINT"):
    os.environ.pop(key, None)

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from litterwarden.core.config import settings  # noqa: E402
from litterwarden.db.init_db import init_db  # noqa: E402
from litterwarden.db.session import engine  # noqa: E402
from litterwarden.models.enums import Priority  # noqa: E402
from litterwarden.models.report import Report  # noqa: E402
from litterwarden.services.evidence_store import reset_evidence_store  # noqa: E402

settings.DB_URL = TEST_DB_URL
settings.EVIDENCE_DIR = TEST_EVIDENCE_DIR


@pytest.fixture(autouse=True)
def _fresh_database():
    init_db(drop_all=True)
    reset_evidence_store()
    if TEST_EVIDENCE_DIR.exists():
        for path in TEST_EVIDENCE_DIR.iterdir():
            if path.is_file():
                path.unlink()
    yield
    reset_evidence_store()


@pytest.fixture
def client():
    from litterwarden.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_report(db_session):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(
        priority: Priority = Priority.HIGH,
        email: str = 'reporter@example.com',
        days: int = 0,
        is_clean: bool = False,
        image_url: str | None = None,
    ) -> Report:
        record = Report(
            latitude=51.5,
            longitude=-0.12,
            priority=priority,
            email=email,
            reported_at=base + timedelta(days=days),
            is_clean=is_clean,
            image_url=image_url,
        )
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return _make


@pytest.fixture
def evidence_files():
    def _list() -> list[Path]:
        if not TEST_EVIDENCE_DIR.exists():
            return []
        return sorted(path for path in TEST_EVIDENCE_DIR.iterdir() if path.is_file())

    return _list
