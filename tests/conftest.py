import os
import tempfile
from io import BytesIO

# Settings are read at import time; keep test runs away from the working tree.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="ia-showcase-"))
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app import app
from app.api.deps import get_db, get_storage
from app.core.config import settings
from app.models import Submission, SubmissionView
from app.services.dashboard import ModerationDashboard
from app.services.moderation_client import ModerationApiClient
from app.services.notifications import NotificationLog
from app.services.storage import BlobStorage
from app.services.store import DatabaseStore

ADMIN_PASSWORD = "test-secret"


def png_bytes(color=(200, 30, 30), image_format="PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def admin_password(monkeypatch):
    monkeypatch.setattr(settings, "admin_password", ADMIN_PASSWORD)
    return ADMIN_PASSWORD


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def storage(tmp_path):
    return BlobStorage(
        root=tmp_path / "blobs",
        bucket="submissions",
        public_base_url="http://testserver",
        media_prefix="/media",
    )


@pytest.fixture
def client(engine, storage):
    def _get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def api(client):
    api_http = TestClient(app, base_url="http://testserver/api")
    return ModerationApiClient(client=api_http)


@pytest.fixture
def store(engine, storage):
    return DatabaseStore(engine=engine, storage=storage)


@pytest.fixture
def notifications():
    return NotificationLog()


@pytest.fixture
def confirmations():
    """Prompts shown to the operator; every prompt is accepted."""
    return []


@pytest.fixture
def dashboard(api, store, notifications, confirmations):
    def _confirm(prompt):
        confirmations.append(prompt)
        return True

    return ModerationDashboard(
        api=api,
        store=store,
        credential=ADMIN_PASSWORD,
        confirm=_confirm,
        notifications=notifications,
    )


@pytest.fixture
def make_submission(engine, storage):
    def _make(status="pending", images=("a.png", "b.png"), pdf=None, **fields):
        record = Submission(
            status=status,
            title=fields.pop("title", "Lamp"),
            description=fields.pop("description", "A desk lamp"),
            material=fields.pop("material", ["Wood"]),
            color=fields.pop("color", ["White"]),
            function=fields.pop("function", ["Life Improvement & Decor"]),
            first_name=fields.pop("first_name", "Ada"),
            last_name=fields.pop("last_name", "Lovelace"),
            email=fields.pop("email", "ada@example.com"),
            grade_level=fields.pop("grade_level", "11"),
            **fields,
        )
        record.image_urls = [storage.put(f"{record.id}/images/{name}", png_bytes()) for name in images]
        if pdf:
            record.pdf_url = storage.put(f"{record.id}/{pdf}", b"%PDF-1.4 test document")
        with Session(engine) as db:
            db.add(record)
            db.commit()
            db.refresh(record)
            return SubmissionView.model_validate(record)

    return _make
