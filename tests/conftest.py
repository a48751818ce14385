"""
Shared pytest fixtures: in-memory SQLite, temp upload dir, FastAPI TestClient.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import ReceiptModel  # noqa: F401  register model
from app.main import app
from app.pipeline import LocalFileStore
from app.routers.receipts import get_file_store

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_Session = sessionmaker(autocommit=False, autoflush=False, bind=_ENGINE)


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture()
def db():
    session = _Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def upload_root(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture()
def store(upload_root):
    return LocalFileStore(upload_root)


@pytest.fixture()
def client(db, store):
    def _override():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_file_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def stored_files(root):
    if not root.exists():
        return []
    return [p for p in root.rglob("*") if p.is_file()]
