from __future__ import annotations

import io
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

from inventory import create_app
from inventory.db import create_app_engine
from inventory.models.base import Base
from inventory.repositories.json_item_repository import JsonItemRepository
from inventory.repositories.sql_item_repository import SqlItemRepository
from inventory.services.item_service import ItemService
from inventory.storage.photo_store import PhotoStore, PhotoUpload


@pytest.fixture
def make_upload():
    def _make(content: bytes = b"\xff\xd8jpeg-bytes", filename: str = "a.jpg") -> PhotoUpload:
        return PhotoUpload(stream=io.BytesIO(content), filename=filename)

    return _make


@pytest.fixture
def photo_store(tmp_path: Path) -> PhotoStore:
    return PhotoStore(tmp_path / "cache")


@pytest.fixture
def json_repo(tmp_path: Path) -> JsonItemRepository:
    return JsonItemRepository(tmp_path / "data" / "items.json")


@pytest.fixture
def sql_repo(tmp_path: Path) -> SqlItemRepository:
    engine = create_app_engine(f"sqlite:///{tmp_path / 'items.db'}")
    Base.metadata.create_all(bind=engine)
    yield SqlItemRepository(sessionmaker(bind=engine, autoflush=False, expire_on_commit=False), schema_ready=True)
    engine.dispose()


@pytest.fixture(params=["file", "sql"])
def repo(request: pytest.FixtureRequest):
    return request.getfixturevalue("json_repo" if request.param == "file" else "sql_repo")


@pytest.fixture
def service(repo, photo_store: PhotoStore) -> ItemService:
    return ItemService(repo, photo_store)


@pytest.fixture(params=["file", "sql"])
def app(request: pytest.FixtureRequest, tmp_path: Path):
    app = create_app(
        {
            "TESTING": True,
            "STORAGE_BACKEND": request.param,
            "CACHE_DIR": str(tmp_path / "cache"),
            "DATA_FILE": str(tmp_path / "data" / "items.json"),
            "DATABASE_URL": f"sqlite:///{tmp_path / 'app.db'}",
            "DB_CONNECT_RETRIES": 1,
            "DB_CONNECT_RETRY_DELAY": 0,
        }
    )
    yield app
    engine = app.extensions.get("engine")
    if engine is not None:
        engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()
