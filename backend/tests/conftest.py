from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Generator

_DATA_ROOT = Path(tempfile.mkdtemp(prefix="activity-log-tests-"))
os.environ.setdefault("AL_STORAGE", "json")
os.environ.setdefault("AL_JSON_DIR", str(_DATA_ROOT / "state"))
os.environ.setdefault("AL_SQLITE_PATH", str(_DATA_ROOT / "activities.db"))
os.environ.setdefault("AL_EXPORT_DIR", str(_DATA_ROOT / "exports"))

import pytest
from fastapi.testclient import TestClient

from activity_log.config import settings
from activity_log.database import build_engine, build_session_factory
from activity_log.main import app, get_store
from activity_log.storage import JsonFileBlobStorage, SqlBlobStorage
from activity_log.store import ActivityStore


@pytest.fixture()
def json_storage(tmp_path: Path) -> JsonFileBlobStorage:
    return JsonFileBlobStorage(tmp_path / "state")


@pytest.fixture()
def sql_storage() -> Generator[SqlBlobStorage, None, None]:
    engine = build_engine(":memory:")
    try:
        yield SqlBlobStorage(build_session_factory(engine))
    finally:
        engine.dispose()


@pytest.fixture()
def store(json_storage: JsonFileBlobStorage) -> ActivityStore:
    return ActivityStore(json_storage)


@pytest.fixture(scope="function")
def client(store: ActivityStore, tmp_path: Path, monkeypatch) -> Generator[TestClient, None, None]:
    monkeypatch.setattr(settings, "export_dir", tmp_path / "exports")
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def activity_payload() -> dict:
    return {
        "hour": "09",
        "minute": "30",
        "mainPerson": "Alice",
        "participantsCount": 3,
        "transportType": "walk",
        "greenCount": 2,
        "yellowCount": 1,
        "direction": "+",
        "coordinates": "37U DQ 12345 67890",
        "establishment": "Central Cafe",
        "department": "dept-A",
        "link": "https://example.com/reports/1",
        "comment": "Morning round",
    }
