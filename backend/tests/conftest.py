from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _reset_artifact_fetcher() -> None:
    from paperbuddy.artifacts import reset_artifact_fetcher

    reset_artifact_fetcher()
    yield
    reset_artifact_fetcher()


@pytest.fixture
def isolated_db(tmp_path, monkeypatch):
    from sqlmodel import SQLModel, create_engine

    from paperbuddy import db, models  # noqa: F401
    from paperbuddy.settings import settings

    monkeypatch.setattr(settings, "data_dir", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "sqlite_path", str(tmp_path / "test.db"))
    engine = create_engine(settings.sqlite_url, connect_args={"check_same_thread": False})
    monkeypatch.setattr(db, "engine", engine)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def markscheme_dir(tmp_path, monkeypatch) -> Path:
    from paperbuddy.settings import settings

    directory = tmp_path / "ms"
    directory.mkdir()
    monkeypatch.setattr(settings, "markscheme_backend", "local")
    monkeypatch.setattr(settings, "markscheme_dir", str(directory))
    return directory


@pytest.fixture
def client(isolated_db, markscheme_dir, monkeypatch):
    from fastapi.testclient import TestClient

    from paperbuddy.main import app

    monkeypatch.setenv("OPENAI_MOCK", "1")
    monkeypatch.delenv("BACKEND_API_KEY", raising=False)
    with TestClient(app) as test_client:
        yield test_client
