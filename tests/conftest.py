import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.services.proposer import get_proposer


class FakeProposer:
    def __init__(self, description="This file is a quarterly budget report.", tags=None, error=None):
        self.description = description
        self.tags = ["budget", "finance"] if tags is None else tags
        self.error = error
        self.uploads = []

    async def propose(self, upload):
        self.uploads.append(upload)
        if self.error is not None:
            raise self.error
        return self.description, list(self.tags)


@pytest.fixture
def data_path(tmp_path, monkeypatch):
    path = tmp_path / "data" / "data.json"
    monkeypatch.setattr(settings, "data_path", str(path))
    monkeypatch.setattr(settings, "uploads_dir", str(tmp_path / "uploads"))
    return path


@pytest.fixture
def proposer():
    return FakeProposer()


@pytest.fixture
def client(data_path, proposer):
    app.dependency_overrides[get_proposer] = lambda: proposer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
