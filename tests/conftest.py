from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from music_player.app import create_app
from music_player.config import AppConfig
from music_player.storage import JSONStorage


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    directory.mkdir(parents=True, exist_ok=True)
    return directory


@pytest.fixture()
def storage(data_dir: Path) -> JSONStorage:
    return JSONStorage(data_dir / "state.json")


@pytest.fixture()
def client(data_dir: Path):
    config = AppConfig(data_dir=data_dir, host="127.0.0.1", port=8888)
    with TestClient(create_app(config)) as test_client:
        yield test_client


def issue_token(client: TestClient) -> str:
    response = client.post("/api/users/authentication")
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture()
def auth_headers(client):
    return {"Accept": "application/json", "token": issue_token(client)}


@pytest.fixture()
def other_headers(client):
    return {"Accept": "application/json", "token": issue_token(client)}
