import copy
import dataclasses
import io
import json
import os

import pytest

from app import create_app
from config import Config
from demo_data import get_demo_data


class FakeModelClient:
    """Stands in for OpenAIModelClient; returns canned text and records calls."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    async def generate(self, prompt, artifacts=(), context=None):
        self.calls.append({
            "prompt": prompt,
            "artifacts": list(artifacts),
            "paths_existed": [os.path.exists(a.path) for a in artifacts],
            "context": context,
        })
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


@pytest.fixture
def record_data():
    return copy.deepcopy(get_demo_data("en"))


@pytest.fixture
def record_json(record_data):
    return json.dumps(record_data, ensure_ascii=False)


@pytest.fixture
def config(tmp_path):
    return Config(
        secret_key="test-secret",
        database_url="sqlite://",
        openai_api_key=None,
        upload_folder=str(tmp_path / "uploads"),
        max_file_size_mb=1,
        max_files=3,
        report_list_limit=5,
        log_level="WARNING",
    )


@pytest.fixture
def app(config):
    app = create_app(config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_app(config):
    def _make(model_client=None, **overrides):
        cfg = dataclasses.replace(config, **overrides)
        app = create_app(cfg, model_client=model_client)
        app.config["TESTING"] = True
        return app

    return _make


def png_file(name="label.png", payload=b"\x89PNG\r\n\x1a\nfake"):
    return (io.BytesIO(payload), name, "image/png")


def register(client, email="alice@example.com", password="secret1", name="Alice", company=""):
    return client.post("/auth/register", json={
        "email": email,
        "password": password,
        "name": name,
        "company": company,
    })
