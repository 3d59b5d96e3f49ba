"""Shared fixtures: isolated static/project dirs and a fake Gemini response."""

import os
import tempfile

# Set before the app module is imported: it creates and mounts STATIC_DIR at import time.
os.environ["STATIC_DIR"] = tempfile.mkdtemp(prefix="ui-gen-static-")
os.environ["PROJECT_DIR"] = tempfile.mkdtemp(prefix="ui-gen-project-")
os.environ["CLIENT_DIST"] = os.path.join(os.environ["PROJECT_DIR"], "no-client-build")
os.environ["GEMINI_API_KEY"] = "for-tests-only"
os.environ.pop("SKIP_GITHUB", None)

import pytest
import requests
from fastapi.testclient import TestClient


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data if data is not None else {}
        self.text = text

    def json(self):
        return self._data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


def gemini_payload(text):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


@pytest.fixture
def static_dir(tmp_path):
    d = tmp_path / "static"
    d.mkdir()
    return d


@pytest.fixture
def project_dir(tmp_path):
    d = tmp_path / "project"
    d.mkdir()
    return d


@pytest.fixture
def server(monkeypatch, static_dir, project_dir):
    import app as server

    monkeypatch.setattr(server, "STATIC_DIR", str(static_dir))
    monkeypatch.setattr(server, "PROJECT_DIR", str(project_dir))
    return server


@pytest.fixture
def client(server):
    with TestClient(server.app) as c:
        yield c
