import json
from urllib.parse import urlsplit

import pytest
import requests
from fastapi.testclient import TestClient
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from videoai.client import ApiClient, ClientConfig, InMemoryVideoStore
from videoai.core.config import settings
from videoai.core.db import get_session
from videoai.main import app
from videoai.models import User
from videoai.services import ffmpeg, job_tracker
from videoai.services import queue as job_queue
from videoai.services.security import hash_password, issue_token

API_URL = "http://api.test"


# backend fixtures

@pytest.fixture(name="engine")
def engine_fixture(monkeypatch):
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    # workers report progress through their own sessions
    monkeypatch.setattr(job_tracker, "engine", engine)
    return engine

@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session

@pytest.fixture(name="client")
def client_fixture(engine):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()

@pytest.fixture(name="user")
def user_fixture(session):
    user = User(email="editor@example.com", name="Editor", password_hash=hash_password("correct-horse"))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user

@pytest.fixture(name="auth_headers")
def auth_headers_fixture(session, user):
    token = issue_token(session, user)
    return {"Authorization": f"Bearer {token.token}"}


class FakeRqJob:
    def __init__(self, job_id):
        self.id = job_id


class FakeQueue:
    """records enqueue calls instead of pushing them to redis"""

    def __init__(self):
        self.calls = []

    def enqueue(self, func, *args, **kwargs):
        self.calls.append((func, args, kwargs))
        return FakeRqJob(f"rq-{len(self.calls)}")


@pytest.fixture(name="fake_queue")
def fake_queue_fixture(monkeypatch):
    fake = FakeQueue()
    monkeypatch.setattr(job_queue, "queue", fake)
    return fake

@pytest.fixture(name="data_dirs")
def data_dirs_fixture(monkeypatch, tmp_path):
    for name in ("UPLOADS_DIR", "PROCESSED_DIR", "CLIPS_DIR", "THUMBNAILS_DIR"):
        path = tmp_path / name.lower()
        path.mkdir()
        monkeypatch.setattr(settings, name, str(path))
    return tmp_path

@pytest.fixture(name="fake_ffmpeg")
def fake_ffmpeg_fixture(monkeypatch):
    def fake_metadata(path):
        return {"duration_ms": 90_000, "width": 1920, "height": 1080, "fps": 30.0}

    def fake_thumbnail(input_path, output_path, at_ms=1000):
        with open(output_path, "wb") as f:
            f.write(b"\xff\xd8\xff")
        return output_path

    monkeypatch.setattr(ffmpeg, "get_video_metadata", fake_metadata)
    monkeypatch.setattr(ffmpeg, "extract_thumbnail", fake_thumbnail)


# client fixtures

def drain(body) -> bytes:
    """consume a request body the way the http adapter would"""
    if body is None:
        return b""
    if hasattr(body, "read"):
        chunks = []
        while True:
            chunk = body.read(8192)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)
    if isinstance(body, str):
        return body.encode("utf-8")
    return body

def build_response(request, status_code, content: bytes, headers) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict(headers)
    response._content = content
    response.encoding = "utf-8"
    response.url = request.url
    response.request = request
    return response


class ScriptedAdapter(BaseAdapter):
    """
    serves canned responses per (method, path). each route holds a list that
    is consumed in order; the last entry repeats. exceptions are raised.
    """

    def __init__(self):
        super().__init__()
        self.routes = {}
        self.calls = []

    def add(self, method, path, *responses):
        self.routes.setdefault((method, path), []).extend(responses)
        return self

    def count(self, method, path) -> int:
        return sum(1 for call in self.calls if call[:2] == (method, path))

    def send(self, request, **kwargs):
        path = urlsplit(request.url).path
        body = drain(request.body)
        self.calls.append((request.method, path, body, dict(request.headers)))

        scripted = self.routes.get((request.method, path))
        if not scripted:
            raise AssertionError(f"unexpected request {request.method} {path}")
        item = scripted.pop(0) if len(scripted) > 1 else scripted[0]
        if isinstance(item, Exception):
            raise item

        status_code, payload = item
        if isinstance(payload, (dict, list)):
            return build_response(request, status_code, json.dumps(payload).encode(), {"Content-Type": "application/json"})
        return build_response(request, status_code, str(payload).encode(), {"Content-Type": "text/plain"})

    def close(self):
        pass


class AppAdapter(BaseAdapter):
    """forwards client requests to the fastapi app in-process"""

    def __init__(self, test_client: TestClient):
        super().__init__()
        self.test_client = test_client

    def send(self, request, **kwargs):
        parts = urlsplit(request.url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        response = self.test_client.request(
            request.method,
            path,
            content=drain(request.body),
            headers=dict(request.headers),
        )
        return build_response(request, response.status_code, response.content, response.headers)

    def close(self):
        pass


def make_config(**overrides) -> ClientConfig:
    values = dict(
        api_url=API_URL,
        token_path="",
        transfer_mode="remote",
        poll_interval=0,
        max_poll_failures=3,
        mock_tick=0,
        mock_settle=0,
        mock_process_tick=0,
        await_completion=None,
    )
    values.update(overrides)
    return ClientConfig(**values)

def make_api_client(adapter, store=None, **overrides) -> ApiClient:
    session = requests.Session()
    session.mount("http://", adapter)
    return ApiClient(make_config(**overrides), session=session, store=store if store is not None else InMemoryVideoStore())


@pytest.fixture(name="scripted")
def scripted_fixture():
    return ScriptedAdapter()

@pytest.fixture(name="api")
def api_fixture(scripted):
    api = make_api_client(scripted)
    yield api
    api.close()

@pytest.fixture(name="video_file")
def video_file_fixture(tmp_path):
    """a 10 MB sparse file named like a real upload"""
    path = tmp_path / "clip.mp4"
    with open(path, "wb") as f:
        f.truncate(10 * 1024 * 1024)
    return path
