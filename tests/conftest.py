import os
import tempfile
from pathlib import Path
from urllib.parse import urlsplit

# Settings are read at import time, so the environment must be in place first
_TMP_DIR = Path(tempfile.mkdtemp(prefix="inventory-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{(_TMP_DIR / 'inventory.db').as_posix()}"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-bytes-for-hs256"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"

import pytest  # noqa: E402
import requests  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from requests.adapters import BaseAdapter  # noqa: E402
from requests.structures import CaseInsensitiveDict  # noqa: E402

from core.security import hash_password  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.user import User  # noqa: E402
import models.product  # noqa: E402, F401

ADMIN_PASSWORD = "admin-pass"
USER_PASSWORD = "user-pass"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create_user(username: str, password: str, role: str = "user", email=None) -> int:
    db = SessionLocal()
    try:
        user = User(username=username, password_hash=hash_password(password), email=email, role=role)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def login_headers(client: TestClient, username: str, password: str) -> dict:
    res = client.post("/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['data']['token']}"}


@pytest.fixture
def admin_headers(client):
    create_user("admin", ADMIN_PASSWORD, role="admin")
    return login_headers(client, "admin", ADMIN_PASSWORD)


@pytest.fixture
def user_headers(client):
    create_user("alice", USER_PASSWORD)
    return login_headers(client, "alice", USER_PASSWORD)


# ---------------------------------------------------------------------------
# requests → TestClient bridge, so the real ApiClient can talk to the app
# ---------------------------------------------------------------------------


class ASGIAdapter(BaseAdapter):
    """Transport adapter that hands requests' PreparedRequests to a TestClient."""

    def __init__(self, test_client: TestClient):
        super().__init__()
        self.test_client = test_client
        self.sent = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.sent.append((request.method, request.path_url, timeout))
        parts = urlsplit(request.url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        res = self.test_client.request(
            request.method,
            path,
            content=request.body,
            headers=dict(request.headers),
        )

        response = requests.Response()
        response.status_code = res.status_code
        response._content = res.content
        response.headers = CaseInsensitiveDict(res.headers)
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def asgi_adapter(client):
    return ASGIAdapter(client)


@pytest.fixture
def http(asgi_adapter):
    session = requests.Session()
    session.mount("http://testserver", asgi_adapter)
    return session
