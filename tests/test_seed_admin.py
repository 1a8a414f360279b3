import importlib.util
from pathlib import Path

import pytest

from core.config import settings
from database import SessionLocal
from models.user import User

_SCRIPT = Path(__file__).resolve().parent.parent / "bin" / "seed_admin.py"


@pytest.fixture
def seed_admin():
    spec = importlib.util.spec_from_file_location("seed_admin", _SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_seed_creates_admin_once(seed_admin, monkeypatch, client):
    monkeypatch.setattr(settings, "first_admin_username", "root")
    monkeypatch.setattr(settings, "first_admin_password", "root-pass")

    assert seed_admin.seed() is True
    assert seed_admin.seed() is False

    db = SessionLocal()
    try:
        admins = db.query(User).filter(User.username == "root").all()
    finally:
        db.close()
    assert [u.role for u in admins] == ["admin"]

    res = client.post("/auth/login", json={"username": "root", "password": "root-pass"})
    assert res.status_code == 200
    assert res.json()["data"]["user"]["role"] == "admin"


def test_seed_without_credentials_is_noop(seed_admin, monkeypatch):
    monkeypatch.setattr(settings, "first_admin_username", "")
    assert seed_admin.seed() is False
