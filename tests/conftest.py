import pytest

from marto.app import create_app
from marto.config.settings import TestingConfig
from marto.models.database import db


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user over HTTP and return its token, user and auth headers."""
    counter = {"n": 0}

    def _register(role, email=None, password="secret123", full_name="Test User", phone="0600000000"):
        counter["n"] += 1
        email = email or f"{role}{counter['n']}@example.com"
        resp = client.post("/auth/register", json={
            "full_name": full_name,
            "email": email,
            "phone": phone,
            "password": password,
            "role": role,
        })
        assert resp.status_code == 200, resp.get_json()
        body = resp.get_json()
        body["headers"] = {"Authorization": f"Bearer {body['token']}"}
        return body

    return _register


@pytest.fixture
def merchant(register):
    return register("commercant")


@pytest.fixture
def customer(register):
    return register("client")


@pytest.fixture
def deliverer(register):
    return register("livreur")


@pytest.fixture
def product(client, merchant):
    resp = client.post("/products", headers=merchant["headers"], json={
        "name": "Panier de légumes",
        "description": "Légumes de saison",
        "price": 10,
        "stock": 5,
    })
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


class BrokenCommitSession:
    """Delegates to a real session but fails every commit."""

    def __init__(self, session):
        self._session = session

    def commit(self):
        raise RuntimeError("database went away")

    def __getattr__(self, name):
        return getattr(self._session, name)


@pytest.fixture
def broken_session(app):
    return BrokenCommitSession(db.session)
