from datetime import datetime, timedelta, timezone

import jwt
import pytest

from marto.errors import AuthError, ConflictError, NotFoundError, ValidationError
from marto.models.database import Role, User, db
from marto.services.auth_service import AuthService


def test_health_check(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True, "name": "Marto API"}


@pytest.mark.parametrize("role", ["client", "commercant", "livreur"])
def test_register_then_login_returns_matching_role(client, app, role):
    resp = client.post("/auth/register", json={
        "full_name": "Awa Diop",
        "email": f"awa-{role}@example.com",
        "phone": "0611223344",
        "password": "s3cret-pass",
        "role": role,
    })
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["user"]["email"] == f"awa-{role}@example.com"
    assert body["user"]["full_name"] == "Awa Diop"
    assert body["user"]["role"] == role
    assert "password_hash" not in body["user"]

    resp = client.post("/auth/login", json={
        "email": f"awa-{role}@example.com",
        "password": "s3cret-pass",
    })
    assert resp.status_code == 200
    body = resp.get_json()
    claims = jwt.decode(body["token"], app.config["JWT_SECRET"], algorithms=["HS256"])
    assert claims["role"] == role
    assert body["user"] == {"id": claims["id"], "email": f"awa-{role}@example.com", "role": role}


def test_registration_token_carries_minimal_claims(register, app):
    body = register("client", email="min@example.com")
    claims = jwt.decode(body["token"], app.config["JWT_SECRET"], algorithms=["HS256"])
    assert set(claims) == {"id", "email", "role", "iat", "exp"}
    assert claims["id"] == body["user"]["id"]


def test_password_is_stored_hashed(register):
    register("client", email="hash@example.com", password="plain-text")
    user = db.session.query(User).filter_by(email="hash@example.com").one()
    assert user.password_hash != "plain-text"
    assert AuthService.verify_password("plain-text", user.password_hash)


@pytest.mark.parametrize("missing", ["email", "password", "role"])
def test_register_requires_fields(client, missing):
    payload = {"email": "x@example.com", "password": "secret123", "role": "client"}
    del payload[missing]
    resp = client.post("/auth/register", json=payload)
    assert resp.status_code == 400
    assert missing in resp.get_json()["details"]


def test_register_rejects_unknown_role(client):
    resp = client.post("/auth/register", json={
        "email": "x@example.com", "password": "secret123", "role": "admin",
    })
    assert resp.status_code == 400
    assert db.session.query(User).count() == 0


def test_duplicate_email_conflicts_and_creates_no_row(client, register):
    register("client", email="dup@example.com")
    resp = client.post("/auth/register", json={
        "email": "dup@example.com", "password": "other-pass", "role": "livreur",
    })
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "Email already registered"
    assert db.session.query(User).filter_by(email="dup@example.com").count() == 1


def test_login_unknown_email(client):
    resp = client.post("/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid credentials"}


def test_login_wrong_password(client, register):
    register("client", email="c@example.com", password="right-one")
    resp = client.post("/auth/login", json={"email": "c@example.com", "password": "wrong-one"})
    assert resp.status_code == 400


def test_me_returns_claims(client, customer):
    resp = client.get("/me", headers=customer["headers"])
    assert resp.status_code == 200
    assert resp.get_json()["user"] == {
        "id": customer["user"]["id"],
        "email": customer["user"]["email"],
        "role": "client",
    }


def test_me_requires_token(client):
    resp = client.get("/me")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Authentication required"}


@pytest.mark.parametrize("header", [
    "Bearer not-a-jwt",
    "Token abc",
    "Bearer ",
])
def test_me_rejects_malformed_headers(client, header):
    resp = client.get("/me", headers={"Authorization": header})
    assert resp.status_code == 401


def test_me_rejects_bad_signature(client, customer):
    forged = jwt.encode({"id": 1, "email": "a@b.c", "role": "client"}, "wrong-secret", algorithm="HS256")
    resp = client.get("/me", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


def test_me_rejects_expired_token(client, app):
    expired = jwt.encode({
        "id": 1, "email": "a@b.c", "role": "client",
        "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
    }, app.config["JWT_SECRET"], algorithm="HS256")
    resp = client.get("/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Token expired"


class TestAuthService:

    def test_register_and_login(self, app):
        service = AuthService(db.session)
        token, user = service.register("Jean", "jean@example.com", None, "pw", "livreur")
        assert user["role"] == "livreur"
        assert AuthService.authenticate(token) == {
            "id": user["id"], "email": "jean@example.com", "role": "livreur",
        }

        token, payload = service.login("jean@example.com", "pw")
        assert payload == {"id": user["id"], "email": "jean@example.com", "role": "livreur"}

    def test_register_accepts_role_enum(self, app):
        _, user = AuthService(db.session).register(None, "m@example.com", None, "pw", Role.MERCHANT)
        assert user["role"] == "commercant"

    def test_register_missing_password(self, app):
        with pytest.raises(ValidationError):
            AuthService(db.session).register("Jean", "jean@example.com", None, "", "client")

    def test_register_duplicate(self, app):
        service = AuthService(db.session)
        service.register(None, "dup@example.com", None, "pw", "client")
        with pytest.raises(ConflictError):
            service.register(None, "dup@example.com", None, "pw", "client")
        assert db.session.query(User).count() == 1

    def test_login_errors(self, app):
        service = AuthService(db.session)
        service.register(None, "a@example.com", None, "pw", "client")
        with pytest.raises(NotFoundError):
            service.login("b@example.com", "pw")
        with pytest.raises(AuthError):
            service.login("a@example.com", "nope")

    def test_authenticate_rejects_missing_token(self, app):
        with pytest.raises(AuthError):
            AuthService.authenticate("")

    def test_authenticate_rejects_unknown_role_claim(self, app):
        token = jwt.encode({"id": 1, "email": "a@b.c", "role": "admin"},
                           app.config["JWT_SECRET"], algorithm="HS256")
        with pytest.raises(AuthError):
            AuthService.authenticate(token)
