from flask import Blueprint, jsonify, g
from marshmallow import EXCLUDE, Schema, fields, validate

from marto.api.validation import load_json
from marto.errors import AuthError, NotFoundError
from marto.middleware.auth import require_auth
from marto.models.database import Role, db
from marto.services.auth_service import AuthService

auth_bp = Blueprint("auth", __name__)


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(allow_none=True, validate=validate.Length(max=255))
    email = fields.Email(required=True)
    phone = fields.String(allow_none=True, validate=validate.Length(max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    role = fields.String(required=True, validate=validate.OneOf([r.value for r in Role]))


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True)


@auth_bp.route("/auth/register", methods=["POST"])
def register():
    """Register a new user account and sign them in."""
    data = load_json(RegisterSchema())

    token, user = AuthService(db.session).register(
        full_name=data.get("full_name"),
        email=data["email"],
        phone=data.get("phone"),
        password=data["password"],
        role=data["role"],
    )
    return jsonify({"token": token, "user": user}), 200


@auth_bp.route("/auth/login", methods=["POST"])
def login():
    """Authenticate and receive a JWT token."""
    data = load_json(LoginSchema())

    try:
        token, user = AuthService(db.session).login(data["email"], data["password"])
    except (NotFoundError, AuthError):
        return jsonify({"error": "Invalid credentials"}), 400

    return jsonify({"token": token, "user": user}), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """Return the claims of the calling user."""
    return jsonify({"user": g.current_user})
