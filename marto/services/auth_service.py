import logging

import bcrypt
import jwt
from datetime import datetime, timedelta, timezone
from flask import current_app
from sqlalchemy.exc import IntegrityError

from marto.errors import AuthError, ConflictError, NotFoundError, ValidationError
from marto.models.database import Role, User

logger = logging.getLogger(__name__)


class AuthService:
    """Handles registration, login and token verification."""

    def __init__(self, session):
        self.session = session

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt(rounds=current_app.config["BCRYPT_ROUNDS"])
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        """Verify a password against its hash."""
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))

    @staticmethod
    def generate_token(user: User) -> str:
        """Generate a JWT carrying only the caller's id, email and role."""
        now = datetime.now(timezone.utc)
        payload = {
            "id": user.id,
            "email": user.email,
            "role": user.role.value,
            "exp": now + timedelta(minutes=current_app.config["JWT_EXPIRY_MINUTES"]),
            "iat": now,
        }
        return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm="HS256")

    @staticmethod
    def decode_token(token: str) -> dict:
        """Decode and validate a JWT token."""
        return jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=["HS256"])

    @staticmethod
    def authenticate(token: str) -> dict:
        """Return the claims of a valid token, or raise AuthError."""
        if not token:
            raise AuthError("Authentication required")

        try:
            payload = AuthService.decode_token(token)
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid or expired token")

        try:
            role = Role(payload["role"])
            claims = {"id": int(payload["id"]), "email": payload["email"], "role": role.value}
        except (KeyError, TypeError, ValueError):
            raise AuthError("Invalid or expired token")
        return claims

    @staticmethod
    def minimal_payload(user: User) -> dict:
        return {"id": user.id, "email": user.email, "role": user.role.value}

    def register(self, full_name, email, phone, password, role):
        """Register a new user and return (token, public user fields)."""
        if not email or not password or not role:
            raise ValidationError("email, password and role are required")

        try:
            role = Role(role)
        except ValueError:
            raise ValidationError(
                "Invalid role",
                details={"role": [f"Must be one of: {', '.join(r.value for r in Role)}."]},
            )

        if self.session.query(User).filter_by(email=email).first():
            raise ConflictError("Email already registered")

        user = User(
            full_name=full_name,
            email=email,
            phone=phone,
            password_hash=self.hash_password(password),
            role=role,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError("Email already registered")

        logger.info("Registered user %s with role %s", user.id, role.value)
        return self.generate_token(user), user.to_public_dict()

    def login(self, email: str, password: str):
        """Authenticate credentials and return (token, minimal user payload)."""
        if not email or not password:
            raise ValidationError("email and password are required")

        user = self.session.query(User).filter_by(email=email).first()
        if not user:
            raise NotFoundError("User not found")
        if not self.verify_password(password, user.password_hash):
            logger.warning("Failed login for user %s", user.id)
            raise AuthError("Invalid credentials")

        return self.generate_token(user), self.minimal_payload(user)
