from flask import request

from marto.errors import ValidationError


def load_json(schema) -> dict:
    """Validate the JSON request body against a marshmallow schema."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}

    errors = schema.validate(payload)
    if errors:
        raise ValidationError("Invalid request body", details=errors)

    return schema.load(payload)
