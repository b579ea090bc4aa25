from flask import Blueprint, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/", methods=["GET"])
def health():
    """Liveness check."""
    return jsonify({"ok": True, "name": "Marto API"})
