from flask import Blueprint, jsonify, g

from marto.middleware.auth import require_role
from marto.models.database import Role, db
from marto.services.delivery_service import DeliveryService

deliveries_bp = Blueprint("deliveries", __name__, url_prefix="/deliveries")


@deliveries_bp.route("/<int:order_id>/assign", methods=["POST"])
@require_role(Role.DELIVERER)
def assign_delivery(order_id):
    """Take over the delivery of an order."""
    delivery = DeliveryService(db.session).assign(order_id, g.current_user["id"])
    return jsonify(delivery.to_dict())


@deliveries_bp.route("/<int:delivery_id>/complete", methods=["POST"])
@require_role(Role.DELIVERER)
def complete_delivery(delivery_id):
    """Mark one of the caller's deliveries as delivered."""
    delivery = DeliveryService(db.session).complete(delivery_id, g.current_user["id"])
    return jsonify(delivery.to_dict())


@deliveries_bp.route("", methods=["GET"])
@require_role(Role.DELIVERER)
def list_deliveries():
    deliveries = DeliveryService(db.session).list_deliveries(g.current_user["id"])
    return jsonify([d.to_dict() for d in deliveries])
