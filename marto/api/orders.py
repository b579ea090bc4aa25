from flask import Blueprint, jsonify, g
from marshmallow import EXCLUDE, Schema, fields, validate

from marto.api.validation import load_json
from marto.middleware.auth import current_role, require_auth, require_role
from marto.models.database import MAX_ID, MAX_QUANTITY, Role, db
from marto.services.order_service import OrderService

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


class OrderItemSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    product_id = fields.Integer(required=True, validate=validate.Range(min=1, max=MAX_ID))
    quantity = fields.Integer(required=True, validate=validate.Range(min=1, max=MAX_QUANTITY))


class CreateOrderSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    merchant_id = fields.Integer(required=True, validate=validate.Range(min=1, max=MAX_ID))
    items = fields.List(fields.Nested(OrderItemSchema), required=True, validate=validate.Length(min=1))


@orders_bp.route("", methods=["POST"])
@require_role(Role.CLIENT)
def create_order():
    """Create a new order."""
    data = load_json(CreateOrderSchema())

    order = OrderService(db.session).create_order(
        client_id=g.current_user["id"],
        merchant_id=data["merchant_id"],
        items=data["items"],
    )
    return jsonify(order.to_dict()), 201


@orders_bp.route("", methods=["GET"])
@require_auth
def list_orders():
    """List orders visible to the authenticated user."""
    orders = OrderService(db.session).list_orders(g.current_user["id"], current_role())
    return jsonify([o.to_dict() for o in orders])


@orders_bp.route("/<int:order_id>", methods=["GET"])
@require_auth
def get_order(order_id):
    """Get a specific order with its items."""
    order = OrderService(db.session).get_order(order_id, g.current_user["id"], current_role())
    return jsonify(order.to_dict(include_items=True))
