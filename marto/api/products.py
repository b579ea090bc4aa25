from decimal import ROUND_HALF_UP

from flask import Blueprint, jsonify, g
from marshmallow import EXCLUDE, Schema, fields, validate

from marto.api.validation import load_json
from marto.middleware.auth import require_role
from marto.models.database import MAX_AMOUNT, MAX_ID, Role, db
from marto.services.catalog_service import CatalogService

products_bp = Blueprint("products", __name__, url_prefix="/products")


class CreateProductSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(allow_none=True)
    price = fields.Decimal(
        required=True,
        places=2,
        rounding=ROUND_HALF_UP,
        validate=validate.Range(min=0, min_inclusive=False, max=MAX_AMOUNT),
    )
    stock = fields.Integer(load_default=0, validate=validate.Range(min=0, max=MAX_ID))
    image_url = fields.String(allow_none=True, validate=validate.Length(max=1024))


@products_bp.route("", methods=["POST"])
@require_role(Role.MERCHANT)
def create_product():
    """Create a product owned by the calling merchant."""
    data = load_json(CreateProductSchema())

    product = CatalogService(db.session).create_product(
        merchant_id=g.current_user["id"],
        name=data["name"],
        description=data.get("description"),
        price=data["price"],
        stock=data.get("stock"),
        image_url=data.get("image_url"),
    )
    return jsonify(product.to_dict()), 201


@products_bp.route("", methods=["GET"])
def list_products():
    """List all products, newest first."""
    products = CatalogService(db.session).list_products()
    return jsonify([p.to_dict() for p in products])
