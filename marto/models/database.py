import enum
from decimal import Decimal

from flask_sqlalchemy import SQLAlchemy
from datetime import datetime, timezone

db = SQLAlchemy()

# Column bounds: 32-bit integer keys, Numeric(10, 2) amounts.
MAX_ID = 2 ** 31 - 1
MAX_AMOUNT = Decimal("99999999.99")
CENTS = Decimal("0.01")
MAX_QUANTITY = 1000


def is_valid_id(value) -> bool:
    return isinstance(value, int) and 1 <= value <= MAX_ID


def _utcnow():
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Role(enum.Enum):
    CLIENT = "client"
    MERCHANT = "commercant"
    DELIVERER = "livreur"


class OrderStatus(enum.Enum):
    CREATED = "created"
    ASSIGNED = "assigned"
    DELIVERED = "delivered"


class DeliveryStatus(enum.Enum):
    ASSIGNED = "assigned"
    DELIVERED = "delivered"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(255))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(50))
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(Role, name="user_role", values_callable=_enum_values),
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=_utcnow)

    products = db.relationship("Product", backref="merchant", lazy="dynamic")

    def __repr__(self):
        return f"<User {self.email}>"

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role.value,
        }


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    image_url = db.Column(db.String(1024))
    created_at = db.Column(db.DateTime, default=_utcnow)

    def __repr__(self):
        return f"<Product {self.name}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "merchant_id": self.merchant_id,
            "name": self.name,
            "description": self.description,
            "price": str(self.price),
            "stock": self.stock,
            "image_url": self.image_url,
            "created_at": self.created_at.isoformat(),
        }


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    merchant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    total = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(
        db.Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        nullable=False,
        default=OrderStatus.CREATED,
    )
    created_at = db.Column(db.DateTime, default=_utcnow)

    items = db.relationship("OrderItem", backref="order", lazy="joined")
    delivery = db.relationship("Delivery", backref="order", uselist=False)

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "client_id": self.client_id,
            "merchant_id": self.merchant_id,
            "total": str(self.total),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }


class Delivery(db.Model):
    __tablename__ = "deliveries"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), unique=True, nullable=False)
    deliverer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    status = db.Column(
        db.Enum(DeliveryStatus, name="delivery_status", values_callable=_enum_values),
        nullable=False,
        default=DeliveryStatus.ASSIGNED,
    )
    assigned_at = db.Column(db.DateTime, default=_utcnow)
    delivered_at = db.Column(db.DateTime)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "deliverer_id": self.deliverer_id,
            "status": self.status.value,
            "assigned_at": self.assigned_at.isoformat(),
            "delivered_at": self.delivered_at.isoformat() if self.delivered_at else None,
        }
