import logging
from decimal import Decimal

from marto.errors import ForbiddenError, NotFoundError, ValidationError
from marto.models.database import (
    MAX_AMOUNT, MAX_QUANTITY, Delivery, Order, OrderItem, OrderStatus, Product, Role, User,
    is_valid_id,
)

logger = logging.getLogger(__name__)


class OrderService:
    """Handles order business logic."""

    def __init__(self, session):
        self.session = session

    def create_order(self, client_id: int, merchant_id: int, items: list) -> Order:
        """Create an order and its line items in a single transaction.

        Each product is read once; that price is used both for the total and
        as the unit price snapshot stored on the line item.
        """
        if not items:
            raise ValidationError("Order must contain at least one item")

        try:
            merchant = self.session.get(User, merchant_id) if is_valid_id(merchant_id) else None
            if not merchant or merchant.role is not Role.MERCHANT:
                raise NotFoundError(f"Merchant {merchant_id} not found")

            total = Decimal("0")
            order_items = []

            for item in items:
                product_id, quantity = item["product_id"], item["quantity"]
                if not 1 <= quantity <= MAX_QUANTITY:
                    raise ValidationError(f"Invalid quantity for product {product_id}")

                product = self.session.get(Product, product_id) if is_valid_id(product_id) else None
                if not product:
                    raise NotFoundError(f"Product {product_id} not found")

                unit_price = product.price
                total += unit_price * quantity
                if total > MAX_AMOUNT:
                    raise ValidationError(f"Order total cannot exceed {MAX_AMOUNT}")

                order_items.append(OrderItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=unit_price,
                ))

            order = Order(
                client_id=client_id,
                merchant_id=merchant_id,
                total=total,
                status=OrderStatus.CREATED,
                items=order_items,
            )
            self.session.add(order)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Client %s created order %s (total %s)", client_id, order.id, order.total)
        return order

    def _visible_orders(self, user_id: int, role: Role):
        query = self.session.query(Order)
        if role is Role.CLIENT:
            return query.filter(Order.client_id == user_id)
        elif role is Role.MERCHANT:
            return query.filter(Order.merchant_id == user_id)
        elif role is Role.DELIVERER:
            return query.join(Delivery, Delivery.order_id == Order.id).filter(
                Delivery.deliverer_id == user_id
            )
        raise ForbiddenError("Unknown role")

    def list_orders(self, user_id: int, role: Role) -> list:
        """Orders the caller placed, received or is delivering, newest first."""
        return (
            self._visible_orders(user_id, role)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def get_order(self, order_id: int, user_id: int, role: Role) -> Order:
        """Get a specific order, ensuring it is visible to the caller."""
        order = None
        if is_valid_id(order_id):
            order = self._visible_orders(user_id, role).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order not found")
        return order
