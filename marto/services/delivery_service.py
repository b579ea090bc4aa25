import logging
from datetime import datetime, timezone

from marto.errors import ConflictError, NotFoundError
from marto.models.database import Delivery, DeliveryStatus, Order, OrderStatus, is_valid_id

logger = logging.getLogger(__name__)


class DeliveryService:
    """Assigns deliverers to orders and records completed deliveries.

    Every transition on a delivery is mirrored onto its order within the
    same transaction, so the two statuses never drift apart.
    """

    def __init__(self, session):
        self.session = session

    def assign(self, order_id: int, deliverer_id: int) -> Delivery:
        """Create or take over the delivery of an order."""
        try:
            order = self.session.get(Order, order_id) if is_valid_id(order_id) else None
            if not order:
                raise NotFoundError(f"Order {order_id} not found")

            now = datetime.now(timezone.utc)
            delivery = self.session.query(Delivery).filter_by(order_id=order_id).first()
            if delivery is None:
                delivery = Delivery(
                    order_id=order_id,
                    deliverer_id=deliverer_id,
                    status=DeliveryStatus.ASSIGNED,
                    assigned_at=now,
                )
                self.session.add(delivery)
            elif delivery.status is DeliveryStatus.DELIVERED:
                raise ConflictError(f"Order {order_id} has already been delivered")
            else:
                delivery.deliverer_id = deliverer_id
                delivery.status = DeliveryStatus.ASSIGNED
                delivery.assigned_at = now
                delivery.delivered_at = None

            order.status = OrderStatus.ASSIGNED
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Order %s assigned to deliverer %s", order_id, deliverer_id)
        return delivery

    def complete(self, delivery_id: int, deliverer_id: int) -> Delivery:
        """Mark a delivery owned by the deliverer as delivered."""
        try:
            delivery = None
            if is_valid_id(delivery_id):
                delivery = (
                    self.session.query(Delivery)
                    .filter_by(id=delivery_id, deliverer_id=deliverer_id)
                    .first()
                )
            if not delivery:
                raise NotFoundError("Delivery not found")

            delivery.status = DeliveryStatus.DELIVERED
            delivery.delivered_at = datetime.now(timezone.utc)
            delivery.order.status = OrderStatus.DELIVERED
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Delivery %s completed by deliverer %s", delivery_id, deliverer_id)
        return delivery

    def list_deliveries(self, deliverer_id: int) -> list:
        return (
            self.session.query(Delivery)
            .filter_by(deliverer_id=deliverer_id)
            .order_by(Delivery.assigned_at.desc(), Delivery.id.desc())
            .all()
        )
