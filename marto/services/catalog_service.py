import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from marto.errors import ValidationError
from marto.models.database import CENTS, MAX_AMOUNT, MAX_ID, Product

logger = logging.getLogger(__name__)


class CatalogService:
    """Creates and lists merchant products."""

    def __init__(self, session):
        self.session = session

    def create_product(self, merchant_id: int, name: str, description: str = None,
                       price=None, stock: int = None, image_url: str = None) -> Product:
        """Create a product owned by the given merchant."""
        if not name:
            raise ValidationError("Product name is required")

        try:
            price = Decimal(str(price))
        except (InvalidOperation, ValueError):
            raise ValidationError("Invalid price")
        if not price.is_finite():
            raise ValidationError("Invalid price")

        if price > MAX_AMOUNT:
            raise ValidationError(f"Price cannot exceed {MAX_AMOUNT}")

        # Stored as Numeric(10, 2): check the value that will actually be kept.
        price = price.quantize(CENTS, rounding=ROUND_HALF_UP)
        if price <= 0 or price > MAX_AMOUNT:
            raise ValidationError(f"Price must be between {CENTS} and {MAX_AMOUNT}")

        if stock is None:
            stock = 0
        if stock < 0:
            raise ValidationError("Stock cannot be negative")
        if stock > MAX_ID:
            raise ValidationError("Stock is too large")

        product = Product(
            merchant_id=merchant_id,
            name=name,
            description=description,
            price=price,
            stock=stock,
            image_url=image_url,
        )
        self.session.add(product)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info("Merchant %s created product %s", merchant_id, product.id)
        return product

    def list_products(self) -> list:
        """All products, newest first."""
        return (
            self.session.query(Product)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )
