from marto.api.health import health_bp
from marto.api.auth import auth_bp
from marto.api.products import products_bp
from marto.api.orders import orders_bp
from marto.api.deliveries import deliveries_bp

__all__ = ["health_bp", "auth_bp", "products_bp", "orders_bp", "deliveries_bp"]
