"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from nubestock.models.product import Product
from nubestock.models.material import Material
from nubestock.models.client import Client
from nubestock.models.alert import Alert
from nubestock.models.stock_movement import StockMovement

# Export all models
__all__ = [
    "Product",
    "Material",
    "Client",
    "Alert",
    "StockMovement",
]
