from .product import Product
from .location import Location
from .stock_level import StockLevel
from .stock_movement import StockMovement

__all__ = ["Product", "Location", "StockLevel", "StockMovement"]
