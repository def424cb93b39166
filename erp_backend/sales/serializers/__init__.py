from .client import ClientSerializer
from .sale import SaleCreateSerializer, SaleSerializer

__all__ = ["ClientSerializer", "SaleCreateSerializer", "SaleSerializer"]
