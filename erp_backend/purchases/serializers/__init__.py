from .purchase import ProviderSerializer, PurchaseCreateSerializer, PurchaseSerializer

__all__ = ["ProviderSerializer", "PurchaseCreateSerializer", "PurchaseSerializer"]
