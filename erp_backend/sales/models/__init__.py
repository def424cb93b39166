from .client import Client
from .sale import Sale

__all__ = ["Client", "Sale"]
