from .provider import Provider
from .purchase import Purchase

__all__ = ["Provider", "Purchase"]
