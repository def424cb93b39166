from .cash_flow import CashFlowViewSet

__all__ = ["CashFlowViewSet"]
