from .cash_flow import CashFlowEntry

__all__ = ["CashFlowEntry"]
