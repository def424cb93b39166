from .cash_flow import CashFlowEntrySerializer, CashFlowSummarySerializer

__all__ = ["CashFlowEntrySerializer", "CashFlowSummarySerializer"]
