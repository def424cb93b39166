# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.
"""


class AccountingServiceError(ValueError):
    """Base exception for all accounting service failures."""


class CashFlowError(AccountingServiceError):
    """Raised when a cash-flow entry cannot be recorded."""
