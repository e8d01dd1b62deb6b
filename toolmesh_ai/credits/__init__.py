"""Credit metering: the ledger contract and an in-memory implementation."""

from .errors import InsufficientCreditsError
from .ledger import CreditLedger, CreditTransaction, InMemoryCreditLedger, TransactionStatus

__all__ = [
    "CreditLedger",
    "CreditTransaction",
    "InMemoryCreditLedger",
    "InsufficientCreditsError",
    "TransactionStatus",
]
