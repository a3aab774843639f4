"""
Ledger Module - Caixa da patota
"""
from .models import LedgerType, LedgerCategory, CATEGORIES_BY_TYPE, LedgerEntryCreate
from .service import LedgerService

__all__ = [
    "LedgerType",
    "LedgerCategory",
    "CATEGORIES_BY_TYPE",
    "LedgerEntryCreate",
    "LedgerService",
]
