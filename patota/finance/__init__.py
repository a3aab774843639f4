"""
Finance Module

Mensalidades, multas, comprovantes e revisão de pagamentos
"""
from .router import router as finance_router
from .models import DueStatus, FineType, PaymentStatus
from .service import FinanceService, compute_total_pending
from .payments import PaymentReviewService

__all__ = [
    "finance_router",
    "DueStatus",
    "FineType",
    "PaymentStatus",
    "FinanceService",
    "PaymentReviewService",
    "compute_total_pending",
]
