"""
Members Module - Cadastro de membros (admin)
"""
from .models import ExemptionReason, MemberCreate, ExemptionCreate
from .service import MemberService

__all__ = [
    "ExemptionReason",
    "MemberCreate",
    "ExemptionCreate",
    "MemberService",
]
