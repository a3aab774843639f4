"""
Admin Router - Painel do administrador

Todas as rotas exigem admin (sem permissão: redireciona para /).
A folha de presença fica em patota.attendance.router.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..auth.dependencies import require_admin
from ..auth.session import SessionContext
from ..config import get_settings
from ..database import get_supabase
from ..events.models import EventCreate, EventSummary
from ..events.service import EventService
from ..finance.models import MonthlyDuesRequest, PendingPayment
from ..finance.payments import PaymentReviewService
from ..finance.service import FinanceService
from ..ledger.models import LedgerEntryCreate, LedgerPage
from ..ledger.service import LedgerService
from ..members.models import (
    Exemption,
    ExemptionCreate,
    Member,
    MemberActiveRequest,
    MemberCreate,
    MemberCreated,
    MemberList,
)
from ..members.service import MemberService

router = APIRouter(prefix="/admin", tags=["Admin"])


class AdminDashboard(BaseModel):
    """Página /admin"""
    proximos_eventos: List[EventSummary] = []
    pagamentos_pendentes: List[PendingPayment] = []


class ActionResult(BaseModel):
    success: bool = True
    message: str
    data: Optional[Any] = None


# =============================================
# Painel
# =============================================

@router.get("", response_model=AdminDashboard)
def dashboard(
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    """Próximos eventos + fila de pagamentos pendentes"""
    settings = get_settings()
    return {
        "proximos_eventos": EventService(supabase).upcoming_events(settings.ADMIN_UPCOMING_LIMIT),
        "pagamentos_pendentes": PaymentReviewService(supabase).list_pending(),
    }


@router.post("/eventos", response_model=EventSummary, status_code=201)
def create_event(
    data: EventCreate,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    """Cria evento (não há edição nem exclusão depois)"""
    return EventService(supabase).create_event(data, admin.member_id)


# =============================================
# Pagamentos
# =============================================

@router.post("/pagamentos/{payment_id}/confirmar", response_model=ActionResult)
def confirm_payment(
    payment_id: str,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    result = PaymentReviewService(supabase).confirm(payment_id, admin.member_id)
    return ActionResult(message="Pagamento confirmado", data=result)


@router.post("/pagamentos/{payment_id}/rejeitar", response_model=ActionResult)
def reject_payment(
    payment_id: str,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    result = PaymentReviewService(supabase).reject(payment_id, admin.member_id)
    return ActionResult(message="Pagamento rejeitado", data=result)


# =============================================
# Caixa
# =============================================

@router.get("/caixa", response_model=LedgerPage)
def ledger_page(
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    """Saldo, resumo mensal e últimos lançamentos"""
    return LedgerService(supabase).page(get_settings().LEDGER_PAGE_SIZE)


@router.post("/caixa", response_model=LedgerPage, status_code=201)
def add_ledger_entry(
    data: LedgerEntryCreate,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    service = LedgerService(supabase)
    service.add_entry(data, admin.member_id)
    return service.page(get_settings().LEDGER_PAGE_SIZE)


# =============================================
# Membros
# =============================================

@router.get("/membros", response_model=MemberList)
def list_members(
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    return {"membros": MemberService(supabase).list_members()}


@router.post("/membros", response_model=MemberCreated, status_code=201)
def add_member(
    data: MemberCreate,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    """Cadastra e envia o convite (link mágico)"""
    return MemberService(supabase).add_member(data)


@router.post("/membros/{member_id}/ativo", response_model=Member)
def set_member_active(
    member_id: str,
    data: MemberActiveRequest,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    return MemberService(supabase).set_active(member_id, data.ativo)


@router.post("/membros/{member_id}/isencao", response_model=Exemption, status_code=201)
def grant_exemption(
    member_id: str,
    data: ExemptionCreate,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    return MemberService(supabase).grant_exemption(member_id, data, admin.member_id)


@router.post("/mensalidades", response_model=ActionResult)
def generate_monthly_dues(
    data: MonthlyDuesRequest,
    admin: SessionContext = Depends(require_admin),
    supabase=Depends(get_supabase)
):
    """Gera as mensalidades do mês para os membros ativos"""
    result = FinanceService(supabase).generate_monthly_dues(data)
    return ActionResult(message=f"Mensalidades de {data.competencia} geradas", data=result)
