"""
Events Router - Início, lista de eventos e confirmação de presença
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..auth.dependencies import require_member
from ..auth.session import SessionContext
from ..database import get_supabase
from ..finance.models import PendingSummary
from ..finance.service import FinanceService
from .models import EventDetail, EventFilter, EventList, EventSummary, GuestsRequest, RSVPRequest
from .service import EventService

router = APIRouter(tags=["Eventos"])


def get_event_service(supabase=Depends(get_supabase)) -> EventService:
    return EventService(supabase)


class HomeView(BaseModel):
    """Página inicial: próximo evento + pendências"""
    proximo_evento: Optional[EventSummary] = None
    pendencias: PendingSummary


@router.get("/", response_model=HomeView)
def home(
    member: SessionContext = Depends(require_member),
    supabase=Depends(get_supabase)
):
    events = EventService(supabase)
    finance = FinanceService(supabase)
    return {
        "proximo_evento": events.next_event(member.member_id),
        "pendencias": finance.pending_summary(member.member_id),
    }


@router.get("/eventos", response_model=EventList)
def list_events(
    filtro: EventFilter = Query(EventFilter.proximos, description="proximos ou passados"),
    member: SessionContext = Depends(require_member),
    service: EventService = Depends(get_event_service)
):
    """Eventos com total de confirmados (VOU) e a minha confirmação"""
    return {"filtro": filtro, "eventos": service.list_events(filtro, member.member_id)}


@router.get("/eventos/{event_id}", response_model=EventDetail)
def event_detail(
    event_id: str,
    member: SessionContext = Depends(require_member),
    service: EventService = Depends(get_event_service)
):
    return service.get_event_detail(event_id, member.member_id)


@router.post("/eventos/{event_id}/rsvp", response_model=EventDetail)
def submit_rsvp(
    event_id: str,
    data: RSVPRequest,
    member: SessionContext = Depends(require_member),
    service: EventService = Depends(get_event_service)
):
    """
    Confirma (VOU/NAO_VOU/TALVEZ)

    Responder de novo sobrescreve a resposta anterior.
    """
    service.submit_rsvp(event_id, member.member_id, data.status)
    return service.get_event_detail(event_id, member.member_id)


@router.post("/eventos/{event_id}/convidados", response_model=EventDetail)
def add_guests(
    event_id: str,
    data: GuestsRequest,
    member: SessionContext = Depends(require_member),
    service: EventService = Depends(get_event_service)
):
    """Informa quantos convidados o membro leva"""
    service.add_guests(event_id, member.member_id, data.quantidade)
    return service.get_event_detail(event_id, member.member_id)
