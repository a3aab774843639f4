"""
Attendance Router - Folha de presença do evento (admin)
"""
from fastapi import APIRouter, Depends

from ..auth.dependencies import require_admin
from ..auth.session import SessionContext
from ..database import get_supabase
from .models import (
    FINE_NOTICE,
    FINE_TRIGGERING_STATUSES,
    AttendanceSheet,
    BatchMarkRequest,
    MarkRequest,
    MarkResult,
)
from .service import AttendanceService

router = APIRouter(prefix="/admin/evento", tags=["Presença"])


def get_attendance_service(supabase=Depends(get_supabase)) -> AttendanceService:
    return AttendanceService(supabase)


@router.get("/{event_id}", response_model=AttendanceSheet)
def attendance_sheet(
    event_id: str,
    admin: SessionContext = Depends(require_admin),
    service: AttendanceService = Depends(get_attendance_service)
):
    """Membros com RSVP, ordenados VOU > TALVEZ > NAO_VOU e por nome"""
    return service.load_sheet(event_id)


@router.post("/{event_id}/presenca", response_model=MarkResult)
def mark_presence(
    event_id: str,
    data: MarkRequest,
    admin: SessionContext = Depends(require_admin),
    service: AttendanceService = Depends(get_attendance_service)
):
    """Marcação individual, gravada na hora"""
    service.mark(event_id, data.member_id, data.status, admin.member_id)
    return {
        "member_id": data.member_id,
        "status": data.status,
        "aviso": FINE_NOTICE if data.status in FINE_TRIGGERING_STATUSES else None,
    }


@router.post("/{event_id}/presencas", response_model=AttendanceSheet)
def save_all_presences(
    event_id: str,
    data: BatchMarkRequest,
    admin: SessionContext = Depends(require_admin),
    service: AttendanceService = Depends(get_attendance_service)
):
    """
    Salvar tudo

    Linhas sem status são ignoradas. Em caso de falha, as marcações
    anteriores permanecem (resposta 400 com a lista 'aplicados').
    """
    return service.save_all(event_id, data.presencas, admin.member_id)
