"""
Attendance Models

Presença real no evento (marcada pelo admin), distinta do RSVP
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from ..events.models import EventType, RSVPStatus


class PresenceStatus(str, Enum):
    """Resultado de presença"""
    PRESENTE = "PRESENTE"
    ATRASO = "ATRASO"
    AUSENTE = "AUSENTE"
    JUSTIFICADO = "JUSTIFICADO"


# Status que podem gerar multa no banco
FINE_TRIGGERING_STATUSES = {PresenceStatus.ATRASO, PresenceStatus.AUSENTE}

FINE_NOTICE = "Ao marcar ATRASO ou AUSENTE, o banco pode gerar multa automaticamente (conforme regras)."


class AttendanceEvent(BaseModel):
    id: str
    tipo: EventType
    data_hora: datetime
    local: str
    descricao: Optional[str] = None


class AttendanceRow(BaseModel):
    member_id: str
    nome: str
    telefone: Optional[str] = None
    rsvp_status: Optional[RSVPStatus] = None
    convidados: int = 0
    presenca_status: Optional[PresenceStatus] = None


class AttendanceSummary(BaseModel):
    confirmados: int = 0
    convidados: int = 0
    presentes: int = 0
    atrasos: int = 0
    ausentes: int = 0
    justificados: int = 0


class AttendanceSheet(BaseModel):
    """Página /admin/evento/{id}"""
    evento: AttendanceEvent
    linhas: List[AttendanceRow] = []
    resumo: AttendanceSummary
    aviso: str = FINE_NOTICE


class MarkRequest(BaseModel):
    member_id: str
    status: PresenceStatus


class BatchItem(BaseModel):
    """Linha local; sem status = não selecionada (é pulada)"""
    member_id: str
    status: Optional[PresenceStatus] = None


class BatchMarkRequest(BaseModel):
    presencas: List[BatchItem]


class MarkResult(BaseModel):
    success: bool = True
    member_id: str
    status: PresenceStatus
    aviso: Optional[str] = None
