"""
Event Models

Eventos (jogos/internos) e confirmações de presença (RSVP)
"""
from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================
# Enums
# =============================================

class EventType(str, Enum):
    """Tipo de evento"""
    JOGO = "JOGO"         # jogo contra outro time
    INTERNO = "INTERNO"   # pelada interna


class RSVPStatus(str, Enum):
    """Intenção de presença"""
    VOU = "VOU"
    NAO_VOU = "NAO_VOU"
    TALVEZ = "TALVEZ"


class EventFilter(str, Enum):
    """Filtro temporal da lista de eventos"""
    proximos = "proximos"
    passados = "passados"


# =============================================
# Request Models
# =============================================

class EventCreate(BaseModel):
    """Criação de evento (admin)"""
    tipo: EventType
    data: date
    hora: time
    local: str = Field(..., min_length=1, max_length=200)
    descricao: Optional[str] = None

    @field_validator("local")
    @classmethod
    def strip_local(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Informe o local")
        return v

    @field_validator("descricao")
    @classmethod
    def blank_descricao(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class RSVPRequest(BaseModel):
    status: RSVPStatus


class GuestsRequest(BaseModel):
    """Quantidade de convidados levados ao evento"""
    quantidade: int = Field(..., ge=0)


# =============================================
# Response Models
# =============================================

class EventSummary(BaseModel):
    """Evento na lista, com confirmações"""
    id: str
    tipo: EventType
    data_hora: datetime
    local: str
    descricao: Optional[str] = None
    confirmados: int = 0
    minha_confirmacao: Optional[RSVPStatus] = None


class RSVPEntry(BaseModel):
    member_id: str
    nome: str
    status: RSVPStatus
    convidados: int = 0


class EventDetail(EventSummary):
    """Página /eventos/{id}"""
    meus_convidados: int = 0
    total_convidados: int = 0
    rsvps: List[RSVPEntry] = []


class EventList(BaseModel):
    filtro: EventFilter
    eventos: List[EventSummary]
