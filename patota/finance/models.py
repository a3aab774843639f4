"""
Finance Models

Mensalidades, multas e pagamentos
"""
import re
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

COMPETENCIA_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_competencia(value: str) -> str:
    """Competência no formato YYYY-MM"""
    value = (value or "").strip()
    if not COMPETENCIA_RE.match(value):
        raise ValueError("Competência deve estar no formato YYYY-MM")
    return value


# =============================================
# Enums
# =============================================

class DueStatus(str, Enum):
    """Status da mensalidade"""
    PENDENTE = "PENDENTE"
    PAGO = "PAGO"
    ISENTO = "ISENTO"


class FineType(str, Enum):
    """Tipo de multa"""
    ATRASO = "ATRASO"                       # chegou atrasado
    FALTA_CONFIRMADA = "FALTA_CONFIRMADA"   # confirmou e faltou
    CONVIDADO = "CONVIDADO"                 # por convidado levado


class PaymentStatus(str, Enum):
    """Status do pagamento (CONFIRMADO e REJEITADO são terminais)"""
    PENDENTE = "PENDENTE"
    CONFIRMADO = "CONFIRMADO"
    REJEITADO = "REJEITADO"


# =============================================
# Response Models
# =============================================

class Due(BaseModel):
    id: str
    competencia: str
    vencimento: date
    valor: float
    status: DueStatus


class FineEvent(BaseModel):
    tipo: str
    data_hora: datetime


class Fine(BaseModel):
    id: str
    tipo: FineType
    valor: float
    observacao: Optional[str] = None
    criado_em: datetime
    event_id: Optional[str] = None
    evento: Optional[FineEvent] = None


class Payment(BaseModel):
    id: str
    valor: float
    status: PaymentStatus
    comprovante_url: Optional[str] = None
    criado_em: datetime
    due_id: Optional[str] = None
    fine_id: Optional[str] = None


class PixInfo(BaseModel):
    chave: str
    nome: str


class FinanceOverview(BaseModel):
    """Página /financeiro"""
    mensalidades: List[Due] = []
    multas: List[Fine] = []
    pagamentos: List[Payment] = []
    total_pendente: float = 0.0
    pix: PixInfo


class PendingSummary(BaseModel):
    """Pendências exibidas no início"""
    mensalidades_pendentes: int = 0
    multas_pendentes: int = 0
    total_pendente: float = 0.0


class PendingPayment(BaseModel):
    """Pagamento aguardando revisão do admin"""
    id: str
    member_id: str
    member_nome: str
    valor: float
    criado_em: datetime
    comprovante_url: Optional[str] = None
    due_id: Optional[str] = None
    fine_id: Optional[str] = None


# =============================================
# Request Models
# =============================================

class MonthlyDuesRequest(BaseModel):
    """Geração em lote das mensalidades do mês (admin)"""
    competencia: str
    valor: float = Field(..., gt=0)
    vencimento: date

    @field_validator("competencia")
    @classmethod
    def check_competencia(cls, v):
        return validate_competencia(v)
