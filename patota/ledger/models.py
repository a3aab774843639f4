"""
Ledger Models - Caixa da patota
"""
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LedgerType(str, Enum):
    """Direção do lançamento"""
    ENTRADA = "ENTRADA"
    SAIDA = "SAIDA"


class LedgerCategory(str, Enum):
    """Categorias de lançamento manual"""
    CAMPO = "CAMPO"
    ARBITRAGEM = "ARBITRAGEM"
    BOLA = "BOLA"
    MENSALIDADE = "MENSALIDADE"
    MULTA = "MULTA"
    CONVIDADO = "CONVIDADO"
    ARRECADACAO = "ARRECADACAO"
    OUTRO = "OUTRO"


# Categorias permitidas por direção
CATEGORIES_BY_TYPE: Dict[LedgerType, List[LedgerCategory]] = {
    LedgerType.SAIDA: [
        LedgerCategory.CAMPO,
        LedgerCategory.ARBITRAGEM,
        LedgerCategory.BOLA,
        LedgerCategory.OUTRO,
    ],
    LedgerType.ENTRADA: [
        LedgerCategory.MENSALIDADE,
        LedgerCategory.MULTA,
        LedgerCategory.CONVIDADO,
        LedgerCategory.ARRECADACAO,
        LedgerCategory.OUTRO,
    ],
}


# =============================================
# Request Models
# =============================================

class LedgerEntryCreate(BaseModel):
    """Lançamento manual (admin)"""
    tipo: LedgerType
    categoria: LedgerCategory
    valor: float = Field(..., gt=0)
    descricao: Optional[str] = None
    data_lancamento: date = Field(default_factory=date.today)

    @field_validator("descricao")
    @classmethod
    def blank_descricao(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def check_category(self):
        if self.categoria not in CATEGORIES_BY_TYPE[self.tipo]:
            allowed = ", ".join(c.value for c in CATEGORIES_BY_TYPE[self.tipo])
            raise ValueError(f"Categoria {self.categoria.value} inválida para {self.tipo.value} (use: {allowed})")
        return self


# =============================================
# Response Models
# =============================================

class Balance(BaseModel):
    """View saldo_caixa"""
    total_entradas: float = 0.0
    total_saidas: float = 0.0
    saldo_atual: float = 0.0

    @field_validator("total_entradas", "total_saidas", "saldo_atual", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return 0.0 if v is None else v


class MonthlySummary(BaseModel):
    """View resumo_caixa_mensal"""
    mes: Optional[str] = None
    entradas: float = 0.0
    saidas: float = 0.0
    saldo_mes: float = 0.0

    @field_validator("entradas", "saidas", "saldo_mes", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return 0.0 if v is None else v


class LedgerEntry(BaseModel):
    id: str
    tipo: LedgerType
    categoria: str
    valor: float
    descricao: Optional[str] = None
    data_lancamento: str
    lancado_por_nome: str = "Sistema"


class LedgerPage(BaseModel):
    """Página /admin/caixa"""
    saldo: Optional[Balance] = None
    resumo_mensal: List[MonthlySummary] = []
    lancamentos: List[LedgerEntry] = []
    categorias: Dict[str, List[str]] = {}
