"""
Ranking Models
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, field_validator

from ..finance.models import PixInfo


class RankingView(str, Enum):
    """Período do ranking"""
    mensal = "mensal"
    geral = "geral"


class RankingEntry(BaseModel):
    posicao: int
    member_id: str
    nome: str = "Sem nome"
    total_pontos: int = 0
    total_jogos: Optional[int] = None
    total_presencas: Optional[int] = None
    eu: bool = False

    @field_validator("total_pontos", mode="before")
    @classmethod
    def none_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("nome", mode="before")
    @classmethod
    def default_nome(cls, v):
        return v or "Sem nome"


class RankingPage(BaseModel):
    visao: RankingView
    desde: Optional[str] = None
    ranking: List[RankingEntry] = []


class FineRule(BaseModel):
    tipo: str
    valor: float
    descricao: str


class RulesPage(BaseModel):
    """Página /regras (conteúdo estático)"""
    mensalidade_valor: float
    motivos_isencao: List[str]
    multas: List[FineRule]
    pontos_presenca: int
    pix: PixInfo
