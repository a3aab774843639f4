"""
Ranking Service

Lê as views ranking_mensal / ranking_geral; a pontuação é calculada no banco.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from ..config import PatotaSettings, get_settings
from ..database import execute, rows
from ..finance.models import FineType
from ..members.models import ExemptionReason
from .models import RankingView

VIEWS = {
    RankingView.mensal: "ranking_mensal",
    RankingView.geral: "ranking_geral",
}


def first_day_of_month(today: Optional[date] = None) -> str:
    """Primeiro dia do mês corrente (fuso da patota) em ISO"""
    if today is None:
        today = datetime.now(ZoneInfo(get_settings().TIMEZONE)).date()
    return today.replace(day=1).isoformat()


def rank(entries: List[Dict[str, Any]], member_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Posição 1-based na ordem recebida; marca a linha do membro"""
    return [
        {**e, "posicao": i + 1, "eu": member_id is not None and e.get("member_id") == member_id}
        for i, e in enumerate(entries)
    ]


class RankingService:
    def __init__(self, supabase):
        self.supabase = supabase

    def get_ranking(self, visao: RankingView, member_id: Optional[str] = None) -> Dict[str, Any]:
        query = self.supabase.table(VIEWS[visao]).select("*")
        since = None
        if visao == RankingView.mensal:
            since = first_day_of_month()
            query = query.gte("mes", since)

        entries = rows(execute(query.order("total_pontos", desc=True), f"ranking {visao.value}"))
        return {"visao": visao, "desde": since, "ranking": rank(entries, member_id)}


def rules(settings: Optional[PatotaSettings] = None) -> Dict[str, Any]:
    """Regras da patota (valores de configuração)"""
    settings = settings or get_settings()
    return {
        "mensalidade_valor": settings.MENSALIDADE_VALOR,
        "motivos_isencao": [r.value for r in ExemptionReason],
        "multas": [
            {
                "tipo": FineType.ATRASO.value,
                "valor": settings.MULTA_ATRASO,
                "descricao": "Chegou atrasado ao jogo",
            },
            {
                "tipo": FineType.FALTA_CONFIRMADA.value,
                "valor": settings.MULTA_FALTA_CONFIRMADA,
                "descricao": "Confirmou presença e faltou",
            },
            {
                "tipo": FineType.CONVIDADO.value,
                "valor": settings.MULTA_CONVIDADO,
                "descricao": "Por convidado levado",
            },
        ],
        "pontos_presenca": settings.PONTOS_PRESENCA,
        "pix": {"chave": settings.PIX_KEY, "nome": settings.PIX_NOME},
    }
