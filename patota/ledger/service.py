"""
Ledger Service

Leitura das views de caixa e lançamentos manuais. Lançamentos de sistema
(pagamentos confirmados) são gravados pelo banco.
"""
from typing import Any, Dict, List, Optional

from loguru import logger

from ..database import execute, first_row, rows
from .models import CATEGORIES_BY_TYPE, LedgerEntryCreate


class LedgerService:
    """Caixa da patota"""

    def __init__(self, supabase):
        self.supabase = supabase

    def balance(self) -> Optional[Dict[str, Any]]:
        data = rows(execute(
            self.supabase.table("saldo_caixa").select("*").limit(1),
            "saldo do caixa",
        ))
        return data[0] if data else None

    def monthly_summary(self) -> List[Dict[str, Any]]:
        return rows(execute(
            self.supabase.table("resumo_caixa_mensal").select("*").order("mes", desc=True),
            "resumo mensal do caixa",
        ))

    def list_entries(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Últimos lançamentos com o nome de quem lançou ('Sistema' se ninguém)"""
        entries = rows(execute(
            self.supabase.table("cash_ledger").select(
                "id, tipo, categoria, valor, descricao, data_lancamento, lancado_por"
            ).order("data_lancamento", desc=True).limit(limit),
            "lançamentos do caixa",
        ))

        author_ids = sorted({e["lancado_por"] for e in entries if e.get("lancado_por")})
        names = {}
        if author_ids:
            names = {m["id"]: m.get("nome") for m in rows(execute(
                self.supabase.table("members").select("id, nome").in_("id", author_ids),
                "autores dos lançamentos",
            ))}

        return [
            {**e, "lancado_por_nome": names.get(e.get("lancado_por")) or "Sistema"}
            for e in entries
        ]

    def page(self, limit: int = 50) -> Dict[str, Any]:
        return {
            "saldo": self.balance(),
            "resumo_mensal": self.monthly_summary(),
            "lancamentos": self.list_entries(limit),
            "categorias": {
                tipo.value: [c.value for c in categories]
                for tipo, categories in CATEGORIES_BY_TYPE.items()
            },
        }

    def add_entry(self, data: LedgerEntryCreate, admin_id: str) -> Dict[str, Any]:
        """Lançamento manual (insert simples)"""
        created = first_row(execute(
            self.supabase.table("cash_ledger").insert({
                "tipo": data.tipo.value,
                "categoria": data.categoria.value,
                "valor": data.valor,
                "descricao": data.descricao,
                "data_lancamento": data.data_lancamento.isoformat(),
                "lancado_por": admin_id,
            }),
            "lançamento no caixa",
        ), "lançamento no caixa")
        logger.info(f"Caixa: {data.tipo.value} {data.categoria.value} R$ {data.valor:.2f} por {admin_id}")
        return created
