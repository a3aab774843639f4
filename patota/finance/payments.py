"""
Payment Review - Confirmação/rejeição de pagamentos (admin)

Confirmar passa pela RPC confirmar_pagamento (marca CONFIRMADO, baixa a
mensalidade/multa e lança no caixa). Rejeitar é um update direto.
Os dois só valem para pagamentos PENDENTE.
"""
from typing import Any, Dict, List

from loguru import logger

from ..database import execute, rows
from ..errors import NotFoundError, PaymentStateError
from .models import PaymentStatus


class PaymentReviewService:
    """Fila de pagamentos pendentes"""

    def __init__(self, supabase):
        self.supabase = supabase

    def list_pending(self) -> List[Dict[str, Any]]:
        """Pendentes, mais antigos primeiro, com o nome de quem enviou"""
        payments = rows(execute(
            self.supabase.table("payments").select(
                "id, member_id, valor, criado_em, comprovante_url, due_id, fine_id"
            ).eq("status", PaymentStatus.PENDENTE.value).order("criado_em", desc=False),
            "pagamentos pendentes",
        ))

        member_ids = sorted({p["member_id"] for p in payments})
        names = {}
        if member_ids:
            names = {m["id"]: m.get("nome") for m in rows(execute(
                self.supabase.table("members").select("id, nome").in_("id", member_ids),
                "nomes dos pagadores",
            ))}

        return [
            {**p, "member_nome": names.get(p["member_id"]) or "Desconhecido"}
            for p in payments
        ]

    def get_payment(self, payment_id: str) -> Dict[str, Any]:
        data = rows(execute(
            self.supabase.table("payments").select("id, status, member_id, valor").eq(
                "id", payment_id
            ).limit(1),
            "consulta de pagamento",
        ))
        if not data:
            raise NotFoundError("Pagamento não encontrado")
        return data[0]

    def _ensure_pending(self, payment: Dict[str, Any]) -> None:
        if payment.get("status") != PaymentStatus.PENDENTE.value:
            raise PaymentStateError(f"Pagamento já está {payment.get('status')}")

    def confirm(self, payment_id: str, admin_id: str) -> Any:
        """RPC confirmar_pagamento"""
        self._ensure_pending(self.get_payment(payment_id))

        response = execute(
            self.supabase.rpc("confirmar_pagamento", {
                "p_payment_id": payment_id,
                "p_admin_id": admin_id,
            }),
            "confirmação de pagamento",
        )
        logger.info(f"Pagamento {payment_id} confirmado por {admin_id}")
        return response.data

    def reject(self, payment_id: str, admin_id: str = None) -> Dict[str, Any]:
        """Update direto para REJEITADO"""
        self._ensure_pending(self.get_payment(payment_id))

        updated = rows(execute(
            self.supabase.table("payments").update(
                {"status": PaymentStatus.REJEITADO.value}
            ).eq("id", payment_id).eq("status", PaymentStatus.PENDENTE.value),
            "rejeição de pagamento",
        ))
        if not updated:
            # outro admin resolveu o pagamento entre a leitura e o update
            raise PaymentStateError("Pagamento não está mais pendente")

        logger.info(f"Pagamento {payment_id} rejeitado por {admin_id}")
        return updated[0]
