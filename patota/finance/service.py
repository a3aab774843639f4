"""
Finance Service

Visão financeira do membro, envio de comprovante e geração de mensalidades.
Baixa de mensalidade/multa e lançamento no caixa acontecem no banco
(confirmar_pagamento); aqui só se lê e se registra o pagamento PENDENTE.
"""
import time
from typing import Any, Dict, List, Optional

from loguru import logger

from ..config import get_settings
from ..database import call, execute, first_row, rows
from ..errors import BackendError, InvalidRequest, NotFoundError
from .models import DueStatus, MonthlyDuesRequest, PaymentStatus

ALLOWED_RECEIPT_TYPES = ("image/", "application/pdf")


def compute_total_pending(dues: List[Dict[str, Any]], fines: List[Dict[str, Any]]) -> float:
    """
    Total pendente da página financeira

    Soma das mensalidades PENDENTE + todas as multas. Multas já cobertas por
    pagamento CONFIRMADO continuam somadas (comportamento herdado, mantido).
    """
    total_dues = sum(float(d.get("valor") or 0) for d in dues if d.get("status") == DueStatus.PENDENTE.value)
    total_fines = sum(float(f.get("valor") or 0) for f in fines)
    return round(total_dues + total_fines, 2)


def is_allowed_receipt(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return any(content_type.startswith(t) for t in ALLOWED_RECEIPT_TYPES)


def receipt_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    if content_type == "application/pdf":
        return "pdf"
    return "jpg"


class FinanceService:
    """Mensalidades, multas e pagamentos do membro"""

    def __init__(self, supabase):
        self.supabase = supabase

    # =============================================
    # Leitura
    # =============================================

    def list_dues(self, member_id: str) -> List[Dict[str, Any]]:
        return rows(execute(
            self.supabase.table("dues").select("*").eq(
                "member_id", member_id
            ).order("competencia", desc=True),
            "listagem de mensalidades",
        ))

    def list_fines(self, member_id: str) -> List[Dict[str, Any]]:
        """Multas, mais recentes primeiro, com o evento de origem"""
        fines = rows(execute(
            self.supabase.table("fines").select(
                "id, tipo, valor, observacao, criado_em, event_id"
            ).eq("member_id", member_id).order("criado_em", desc=True),
            "listagem de multas",
        ))

        event_ids = sorted({f["event_id"] for f in fines if f.get("event_id")})
        events = {}
        if event_ids:
            events = {e["id"]: e for e in rows(execute(
                self.supabase.table("events").select("id, tipo, data_hora").in_("id", event_ids),
                "eventos das multas",
            ))}

        for fine in fines:
            event = events.get(fine.get("event_id"))
            fine["evento"] = {"tipo": event["tipo"], "data_hora": event["data_hora"]} if event else None
        return fines

    def list_payments(self, member_id: str) -> List[Dict[str, Any]]:
        return rows(execute(
            self.supabase.table("payments").select("*").eq(
                "member_id", member_id
            ).order("criado_em", desc=True),
            "listagem de pagamentos",
        ))

    def overview(self, member_id: str) -> Dict[str, Any]:
        """Página /financeiro"""
        settings = get_settings()
        dues = self.list_dues(member_id)
        fines = self.list_fines(member_id)
        payments = self.list_payments(member_id)

        return {
            "mensalidades": dues,
            "multas": fines,
            "pagamentos": payments,
            "total_pendente": compute_total_pending(dues, fines),
            "pix": {"chave": settings.PIX_KEY, "nome": settings.PIX_NOME},
        }

    def pending_summary(self, member_id: str) -> Dict[str, Any]:
        """
        Pendências do início: mensalidades PENDENTE e multas sem pagamento
        CONFIRMADO
        """
        dues = rows(execute(
            self.supabase.table("dues").select("valor").eq(
                "member_id", member_id
            ).eq("status", DueStatus.PENDENTE.value),
            "mensalidades pendentes",
        ))
        fines = rows(execute(
            self.supabase.table("fines").select("id, valor").eq("member_id", member_id),
            "multas do membro",
        ))
        paid = rows(execute(
            self.supabase.table("payments").select("fine_id").eq(
                "member_id", member_id
            ).eq("status", PaymentStatus.CONFIRMADO.value),
            "multas pagas",
        ))
        paid_fine_ids = {p["fine_id"] for p in paid if p.get("fine_id")}
        open_fines = [f for f in fines if f["id"] not in paid_fine_ids]

        total = sum(float(d.get("valor") or 0) for d in dues) + sum(float(f.get("valor") or 0) for f in open_fines)
        return {
            "mensalidades_pendentes": len(dues),
            "multas_pendentes": len(open_fines),
            "total_pendente": round(total, 2),
        }

    # =============================================
    # Comprovante
    # =============================================

    def _get_target(self, table: str, target_id: str, member_id: str) -> Dict[str, Any]:
        data = rows(execute(
            self.supabase.table(table).select("id, valor, member_id").eq(
                "id", target_id
            ).eq("member_id", member_id).limit(1),
            f"consulta em {table}",
        ))
        if not data:
            label = "Mensalidade" if table == "dues" else "Multa"
            raise NotFoundError(f"{label} não encontrada")
        return data[0]

    def submit_receipt(
        self,
        member_id: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str],
        due_id: Optional[str] = None,
        fine_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Upload do comprovante + pagamento PENDENTE

        1. sobe o arquivo em {member_id}/{epoch_ms}.{ext}
        2. pega a URL pública
        3. insere o pagamento com o valor da mensalidade/multa
        """
        if bool(due_id) == bool(fine_id):
            raise InvalidRequest("Informe a mensalidade ou a multa do pagamento")

        if not is_allowed_receipt(content_type):
            raise InvalidRequest("Envie uma imagem ou PDF")

        settings = get_settings()
        if len(content) > settings.RECEIPT_MAX_BYTES:
            raise InvalidRequest("Arquivo muito grande")

        if due_id:
            target = self._get_target("dues", due_id, member_id)
        else:
            target = self._get_target("fines", fine_id, member_id)

        path = f"{member_id}/{int(time.time() * 1000)}.{receipt_extension(filename, content_type)}"
        bucket = self.supabase.storage.from_(settings.RECEIPTS_BUCKET)
        call("upload de comprovante", bucket.upload, path, content, {"content-type": content_type})
        public_url = call("URL do comprovante", bucket.get_public_url, path)

        try:
            payment = first_row(execute(
                self.supabase.table("payments").insert({
                    "member_id": member_id,
                    "due_id": due_id,
                    "fine_id": fine_id,
                    "valor": target["valor"],
                    "status": PaymentStatus.PENDENTE.value,
                    "comprovante_url": public_url,
                }),
                "registro de pagamento",
            ), "registro de pagamento")
        except BackendError:
            self._discard_receipt(bucket, path)
            raise

        logger.info(f"Comprovante enviado por {member_id}: {path}")
        return payment

    def _discard_receipt(self, bucket, path: str) -> None:
        """Remove o arquivo quando o pagamento não foi registrado"""
        try:
            bucket.remove([path])
        except Exception as e:
            logger.error(f"Comprovante órfão no bucket: {path} ({e})")
            return
        logger.warning(f"Pagamento não registrado; comprovante removido: {path}")

    # =============================================
    # Mensalidades (admin)
    # =============================================

    def generate_monthly_dues(self, data: MonthlyDuesRequest) -> Any:
        """RPC gerar_mensalidades_mes: cria as mensalidades dos membros ativos"""
        response = execute(
            self.supabase.rpc("gerar_mensalidades_mes", {
                "p_competencia": data.competencia,
                "p_valor": data.valor,
                "p_vencimento": data.vencimento.isoformat(),
            }),
            "geração de mensalidades",
        )
        logger.info(f"Mensalidades geradas para {data.competencia}: {response.data}")
        return response.data
