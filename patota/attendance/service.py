"""
Attendance Service

Folha de presença do evento (admin). A multa por ATRASO/AUSENTE é gerada
pelo banco dentro de marcar_presenca; aqui não se calcula multa nenhuma.
"""
import unicodedata
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from ..database import execute, rows
from ..errors import BackendError, BatchSaveError
from ..events.models import RSVPStatus
from ..events.service import EventService
from .models import BatchItem, PresenceStatus

# VOU primeiro, depois TALVEZ, depois NAO_VOU (sem resposta conta como NAO_VOU)
RSVP_ORDER = {
    RSVPStatus.VOU.value: 0,
    RSVPStatus.TALVEZ.value: 1,
    RSVPStatus.NAO_VOU.value: 2,
}


def name_key(nome: Optional[str]) -> str:
    """Chave de ordenação sem acentos e sem caixa"""
    decomposed = unicodedata.normalize("NFKD", nome or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def sort_rows(sheet_rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(
        sheet_rows,
        key=lambda r: (
            RSVP_ORDER.get(r.get("rsvp_status") or RSVPStatus.NAO_VOU.value, 99),
            name_key(r.get("nome")),
        ),
    )


def summarize(sheet_rows: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    sheet_rows = list(sheet_rows)

    def count(status: PresenceStatus) -> int:
        return sum(1 for r in sheet_rows if r.get("presenca_status") == status.value)

    return {
        "confirmados": sum(1 for r in sheet_rows if r.get("rsvp_status") == RSVPStatus.VOU.value),
        "convidados": sum(r.get("convidados") or 0 for r in sheet_rows),
        "presentes": count(PresenceStatus.PRESENTE),
        "atrasos": count(PresenceStatus.ATRASO),
        "ausentes": count(PresenceStatus.AUSENTE),
        "justificados": count(PresenceStatus.JUSTIFICADO),
    }


class AttendanceService:
    """Marcação de presença via RPC marcar_presenca"""

    def __init__(self, supabase):
        self.supabase = supabase
        self.events = EventService(supabase)

    def load_sheet(self, event_id: str) -> Dict[str, Any]:
        """
        Membros com RSVP no evento + presença já marcada

        Returns:
            {"evento", "linhas", "resumo"}
        """
        event = self.events.get_event(event_id)
        rsvps = self.events.get_event_rsvps(event_id)

        attendance = rows(execute(
            self.supabase.table("event_attendance").select("member_id, status").eq(
                "event_id", event_id
            ),
            "presenças do evento",
        ))
        presence = {a["member_id"]: a["status"] for a in attendance}

        sheet_rows = [
            {
                "member_id": r["member_id"],
                "nome": r["nome"],
                "telefone": r.get("telefone"),
                "rsvp_status": r.get("status"),
                "convidados": r.get("convidados") or 0,
                "presenca_status": presence.get(r["member_id"]),
            }
            for r in rsvps
        ]
        sheet_rows = sort_rows(sheet_rows)

        return {"evento": event, "linhas": sheet_rows, "resumo": summarize(sheet_rows)}

    def mark(self, event_id: str, member_id: str, status: PresenceStatus, admin_id: str) -> Any:
        """Marca um membro (remarcar sobrescreve)"""
        response = execute(
            self.supabase.rpc("marcar_presenca", {
                "p_event_id": event_id,
                "p_member_id": member_id,
                "p_status": status.value,
                "p_admin_id": admin_id,
            }),
            "marcação de presença",
        )
        logger.info(f"Presença {event_id}/{member_id}: {status.value} (admin {admin_id})")
        return response.data

    def save_all(self, event_id: str, items: List[BatchItem], admin_id: str) -> Dict[str, Any]:
        """
        Salvar tudo: marca, em sequência, quem tem status selecionado

        Não é transacional. Se uma marcação falha, as anteriores já ficaram
        gravadas e o erro informa quais foram.
        """
        applied: List[str] = []
        for item in items:
            if item.status is None:
                continue
            try:
                self.mark(event_id, item.member_id, item.status, admin_id)
            except BackendError as e:
                logger.error(f"Salvar tudo interrompido em {item.member_id} após {len(applied)} marcações")
                raise BatchSaveError(e.message, applied=applied, failed_member_id=item.member_id) from e
            applied.append(item.member_id)

        logger.info(f"Presenças salvas em {event_id}: {len(applied)}")
        return self.load_sheet(event_id)
