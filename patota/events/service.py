"""
Event Service

Lista de eventos, confirmações (RSVP) e convidados.
Cada operação é uma ida ao Supabase; nada fica em cache.
"""
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from loguru import logger

from ..config import get_settings
from ..database import execute, first_row, rows
from ..errors import NotFoundError
from .models import EventCreate, EventFilter, RSVPStatus

EVENT_COLUMNS = "id, tipo, data_hora, local, descricao"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class EventService:
    """Eventos e RSVPs"""

    def __init__(self, supabase):
        self.supabase = supabase

    # =============================================
    # Leitura
    # =============================================

    def list_events(
        self,
        filtro: EventFilter = EventFilter.proximos,
        member_id: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Próximos (crescente) ou passados (decrescente) por data_hora,
        com contagem de VOU e a confirmação do próprio membro
        """
        query = self.supabase.table("events").select(EVENT_COLUMNS)

        if filtro == EventFilter.proximos:
            query = query.gte("data_hora", now_iso()).order("data_hora", desc=False)
        else:
            query = query.lt("data_hora", now_iso()).order("data_hora", desc=True)

        if limit:
            query = query.limit(limit)

        events = rows(execute(query, "listagem de eventos"))
        return self._annotate(events, member_id)

    def _annotate(self, events: List[Dict[str, Any]], member_id: Optional[str]) -> List[Dict[str, Any]]:
        if not events:
            return []

        event_ids = [e["id"] for e in events]
        rsvps = rows(execute(
            self.supabase.table("event_rsvp").select(
                "event_id, member_id, status"
            ).in_("event_id", event_ids),
            "contagem de confirmações",
        ))

        by_event: Dict[str, List[Dict]] = defaultdict(list)
        for r in rsvps:
            by_event[r["event_id"]].append(r)

        annotated = []
        for event in events:
            event_rsvps = by_event.get(event["id"], [])
            mine = next((r for r in event_rsvps if r["member_id"] == member_id), None)
            annotated.append({
                **event,
                "confirmados": count_confirmed(event_rsvps),
                "minha_confirmacao": mine["status"] if mine else None,
            })
        return annotated

    def get_event(self, event_id: str) -> Dict[str, Any]:
        response = execute(
            self.supabase.table("events").select(EVENT_COLUMNS).eq("id", event_id).limit(1),
            "consulta de evento",
        )
        data = rows(response)
        if not data:
            raise NotFoundError("Evento não encontrado")
        return data[0]

    def get_event_rsvps(self, event_id: str) -> List[Dict[str, Any]]:
        """RSVPs do evento com nome/telefone do membro"""
        rsvps = rows(execute(
            self.supabase.table("event_rsvp").select(
                "member_id, status, convidados"
            ).eq("event_id", event_id),
            "listagem de confirmações",
        ))
        members = self._members_by_id([r["member_id"] for r in rsvps])

        merged = []
        for r in rsvps:
            member = members.get(r["member_id"], {})
            merged.append({
                "member_id": r["member_id"],
                "nome": member.get("nome") or "Sem nome",
                "telefone": member.get("telefone"),
                "status": r.get("status"),
                "convidados": r.get("convidados") or 0,
            })
        return merged

    def _members_by_id(self, member_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        if not member_ids:
            return {}
        members = rows(execute(
            self.supabase.table("members").select("id, nome, telefone").in_(
                "id", sorted(set(member_ids))
            ),
            "consulta de membros",
        ))
        return {m["id"]: m for m in members}

    def get_event_detail(self, event_id: str, member_id: Optional[str]) -> Dict[str, Any]:
        """Evento + lista de confirmações"""
        event = self.get_event(event_id)
        rsvps = self.get_event_rsvps(event_id)
        mine = next((r for r in rsvps if r["member_id"] == member_id), None)

        return {
            **event,
            "confirmados": count_confirmed(rsvps),
            "minha_confirmacao": mine["status"] if mine else None,
            "meus_convidados": mine["convidados"] if mine else 0,
            "total_convidados": sum(r["convidados"] for r in rsvps),
            "rsvps": [r for r in rsvps if r["status"]],
        }

    def next_event(self, member_id: Optional[str]) -> Optional[Dict[str, Any]]:
        events = self.list_events(EventFilter.proximos, member_id, limit=1)
        return events[0] if events else None

    def upcoming_events(self, limit: int) -> List[Dict[str, Any]]:
        return self.list_events(EventFilter.proximos, None, limit=limit)

    # =============================================
    # Escrita
    # =============================================

    def submit_rsvp(self, event_id: str, member_id: str, status: RSVPStatus) -> Dict[str, Any]:
        """Upsert por (evento, membro): a última resposta vale, sem histórico"""
        response = execute(
            self.supabase.table("event_rsvp").upsert(
                {"event_id": event_id, "member_id": member_id, "status": status.value},
                on_conflict="event_id,member_id",
            ),
            "confirmação de presença",
        )
        logger.info(f"RSVP {member_id} -> {event_id}: {status.value}")
        data = rows(response)
        return data[0] if data else {}

    def add_guests(self, event_id: str, member_id: str, quantidade: int) -> Any:
        """RPC adicionar_convidados"""
        response = execute(
            self.supabase.rpc("adicionar_convidados", {
                "p_event_id": event_id,
                "p_member_id": member_id,
                "p_quantidade": quantidade,
            }),
            "adição de convidados",
        )
        logger.info(f"Convidados {member_id} -> {event_id}: {quantidade}")
        return response.data

    def create_event(self, data: EventCreate, admin_id: str) -> Dict[str, Any]:
        """Cria evento; data/hora informadas no fuso da patota"""
        tz = ZoneInfo(get_settings().TIMEZONE)
        data_hora = datetime.combine(data.data, data.hora, tzinfo=tz)

        created = first_row(execute(
            self.supabase.table("events").insert({
                "tipo": data.tipo.value,
                "data_hora": data_hora.astimezone(timezone.utc).isoformat(),
                "local": data.local,
                "descricao": data.descricao,
                "criado_por": admin_id,
            }),
            "criação de evento",
        ), "criação de evento")
        logger.info(f"Evento criado por {admin_id}: {data.tipo.value} {data_hora.isoformat()} @ {data.local}")
        return created


def count_confirmed(rsvps: List[Dict[str, Any]]) -> int:
    """Confirmados = RSVPs com status VOU"""
    return sum(1 for r in rsvps if r.get("status") == RSVPStatus.VOU.value)
