"""
Members Service

Lista, cadastro (com convite por link mágico), ativação e isenções.
Membros nunca são apagados, só desativados.
"""
from typing import Any, Dict, List

from loguru import logger

from ..auth.router import send_magic_link
from ..database import execute, first_row, rows
from ..errors import BackendError, NotFoundError
from .models import ExemptionCreate, MemberCreate


class MemberService:
    def __init__(self, supabase):
        self.supabase = supabase

    def list_members(self) -> List[Dict[str, Any]]:
        """Membros por nome, com is_admin (só exibição)"""
        members = rows(execute(
            self.supabase.table("members").select("id, nome, email, telefone, ativo").order("nome"),
            "lista de membros",
        ))
        admin_ids = {a["member_id"] for a in rows(execute(
            self.supabase.table("admins").select("member_id"),
            "lista de admins",
        ))}
        return [{**m, "is_admin": m["id"] in admin_ids} for m in members]

    def add_member(self, data: MemberCreate) -> Dict[str, Any]:
        """
        Cadastra o membro e envia o convite

        Falha no convite não desfaz o cadastro: é logada e devolvida no aviso.
        """
        member = first_row(execute(
            self.supabase.table("members").insert({
                "nome": data.nome,
                "email": data.email,
                "ativo": True,
            }),
            "cadastro de membro",
        ), "cadastro de membro")
        logger.info(f"Membro cadastrado: {data.email}")

        try:
            send_magic_link(self.supabase, data.email)
        except BackendError as e:
            logger.warning(f"Convite para {data.email} não enviado: {e.message}")
            return {
                "membro": {**member, "is_admin": False},
                "convite_enviado": False,
                "aviso": f"Membro cadastrado, mas o convite falhou: {e.message}",
            }

        return {"membro": {**member, "is_admin": False}, "convite_enviado": True, "aviso": None}

    def set_active(self, member_id: str, ativo: bool) -> Dict[str, Any]:
        updated = rows(execute(
            self.supabase.table("members").update({"ativo": ativo}).eq("id", member_id),
            "ativação de membro",
        ))
        if not updated:
            raise NotFoundError("Membro não encontrado")
        logger.info(f"Membro {member_id} {'ativado' if ativo else 'desativado'}")
        return updated[0]

    def grant_exemption(self, member_id: str, data: ExemptionCreate, admin_id: str) -> Dict[str, Any]:
        """Isenção da competência (insert simples, sem checar duplicidade)"""
        created = first_row(execute(
            self.supabase.table("exemptions").insert({
                "member_id": member_id,
                "competencia": data.competencia,
                "motivo": data.motivo.value,
                "aprovado_por": admin_id,
            }),
            "isenção",
        ), "registro de isenção")
        logger.info(f"Isenção {data.motivo.value} em {data.competencia} para {member_id} (admin {admin_id})")
        return created
