"""
Members Models - Cadastro de membros (admin)
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator

from ..finance.models import validate_competencia


class ExemptionReason(str, Enum):
    """Motivos aceitos de isenção da mensalidade"""
    LESAO = "LESAO"
    TRABALHO = "TRABALHO"


class MemberCreate(BaseModel):
    nome: str
    email: EmailStr

    @field_validator("nome")
    @classmethod
    def strip_nome(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Nome é obrigatório")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class MemberActiveRequest(BaseModel):
    ativo: bool


class ExemptionCreate(BaseModel):
    competencia: str
    motivo: ExemptionReason

    @field_validator("competencia")
    @classmethod
    def check_competencia(cls, v):
        return validate_competencia(v)


class Member(BaseModel):
    id: str
    nome: Optional[str] = None
    email: Optional[str] = None
    telefone: Optional[str] = None
    ativo: bool = True
    is_admin: bool = False


class MemberList(BaseModel):
    membros: List[Member] = []


class MemberCreated(BaseModel):
    """Resultado do cadastro; o insert vale mesmo se o convite falhar"""
    membro: Member
    convite_enviado: bool
    aviso: Optional[str] = None


class Exemption(BaseModel):
    id: str
    member_id: str
    competencia: str
    motivo: ExemptionReason
    aprovado_por: Optional[str] = None
