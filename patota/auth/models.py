"""
Auth Models - Modelos pydantic de sessão e login
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class AuthEvent:
    """Notificações de mudança de sessão emitidas pelo Supabase Auth"""
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


# =============================================
# Request Models
# =============================================

class LoginRequest(BaseModel):
    """Pedido de link mágico"""
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class OtpVerifyRequest(BaseModel):
    """Código de 6 dígitos enviado junto com o link"""
    email: EmailStr
    token: str = Field(..., min_length=6, max_length=10)


# =============================================
# Response Models
# =============================================

class SessionUser(BaseModel):
    """Identidade autenticada (id do auth == id em members)"""
    id: str
    email: Optional[str] = None


class MeResponse(BaseModel):
    """Resposta de /auth/me"""
    id: str
    email: Optional[str]
    is_authenticated: bool = True
    is_admin: bool


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    is_admin: Optional[bool] = None
