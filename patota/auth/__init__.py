"""
Auth Module - Sessão, login sem senha e guardas de rota
"""
from .router import router as auth_router, send_magic_link
from .session import SessionContext, SessionGate, AdminCapability
from .dependencies import get_session, require_member, require_admin

__all__ = [
    "auth_router",
    "send_magic_link",
    "SessionContext",
    "SessionGate",
    "AdminCapability",
    "get_session",
    "require_member",
    "require_admin",
]
