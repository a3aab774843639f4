"""
Auth Dependencies

Guardas de rota: sessão obrigatória e permissão de admin.
"""
from typing import Optional

from fastapi import Depends, Request

from ..config import get_settings
from ..errors import AdminRequired, LoginRequired
from .session import SessionContext, SessionGate


def get_access_token(request: Request) -> Optional[str]:
    """Token do header Authorization ou do cookie de sessão"""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return request.cookies.get(get_settings().COOKIE_NAME)


def get_session_gate(request: Request) -> SessionGate:
    gate = getattr(request.app.state, "session_gate", None)
    if gate is None:
        raise RuntimeError("Session gate não iniciado (startup da aplicação não executou)")
    return gate


def get_session(
    request: Request,
    gate: SessionGate = Depends(get_session_gate)
) -> SessionContext:
    """Sessão atual (anônima quando não há token válido)"""
    return gate.resolve(get_access_token(request))


def require_member(session: SessionContext = Depends(get_session)) -> SessionContext:
    """Sessão obrigatória: sem sessão vai para /login"""
    if not session.is_authenticated:
        raise LoginRequired("Faça login para continuar")
    return session


def require_admin(session: SessionContext = Depends(require_member)) -> SessionContext:
    """Admin obrigatório: sem permissão volta para /"""
    if not session.is_admin:
        raise AdminRequired("Acesso restrito a administradores")
    return session
