"""
Auth Router - Login sem senha (link mágico)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger

from ..config import get_settings
from ..database import call, create_auth_client, get_supabase
from ..errors import BackendError
from .dependencies import get_access_token, get_session, get_session_gate, require_member
from .models import AuthEvent, LoginRequest, LoginResponse, MeResponse, OtpVerifyRequest
from .session import SessionContext, SessionGate

router = APIRouter(tags=["auth"])


def get_auth_client(request: Request):
    """Cliente descartável para verify_otp"""
    factory = getattr(request.app.state, "auth_client_factory", None) or create_auth_client
    return factory()


def send_magic_link(supabase, email: str) -> None:
    """Envia o link mágico (também usado como convite de novo membro)"""
    settings = get_settings()
    call(
        "envio de link mágico",
        supabase.auth.sign_in_with_otp,
        {
            "email": email,
            "options": {"email_redirect_to": f"{settings.SITE_URL.rstrip('/')}/auth/confirm"},
        },
    )
    logger.info(f"Link mágico enviado para {email}")


def _set_session_cookie(response, access_token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=access_token,
        httponly=True,
        max_age=settings.COOKIE_MAX_AGE,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


def _open_session(gate: SessionGate, auth_response) -> SessionContext:
    """Registra a sessão recém-criada no gate e devolve o contexto"""
    session = getattr(auth_response, "session", None) if auth_response else None
    if session is None or not getattr(session, "access_token", None):
        raise BackendError("Link inválido ou expirado")

    gate.handle_auth_event(AuthEvent.SIGNED_IN, session)
    return gate.resolve(session.access_token)


# =============================================
# Login
# =============================================

@router.get("/login")
def login_page(session: SessionContext = Depends(get_session)):
    """Tela de login; quem já está logado volta para o início"""
    if session.is_authenticated:
        return RedirectResponse(url="/", status_code=303)
    return {"message": "Informe seu e-mail para receber o link mágico"}


@router.post("/login", response_model=LoginResponse)
def request_magic_link(data: LoginRequest, supabase=Depends(get_supabase)):
    """Envia o link mágico para o e-mail"""
    send_magic_link(supabase, data.email)
    return LoginResponse(message="Verifique seu e-mail para fazer login!")


@router.get("/auth/confirm")
def confirm_magic_link(
    token_hash: str = Query(...),
    type: str = Query("email"),
    gate: SessionGate = Depends(get_session_gate),
    auth_client=Depends(get_auth_client),
):
    """Destino do link mágico: troca o token_hash por sessão"""
    auth_response = call(
        "confirmação de link mágico",
        auth_client.auth.verify_otp,
        {"token_hash": token_hash, "type": type},
    )
    context = _open_session(gate, auth_response)
    logger.info(f"Login por link: {context.member_id}")

    response = RedirectResponse(url="/", status_code=303)
    _set_session_cookie(response, context.access_token)
    return response


@router.post("/auth/verify", response_model=LoginResponse)
def verify_code(
    data: OtpVerifyRequest,
    gate: SessionGate = Depends(get_session_gate),
    auth_client=Depends(get_auth_client),
):
    """Login com o código numérico do e-mail"""
    auth_response = call(
        "verificação de código",
        auth_client.auth.verify_otp,
        {"email": data.email.lower(), "token": data.token, "type": "email"},
    )
    context = _open_session(gate, auth_response)
    logger.info(f"Login por código: {context.member_id}")

    body = LoginResponse(message="Login realizado", is_admin=context.is_admin)
    response = JSONResponse(content=body.model_dump())
    _set_session_cookie(response, context.access_token)
    return response


# =============================================
# Sessão
# =============================================

@router.get("/auth/me", response_model=MeResponse)
def get_me(session: SessionContext = Depends(require_member)):
    """Identidade atual e flag de admin"""
    return MeResponse(id=session.member_id, email=session.email, is_admin=session.is_admin)


@router.post("/logout")
@router.get("/logout")
def logout(request: Request, gate: SessionGate = Depends(get_session_gate)):
    """Logout: limpa o cookie e o cache de admin do token"""
    gate.forget(get_access_token(request))
    response = RedirectResponse(url="/login", status_code=303)
    response.delete_cookie(get_settings().COOKIE_NAME)
    return response
