"""
Patota CCC - Servidor FastAPI

Eventos, RSVP, presença, mensalidades e multas, caixa e ranking.
Os dados vivem no Supabase; o servidor aplica as guardas de sessão/admin.
"""
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger

from .admin import admin_router
from .attendance.router import router as attendance_router
from .auth import SessionGate, auth_router
from .database import get_supabase_client
from .errors import AdminRequired, BatchSaveError, LoginRequired, PatotaError
from .events import events_router
from .finance import finance_router
from .ranking.router import router as ranking_router


# ==================== Exception handlers ====================

async def patota_error_handler(request: Request, exc: PatotaError):
    """Falhas viram um alerta com a mensagem crua"""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def batch_save_error_handler(request: Request, exc: BatchSaveError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "aplicados": exc.applied,
            "falhou": exc.failed_member_id,
        },
    )


async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(url="/login", status_code=303)


async def admin_required_handler(request: Request, exc: AdminRequired):
    return RedirectResponse(url="/", status_code=303)


# ==================== App ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: cliente Supabase + session gate. Shutdown: encerra o gate"""
    if getattr(app.state, "supabase", None) is None:
        app.state.supabase = get_supabase_client()

    gate = SessionGate(app.state.supabase)
    gate.start()
    app.state.session_gate = gate
    logger.info("✅ Servidor Patota CCC iniciado")
    try:
        yield
    finally:
        gate.stop()
        app.state.session_gate = None
        logger.info("Servidor encerrado")


def create_app(supabase_client=None, auth_client_factory: Optional[Callable] = None) -> FastAPI:
    """
    Monta a aplicação

    Args:
        supabase_client: cliente já criado (padrão: singleton do processo no startup)
        auth_client_factory: fábrica do cliente descartável usado em verify_otp
    """
    app = FastAPI(
        title="Patota CCC",
        description="Gestão da patota: eventos, presença, financeiro e ranking",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.supabase = supabase_client
    app.state.auth_client_factory = auth_client_factory
    app.state.session_gate = None

    app.add_exception_handler(LoginRequired, login_required_handler)
    app.add_exception_handler(AdminRequired, admin_required_handler)
    app.add_exception_handler(BatchSaveError, batch_save_error_handler)
    app.add_exception_handler(PatotaError, patota_error_handler)

    app.include_router(auth_router)
    app.include_router(events_router)
    app.include_router(finance_router)
    app.include_router(ranking_router)
    app.include_router(attendance_router)
    app.include_router(admin_router)

    return app


app = create_app()
