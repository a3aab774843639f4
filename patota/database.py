"""
Cliente Supabase
"""
from typing import Any, Optional

from fastapi import Request
from loguru import logger
from supabase import Client, create_client

from .config import get_settings
from .errors import BackendError

# Singleton do processo
_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Instância única do cliente Supabase"""
    global _supabase_client
    if _supabase_client is None:
        settings = get_settings()
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise ValueError("Defina as variáveis de ambiente SUPABASE_URL e SUPABASE_KEY")
        _supabase_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _supabase_client


def get_supabase(request: Request) -> Client:
    """Dependência FastAPI: cliente ligado à aplicação"""
    client = getattr(request.app.state, "supabase", None)
    if client is None:
        client = get_supabase_client()
        request.app.state.supabase = client
    return client


def create_auth_client() -> Client:
    """Cliente descartável para trocar link/código por sessão

    verify_otp guarda a sessão no cliente; usar o singleton faria as
    próximas queries saírem com o JWT de quem acabou de logar.
    """
    settings = get_settings()
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def error_message(exc: Exception) -> str:
    """Mensagem crua de um erro do cliente (APIError expõe .message)"""
    message = getattr(exc, "message", None)
    return str(message) if message else str(exc)


def execute(builder: Any, action: str) -> Any:
    """Executa uma query/RPC e converte qualquer falha em BackendError

    Args:
        builder: query builder do postgrest (table/rpc) ainda não executado
        action: descrição curta para o log

    Returns:
        a resposta do postgrest (com .data e .count)
    """
    try:
        return builder.execute()
    except Exception as e:
        message = error_message(e)
        logger.error(f"{action} falhou: {message}")
        raise BackendError(message) from e


def call(action: str, func, *args, **kwargs) -> Any:
    """Mesma conversão de erro de execute(), para chamadas de auth/storage"""
    try:
        return func(*args, **kwargs)
    except Exception as e:
        message = error_message(e)
        logger.error(f"{action} falhou: {message}")
        raise BackendError(message) from e


def rows(response: Any) -> list:
    """Linhas da resposta (lista vazia quando não há dados)"""
    data = getattr(response, "data", None)
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return list(data)


def first_row(response: Any, action: str) -> dict:
    """Primeira linha devolvida por um insert/update

    Sem linha de volta (ex.: RLS sem permissão de leitura) vira BackendError.
    """
    data = rows(response)
    if not data:
        logger.error(f"{action} não devolveu registro")
        raise BackendError(f"{action.capitalize()} não devolveu registro")
    return data[0]
