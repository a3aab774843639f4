"""
Config - Configurações da aplicação

Supabase, sessão, regras da patota e logging.
"""
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

load_dotenv()


class PatotaSettings(BaseSettings):
    """Configurações lidas do ambiente / arquivo .env"""

    # Supabase
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
    # Segredo JWT do projeto: quando presente, o token é validado localmente
    SUPABASE_JWT_SECRET: str = os.getenv("SUPABASE_JWT_SECRET", "")
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # Link mágico
    SITE_URL: str = os.getenv("SITE_URL", "http://localhost:8000")
    TIMEZONE: str = "America/Sao_Paulo"

    # Cookie de sessão
    COOKIE_NAME: str = "access_token"
    COOKIE_MAX_AGE: int = 60 * 60 * 24 * 7  # 7 dias
    COOKIE_SECURE: bool = False

    # Storage
    RECEIPTS_BUCKET: str = "comprovantes"
    RECEIPT_MAX_BYTES: int = 10 * 1024 * 1024

    # Dados PIX da patota
    PIX_KEY: str = os.getenv("PIX_KEY", "patotaccc@email.com")
    PIX_NOME: str = os.getenv("PIX_NOME", "PATOTA CCC")

    # Regras (exibidas em /regras; a cobrança real é feita no banco)
    MENSALIDADE_VALOR: float = Field(default=50.0, description="Valor da mensalidade")
    MULTA_ATRASO: float = 5.0
    MULTA_FALTA_CONFIRMADA: float = 10.0
    MULTA_CONVIDADO: float = 5.0
    PONTOS_PRESENCA: int = 1

    # Listagens
    ADMIN_UPCOMING_LIMIT: int = 5
    LEDGER_PAGE_SIZE: int = 50

    # Servidor / logging
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> PatotaSettings:
    return PatotaSettings()
