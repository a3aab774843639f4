"""
Admin Module - Painel do administrador
"""
from .router import router as admin_router

__all__ = ["admin_router"]
