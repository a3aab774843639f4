"""
Patota CCC - Servidor
"""
import argparse

import uvicorn
from loguru import logger

from patota.config import get_settings
from patota.log import setup_logging


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Patota CCC")
    parser.add_argument("--host", default=settings.HOST, help="Endereço de escuta")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Porta")
    parser.add_argument("--reload", action="store_true", help="Recarregar ao editar o código")
    args = parser.parse_args()

    setup_logging()
    logger.info(f"Iniciando em http://{args.host}:{args.port}")

    uvicorn.run(
        "patota.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
