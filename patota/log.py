"""
Configuração de logging (loguru)
"""
import sys
from pathlib import Path

from loguru import logger

from .config import get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str = None, log_dir: str = None) -> None:
    """Substitui o sink padrão por stderr colorido + arquivo diário"""
    settings = get_settings()
    level = level or settings.LOG_LEVEL
    log_dir = log_dir or settings.LOG_DIR

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    logger.add(
        f"{log_dir}/patota_{{time:YYYY-MM-DD}}.log",
        rotation="1 day",
        retention="30 days",
        level="DEBUG",
    )
