# app/core/log_config.py
import sys

from loguru import logger

from app.core.config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str | None = None) -> None:
    """重置 loguru 的默认 sink，按配置的级别输出到 stdout"""
    logger.remove()
    logger.add(sys.stdout, level=level or settings.LOG_LEVEL, format=LOG_FORMAT)
    logger.info(f"日志配置完成，级别: {level or settings.LOG_LEVEL}")
