"""
Centralized logging configuration for qrmfg.

Everything logs through loguru. Access decisions are bound with audit=True
(see RBACAuthorizationService.log_data_access) and can be copied to a
separate JSON-lines sink by setting AUDIT_LOG_PATH.
"""

import logging
import sys

from loguru import logger

from qrmfg_core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forwards standard library log records (uvicorn, fastapi) to loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def is_audit_record(record) -> bool:
    return bool(record["extra"].get("audit"))


def setup_logging(level: str | None = None, audit_path: str | None = None) -> None:
    """
    Configures loguru sinks and routes standard library logging through them.

    Args:
        level: Minimum level for the stdout sink. Defaults to settings.LOG_LEVEL.
        audit_path: File receiving audit records as JSON lines. Defaults to
            settings.AUDIT_LOG_PATH; no audit sink when empty.
    """
    logger.remove()
    logger.add(
        sys.stdout,
        format=CONSOLE_FORMAT,
        level=level or settings.LOG_LEVEL,
        colorize=True,
    )

    audit_path = audit_path or settings.AUDIT_LOG_PATH
    if audit_path:
        logger.add(audit_path, level="DEBUG", filter=is_audit_record, serialize=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ["uvicorn", "uvicorn.access", "uvicorn.error", "fastapi"]:
        _logger = logging.getLogger(name)
        _logger.handlers = [InterceptHandler()]
        _logger.propagate = False

    logger.info(f"Logging initialized (audit sink: {audit_path or 'disabled'})")
