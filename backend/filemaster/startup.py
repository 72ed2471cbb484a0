import logging
import os

from fastapi import FastAPI

from .config import Settings
from .paths import PathResolver

logger = logging.getLogger(__name__)


def check_base_dir(paths: PathResolver) -> bool:
    base = paths.base
    if not base.is_dir():
        logger.warning("[startup] base directory %s is missing", base)
        return False
    if not os.access(base, os.R_OK | os.X_OK):
        logger.warning("[startup] base directory %s is not readable", base)
        return False
    if not os.access(base, os.W_OK):
        logger.warning("[startup] base directory %s is read-only; mutations will fail", base)
        return False
    try:
        count = sum(1 for _ in base.iterdir())
    except OSError as exc:
        logger.warning("[startup] cannot list %s: %s", base, exc)
        return False
    logger.info("[startup] serving %s (%d entries)", base, count)
    return True


def register_startup(app: FastAPI, settings: Settings) -> None:
    @app.on_event("startup")
    async def startup_checks():
        if not settings.STARTUP_CHECKS:
            logger.info("[startup] checks skipped by config")
            return
        check_base_dir(app.state.paths)
