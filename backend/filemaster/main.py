from typing import Optional

import httpx
from fastapi import FastAPI

from . import __version__
from .config import Settings, settings as default_settings
from .log_config import setup_logging
from .manager import FileManager
from .paths import PathResolver
from .routes.browse import router as browse_router
from .routes.health import router as health_router
from .startup import register_startup


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the application around one immutable base directory.

    *transport* replaces the network layer of remote fetches (tests).
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    settings.BASE_DIR.mkdir(parents=True, exist_ok=True)
    paths = PathResolver(settings.BASE_DIR)

    app = FastAPI(title="FileMaster", version=__version__)
    app.state.settings = settings
    app.state.paths = paths
    app.state.manager = FileManager(paths, settings, transport=transport)
    app.include_router(health_router)
    app.include_router(browse_router)
    register_startup(app, settings)
    return app
