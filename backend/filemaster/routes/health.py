import os

from fastapi import APIRouter, Request

from .. import __version__

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    base = request.app.state.paths.base
    base_ok = base.is_dir() and os.access(base, os.R_OK | os.W_OK | os.X_OK)
    return {
        "status": "ok",
        "version": __version__,
        "base_dir": str(base),
        "base_dir_ok": base_ok,
    }
