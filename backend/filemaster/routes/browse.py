from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from ..formatting import clean_dir
from ..manager import FileManager
from ..paths import InvalidPath
from ..render import render_page
from ..types import DirEntry, OperationResult, SearchHit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["browse"])


def get_manager(request: Request) -> FileManager:
    return request.app.state.manager


def _outcome(res: OperationResult, success_message: str) -> Tuple[str, str]:
    if res.success:
        return success_message, "success"
    return f"Error: {res.message}", "error"


def _redirect(current_dir: str, flash: str, flash_type: str) -> RedirectResponse:
    query = urlencode({"dir": current_dir, "flash": flash, "flash_type": flash_type})
    return RedirectResponse(url=f"/?{query}", status_code=303)


# ----------- endpoints ------------

@router.get("/", response_class=HTMLResponse)
async def index(
    current: str = Query(".", alias="dir"),
    search: str = Query(""),
    view: Optional[str] = Query(None),
    flash: str = Query(""),
    flash_type: str = Query("info"),
    manager: FileManager = Depends(get_manager),
):
    current_dir = clean_dir(current)
    status = 200
    entries: List[DirEntry] = []
    hits: List[SearchHit] = []
    term = search.strip()

    if term:
        try:
            hits = manager.search(current_dir, term)
        except InvalidPath:
            hits = []

    view_path = view.replace("\\", "/").rstrip("/") if view else None
    view_content = manager.read_file(view_path) if view_path else None

    if view_path is None:
        try:
            entries = manager.list_dir(current_dir)
        except InvalidPath:
            flash, flash_type, status = "Invalid or non-existent directory", "error", 400
        except OSError as exc:
            logger.error("listing %s failed: %s", current_dir, exc)
            flash, flash_type, status = "Could not read directory", "error", 500

    page = render_page(
        current_dir=current_dir,
        entries=entries,
        flash=flash,
        flash_type=flash_type,
        search_term=term,
        search_hits=hits,
        view_path=view_path,
        view_content=view_content,
    )
    return HTMLResponse(page, status_code=status)


@router.post("/")
async def dispatch(
    action: str = Form(""),
    current: str = Form(".", alias="dir"),
    filename: str = Form(""),
    content: str = Form(""),
    dirname: str = Form(""),
    target: str = Form(""),
    old: str = Form(""),
    new: str = Form(""),
    file: str = Form(""),
    url: str = Form(""),
    upload: Optional[UploadFile] = File(None),
    manager: FileManager = Depends(get_manager),
):
    """Run one form action, then redirect back to the listing with a flash message."""
    current_dir = clean_dir(current)

    if action == "create_file":
        name = filename.strip()
        if not name:
            flash, flash_type = "File name cannot be empty", "error"
        else:
            res = manager.create_file(current_dir, name, content)
            flash, flash_type = _outcome(res, "File created successfully")

    elif action == "create_dir":
        name = dirname.strip()
        if not name:
            flash, flash_type = "Folder name cannot be empty", "error"
        else:
            res = manager.create_dir(current_dir, name)
            flash, flash_type = _outcome(res, "Folder created successfully")

    elif action == "delete_file":
        res = manager.delete_file(target)
        flash, flash_type = _outcome(res, "File deleted successfully")

    elif action == "delete_dir":
        res = manager.delete_dir(target)
        flash, flash_type = _outcome(res, "Folder deleted successfully")

    elif action == "rename":
        new_name = new.strip()
        if not new_name:
            flash, flash_type = "New name cannot be empty", "error"
        else:
            res = manager.rename(old, new_name)
            flash, flash_type = _outcome(res, "Renamed successfully")

    elif action == "save_file":
        res = manager.save_file(file, content)
        flash, flash_type = ("File saved successfully", "success") if res.success else ("File save failed", "error")

    elif action == "fetch_remote":
        res = await manager.fetch_remote(url, current_dir)
        if not res.success and res.message == "Invalid URL":
            flash, flash_type = "Invalid URL", "error"
        else:
            flash, flash_type = _outcome(res, "Remote file fetched successfully")

    elif action == "upload":
        if upload is None or not upload.filename:
            flash, flash_type = "No file selected", "error"
        else:
            try:
                res = manager.upload(current_dir, upload.filename, upload.file)
            finally:
                await upload.close()
            flash, flash_type = _outcome(res, "File uploaded successfully")

    else:
        logger.warning("unknown action %r", action)
        flash, flash_type = "Unknown action", "error"

    return _redirect(current_dir, flash, flash_type)
