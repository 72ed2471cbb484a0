"""
Shared fixtures: a temporary base directory, its resolver/manager, and an app client.
"""

from pathlib import Path
from typing import Callable, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from filemaster.config import Settings
from filemaster.main import create_app
from filemaster.manager import FileManager
from filemaster.paths import PathResolver


@pytest.fixture
def base(tmp_path: Path) -> Path:
    """Base directory with a small tree; siblings of it act as 'outside'."""
    root = tmp_path / "files"
    root.mkdir()
    (root / "notes.txt").write_text("hello notes", encoding="utf-8")
    (root / "sub").mkdir()
    (root / "sub" / "deep.txt").write_text("deep content", encoding="utf-8")
    return root.resolve()


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    other = tmp_path / "outside"
    other.mkdir()
    (other / "secret.txt").write_text("top secret", encoding="utf-8")
    return other.resolve()


@pytest.fixture
def remote() -> Dict[str, httpx.Response]:
    """URL -> canned response served by the mock transport; "*" matches any URL."""
    return {}


@pytest.fixture
def transport(remote) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        response = remote.get(str(request.url), remote.get("*"))
        if response is None:
            return httpx.Response(404, content=b"not found")
        if isinstance(response, Exception):
            raise response
        return response

    return httpx.MockTransport(handler)


@pytest.fixture
def make_settings(base: Path) -> Callable[..., Settings]:
    def _make(**overrides) -> Settings:
        overrides.setdefault("BASE_DIR", base)
        overrides.setdefault("STARTUP_CHECKS", False)
        return Settings(**overrides)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def resolver(base: Path) -> PathResolver:
    return PathResolver(base)


@pytest.fixture
def manager(resolver: PathResolver, settings: Settings, transport) -> FileManager:
    return FileManager(resolver, settings, transport=transport)


@pytest.fixture
def client(settings: Settings, transport) -> TestClient:
    app = create_app(settings, transport=transport)
    with TestClient(app) as test_client:
        yield test_client
