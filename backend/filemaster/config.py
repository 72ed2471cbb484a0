from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


BASE_DIR = Path(__file__).resolve().parent
CONFIG_PATH = BASE_DIR / "config" / "settings.yaml"


def _load_config(path: Path) -> Dict[str, Any]:
    if path.exists():
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"{path.name} must contain a top-level mapping")
            return data
    return {}


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def _to_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return []


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    return cfg.get(name, {}) if isinstance(cfg.get(name), dict) else {}


class Settings:
    """Runtime configuration: settings.yaml values, overridden by FILEMASTER_* env vars.

    Keyword overrides win over both and are meant for tests and embedding.
    """

    def __init__(self, config_path: Optional[Path] = None, **overrides: Any) -> None:
        cfg = _load_config(Path(config_path) if config_path else CONFIG_PATH)

        storage_cfg = _section(cfg, "storage")
        ui_cfg = _section(cfg, "ui")
        upload_cfg = _section(cfg, "upload")
        fetch_cfg = _section(cfg, "fetch")
        startup_cfg = _section(cfg, "startup")
        logging_cfg = _section(cfg, "logging")
        server_cfg = _section(cfg, "server")

        # Storage
        base_dir = os.getenv("FILEMASTER_BASE_DIR") or storage_cfg.get("base_dir", "files")
        self.BASE_DIR = Path(base_dir).expanduser()

        # UI
        preview_env = os.getenv("FILEMASTER_PREVIEW_CHARS")
        self.PREVIEW_CHARS = int(preview_env) if preview_env is not None else int(ui_cfg.get("preview_chars", 500))
        search_env = os.getenv("FILEMASTER_SEARCH_MAX_RESULTS")
        self.SEARCH_MAX_RESULTS = (
            int(search_env) if search_env is not None else int(ui_cfg.get("search_max_results", 50))
        )
        encodings_env = os.getenv("FILEMASTER_TEXT_ENCODINGS")
        self.TEXT_ENCODINGS = _to_list(
            encodings_env if encodings_env is not None else ui_cfg.get("text_encodings", ["utf-8", "cp1251"])
        ) or ["utf-8"]

        # Upload
        upload_max_env = os.getenv("FILEMASTER_UPLOAD_MAX_BYTES")
        self.UPLOAD_MAX_BYTES = (
            int(upload_max_env) if upload_max_env is not None else int(upload_cfg.get("max_bytes", 0))
        )

        # Remote fetch
        fetch_timeout_env = os.getenv("FILEMASTER_FETCH_TIMEOUT")
        self.FETCH_TIMEOUT = (
            float(fetch_timeout_env) if fetch_timeout_env is not None else float(fetch_cfg.get("timeout", 15.0))
        )
        fetch_max_env = os.getenv("FILEMASTER_FETCH_MAX_BYTES")
        self.FETCH_MAX_BYTES = (
            int(fetch_max_env) if fetch_max_env is not None else int(fetch_cfg.get("max_bytes", 50 * 1024 * 1024))
        )

        # Startup flags
        startup_checks_env = os.getenv("FILEMASTER_STARTUP_CHECKS")
        self.STARTUP_CHECKS = _to_bool(
            startup_checks_env if startup_checks_env is not None else startup_cfg.get("checks", True)
        )

        # Logging / server
        self.LOG_LEVEL = os.getenv("FILEMASTER_LOG_LEVEL") or logging_cfg.get("level", "INFO")
        self.HOST = os.getenv("FILEMASTER_HOST") or server_cfg.get("host", "127.0.0.1")
        port_env = os.getenv("FILEMASTER_PORT")
        self.PORT = int(port_env) if port_env is not None else int(server_cfg.get("port", 8000))

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, Path(value) if key == "BASE_DIR" else value)


settings = Settings()
