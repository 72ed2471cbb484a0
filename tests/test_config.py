from pathlib import Path

import pytest

from filemaster.config import Settings
from filemaster.log_config import setup_logging


def test_defaults_from_packaged_yaml(monkeypatch):
    for name in ("FILEMASTER_PREVIEW_CHARS", "FILEMASTER_TEXT_ENCODINGS", "FILEMASTER_UPLOAD_MAX_BYTES"):
        monkeypatch.delenv(name, raising=False)
    s = Settings()
    assert s.PREVIEW_CHARS == 500
    assert s.TEXT_ENCODINGS == ["utf-8", "cp1251"]
    assert s.UPLOAD_MAX_BYTES == 0


def test_yaml_file_values(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("FILEMASTER_BASE_DIR", raising=False)
    monkeypatch.delenv("FILEMASTER_STARTUP_CHECKS", raising=False)
    cfg = tmp_path / "settings.yaml"
    cfg.write_text("storage:\n  base_dir: /srv/files\nstartup:\n  checks: 'no'\n", encoding="utf-8")
    s = Settings(config_path=cfg)
    assert s.BASE_DIR == Path("/srv/files")
    assert s.STARTUP_CHECKS is False


def test_env_overrides_yaml(tmp_path: Path, monkeypatch):
    cfg = tmp_path / "settings.yaml"
    cfg.write_text("fetch:\n  timeout: 3\n", encoding="utf-8")
    monkeypatch.setenv("FILEMASTER_FETCH_TIMEOUT", "7.5")
    monkeypatch.setenv("FILEMASTER_TEXT_ENCODINGS", "latin-1, utf-8")
    s = Settings(config_path=cfg)
    assert s.FETCH_TIMEOUT == 7.5
    assert s.TEXT_ENCODINGS == ["latin-1", "utf-8"]


def test_keyword_overrides(tmp_path: Path):
    s = Settings(BASE_DIR=str(tmp_path), PREVIEW_CHARS=10)
    assert s.BASE_DIR == tmp_path
    assert s.PREVIEW_CHARS == 10


def test_unknown_override_rejected():
    with pytest.raises(AttributeError):
        Settings(NOT_A_SETTING=1)


def test_non_mapping_yaml_rejected(tmp_path: Path):
    cfg = tmp_path / "settings.yaml"
    cfg.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        Settings(config_path=cfg)


def test_setup_logging_rejects_bad_level():
    with pytest.raises(ValueError):
        setup_logging("LOUD")
