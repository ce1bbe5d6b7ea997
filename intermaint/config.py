from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import streamlit as st
from loguru import logger

CONFIG_FILE_NAME = "settings.json"
LOG_FILE_NAME = "intermaint.log"
STORAGE_KEY = "intermaint_data_v1"

ENV_DATA_DIR = "INTERMAINT_DATA_DIR"
ENV_STRICT_DATES = "INTERMAINT_STRICT_DATES"
ENV_LOG_LEVEL = "INTERMAINT_LOG_LEVEL"

SESSION_DATA_DIR = "intermaint_data_dir"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    storage_key: str = STORAGE_KEY
    # When set, a date bound or permission date that cannot be parsed excludes
    # the permission instead of letting it through.
    strict_dates: bool = False
    log_level: str = "INFO"

    @property
    def log_path(self) -> Path:
        return self.data_dir / LOG_FILE_NAME


def _default_data_dir() -> Path:
    return Path.home() / ".intermaint"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable {cfg}: {e}")
            return {}
    return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    cfg = _default_data_dir() / CONFIG_FILE_NAME
    cfg.parent.mkdir(parents=True, exist_ok=True)
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    logger.info(f"Data directory set to {data_dir}")

    # Update session for immediate effect
    st.session_state[SESSION_DATA_DIR] = str(data_dir)


def load_settings(session_data_dir: str | None = None) -> Settings:
    # Priority order:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    if session_data_dir:
        data_dir = Path(session_data_dir).expanduser().resolve()
    elif os.getenv(ENV_DATA_DIR):
        data_dir = Path(os.getenv(ENV_DATA_DIR, "")).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    return Settings(
        data_dir=data_dir,
        db_path=data_dir / "app.db",
        strict_dates=_env_flag(ENV_STRICT_DATES),
        log_level=os.getenv(ENV_LOG_LEVEL, "INFO").strip().upper() or "INFO",
    )


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(settings.log_path, level=settings.log_level, rotation="1 MB", retention=5, encoding="utf-8")


@st.cache_resource
def get_settings() -> Settings:
    settings = load_settings(st.session_state.get(SESSION_DATA_DIR))
    configure_logging(settings)
    return settings
