"""Application configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv


ALLOWED_FILE_KEYS = {"LOG_LEVEL", "SESSION_HOURS"}


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class CateringConfig:
    """Settings for the storefront API."""

    secret_key: str
    database_url: str
    log_level: str = "INFO"
    session_lifetime_hours: int = 24
    seed_on_start: bool = False
    project_root: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def settings_file(self) -> Path:
        return self.data_dir / "settings.json"

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> "CateringConfig":
        """Build the config from .env, data/settings.json and the environment."""

        root = project_root or Path(__file__).resolve().parent.parent
        load_dotenv(root / ".env")

        data_dir = root / "data"
        data_dir.mkdir(parents=True, exist_ok=True)
        file_settings = _load_settings_file(data_dir / "settings.json")

        default_db = f"sqlite:///{(data_dir / 'catering.db').as_posix()}"
        session_hours = file_settings.get("SESSION_HOURS") or os.environ.get("CATERING_SESSION_HOURS") or 24
        return cls(
            secret_key=os.environ.get("CATERING_SECRET_KEY", "catering-aja-dev-secret"),
            database_url=os.environ.get("DATABASE_URL", default_db),
            log_level=(file_settings.get("LOG_LEVEL") or os.environ.get("LOG_LEVEL") or "INFO").upper(),
            session_lifetime_hours=int(session_hours),
            seed_on_start=_env_flag(os.environ.get("CATERING_SEED")),
            project_root=root,
        )


def _load_settings_file(path: Path) -> Dict[str, str]:
    # data/settings.json wins over the environment for non-sensitive keys only
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return {k: v for k, v in payload.items() if k in ALLOWED_FILE_KEYS}
