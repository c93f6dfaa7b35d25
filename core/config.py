"""
Runtime configuration for the Novel Comments service.

All settings come from environment variables so the service can be deployed
without code changes. `Settings.from_env()` is read once when the application
is created; tests build `Settings` directly to point at temporary databases.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_PORT = 3000
DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./comments.db"
DEFAULT_STATIC_DIR = PROJECT_ROOT / "static"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Service settings"""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    database_url: str = DEFAULT_DATABASE_URL
    static_dir: Path = DEFAULT_STATIC_DIR
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    redact_store_errors: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        port_value = os.getenv("PORT") or str(DEFAULT_PORT)
        try:
            port = int(port_value)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port_value!r}")

        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=port,
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            static_dir=Path(os.getenv("STATIC_DIR", str(DEFAULT_STATIC_DIR))),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            redact_store_errors=_env_flag("REDACT_STORE_ERRORS"),
        )
