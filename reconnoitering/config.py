from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_DEFAULT_SEED = Path(__file__).resolve().parent / "data" / "seed.json"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    store_backend: str = field(default_factory=lambda: os.getenv("STORE_BACKEND", "memory"))
    mongodb_uri: str = field(default_factory=lambda: os.getenv("MONGODB_URI", "mongodb://localhost:27017"))
    mongodb_db: str = field(default_factory=lambda: os.getenv("MONGODB_DB", "reconnoitering"))
    seed_path: Path | None = field(
        default_factory=lambda: Path(os.environ["SEED_PATH"]) if os.getenv("SEED_PATH") else _DEFAULT_SEED
    )
    session_secret: str = field(
        default_factory=lambda: os.getenv("SESSION_SECRET", "reconnoitering-secret-change-in-production")
    )
    bcrypt_rounds: int = field(default_factory=lambda: _env_int("BCRYPT_ROUNDS", 12))
    admin_email: str = field(default_factory=lambda: os.getenv("ADMIN_EMAIL", ""))
    admin_password: str = field(default_factory=lambda: os.getenv("ADMIN_PASSWORD", ""))
    public_base_url: str = field(default_factory=lambda: os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"))
    reset_token_ttl_hours: int = field(default_factory=lambda: _env_int("RESET_TOKEN_TTL_HOURS", 24))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


DEFAULT_SETTINGS = Settings()
