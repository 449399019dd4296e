import os
from dataclasses import dataclass
from functools import lru_cache

_TRUTHY = {"1", "true", "yes"}


def _require_env(name: str) -> str:
    v = os.getenv(name, "").strip()
    if not v:
        raise RuntimeError(f"Missing required env var: {name}")
    return v


def _env(name: str, default: str) -> str:
    return (os.getenv(name, "") or "").strip() or default


@dataclass(frozen=True)
class Settings:
    database_path: str
    cache_dir: str
    auth_secret: str
    session_ttl_minutes: int
    cookie_secure: bool
    log_level: str
    seed_on_startup: bool


@lru_cache
def get_settings() -> Settings:
    """
    Lee las env vars 1 sola vez por proceso.
    En tests: monkeypatch del env + get_settings.cache_clear().
    """
    env = _env("APP_ENV", "dev").lower()

    # En prod el secreto es obligatorio; en dev usamos uno fijo
    if env == "prod":
        secret = _require_env("AUTH_SECRET")
    else:
        secret = _env("AUTH_SECRET", "dev-secret-unsafe")

    return Settings(
        database_path=_env("DATABASE_PATH", "./data/invoices.db"),
        cache_dir=_env("CACHE_DIR", "./data/cache"),
        auth_secret=secret,
        session_ttl_minutes=int(_env("SESSION_TTL_MINUTES", "1440")),
        cookie_secure=_env("COOKIE_SECURE", "false").lower() in _TRUTHY,
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        seed_on_startup=_env("SEED_ON_STARTUP", "false").lower() in _TRUTHY,
    )
