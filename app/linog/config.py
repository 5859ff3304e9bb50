import os
from dataclasses import dataclass

DEV_SECRET_KEY = "change-me"


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    api_prefix: str

    token_ttl_hours: int
    login_rate_limit: int
    login_rate_window: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer (got {raw!r}).")


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", DEV_SECRET_KEY),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///linog.db"),
        api_prefix=_getenv("API_PREFIX", "/api"),
        token_ttl_hours=_getenv_int("TOKEN_TTL_HOURS", 24),
        login_rate_limit=_getenv_int("LOGIN_RATE_LIMIT", 5),
        login_rate_window=_getenv_int("LOGIN_RATE_WINDOW", 300),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "API_PREFIX": s.api_prefix,
        "TOKEN_TTL_HOURS": s.token_ttl_hours,
        "LOGIN_RATE_LIMIT": s.login_rate_limit,
        "LOGIN_RATE_WINDOW": s.login_rate_window,
        # request body limit (10MB)
        "MAX_CONTENT_LENGTH": 10 * 1024 * 1024,
    }
