"""Runtime configuration for the service (loaded from the environment, swappable in tests).

Environment variables:
    JWT_KEY: symmetric signing key for bearer tokens (required)
    JWT_ISSUER: issuer written into and required on every token (required)
    JWT_ALGORITHM: HMAC algorithm (default: HS256)
    TOKEN_LIFETIME_SECONDS: token lifetime (default: 7200)
    CACHE_TTL_SECONDS: absolute lifetime of every cache entry (default: 30)
    CACHE_SIZE_LIMIT: capacity of the read-through cache in size units (default: 1024)
    MANAGER_EMAIL / MANAGER_PASSWORD: seeded manager account
    LOG_LEVEL: see logging_config
"""
import os
from typing import Mapping, NamedTuple, Optional

from .errors import ConfigurationError


class Settings(NamedTuple):
    jwt_key: str
    jwt_issuer: str
    jwt_algorithm: str = "HS256"
    token_lifetime_seconds: int = 2 * 60 * 60
    cache_ttl_seconds: int = 30
    cache_size_limit: int = 1024
    manager_email: str = "manager@logitrack.local"
    manager_password: str = "Pass@word1!"


# Loaded lazily on first use so importing the app never needs secrets
state: Optional[Settings] = None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    missing = [name for name in ("JWT_KEY", "JWT_ISSUER") if not env.get(name)]
    if missing:
        raise ConfigurationError(f"missing required configuration: {', '.join(missing)}")
    defaults = Settings(jwt_key="", jwt_issuer="")
    try:
        return Settings(
            jwt_key=env["JWT_KEY"],
            jwt_issuer=env["JWT_ISSUER"],
            jwt_algorithm=env.get("JWT_ALGORITHM", defaults.jwt_algorithm),
            token_lifetime_seconds=int(env.get("TOKEN_LIFETIME_SECONDS", defaults.token_lifetime_seconds)),
            cache_ttl_seconds=int(env.get("CACHE_TTL_SECONDS", defaults.cache_ttl_seconds)),
            cache_size_limit=int(env.get("CACHE_SIZE_LIMIT", defaults.cache_size_limit)),
            manager_email=env.get("MANAGER_EMAIL", defaults.manager_email),
            manager_password=env.get("MANAGER_PASSWORD", defaults.manager_password),
        )
    except ValueError as e:
        raise ConfigurationError(f"invalid numeric setting: {e}") from e


def get_settings() -> Settings:
    global state
    if state is None:
        state = load_settings()
    return state


def set_settings(value: Optional[Settings]):
    """Replace the active settings; ``None`` forces a reload from the environment."""
    global state
    state = value
