"""Application configuration from defaults, a dotenv file and the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

_DEFAULTS: dict[str, str] = {
    "APP_ENV": "development",
    "APP_PORT": "8080",
    "APP_SECRET": "secret",
    "DB_HOST": "localhost",
    "DB_PORT": "5432",
    "DB_USER": "postgres",
    "DB_PASSWORD": "password",
    "DB_NAME": "videosgo",
    "DB_SSLMODE": "disable",
    "DB_MAX_IDLE_CONNS": "10",
    "DB_MAX_OPEN_CONNS": "100",
    "REDIS_HOST": "localhost",
    "REDIS_PORT": "6379",
    "REDIS_PASSWORD": "",
    "REDIS_DB": "0",
    "JWT_SECRET": "secret",
    "JWT_EXPIRE_HOURS": "72",
}


@dataclass
class AppConfig:
    """Application settings."""

    env: str = ""
    port: str = ""
    secret: str = ""
    shutdown_timeout: float = 0.0


@dataclass
class DatabaseConfig:
    """PostgreSQL connection settings."""

    host: str = ""
    port: str = ""
    user: str = ""
    password: str = ""
    name: str = ""
    sslmode: str = ""
    max_idle_conns: int = 0
    max_open_conns: int = 0

    def dsn(self) -> str:
        """Return the key/value PostgreSQL connection string."""
        return (
            f"host={self.host} port={self.port} user={self.user} "
            f"password={self.password} dbname={self.name} sslmode={self.sslmode}"
        )


@dataclass
class RedisConfig:
    """Redis connection settings."""

    host: str = ""
    port: str = ""
    password: str = ""
    db: int = 0

    def addr(self) -> str:
        """Return the ``host:port`` address."""
        return f"{self.host}:{self.port}"


@dataclass
class JWTConfig:
    """Token signing settings."""

    secret: str = ""
    expire_hours: int = 0


@dataclass
class SecurityConfig:
    """Cross-origin settings."""

    cors_origins: list[str] = field(default_factory=list)


@dataclass
class Config:
    """All configuration sections."""

    app: AppConfig = field(default_factory=AppConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    jwt: JWTConfig = field(default_factory=JWTConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)


class _Source:
    """Looks a key up in the environment, then the dotenv file, then the defaults."""

    def __init__(self, environ: Mapping[str, str], file_values: Mapping[str, str]) -> None:
        self._environ = environ
        self._file = file_values

    def get(self, key: str) -> str:
        value = self._environ.get(key)
        if value:
            return value
        if key in self._file:
            return self._file[key]
        return _DEFAULTS.get(key, "")

    def get_int(self, key: str) -> int:
        value = self.get(key).strip()
        if not value:
            return 0
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"config unmarshal failed: {key} is not an integer: {value!r}") from None


def _read_env_file(env_file: str | os.PathLike[str]) -> dict[str, str]:
    path = Path(env_file)
    if not path.is_file():
        return {}
    return {key.upper(): value for key, value in dotenv_values(path).items() if value is not None}


def load(env_file: str | os.PathLike[str] = ".env", environ: Mapping[str, str] | None = None) -> Config:
    """Load the configuration; environment variables override the file, which overrides defaults."""
    source = _Source(os.environ if environ is None else environ, _read_env_file(env_file))

    origins = source.get("CORS_ALLOWED_ORIGINS")
    return Config(
        app=AppConfig(
            env=source.get("APP_ENV"),
            port=source.get("APP_PORT"),
            secret=source.get("APP_SECRET"),
        ),
        database=DatabaseConfig(
            host=source.get("DB_HOST"),
            port=source.get("DB_PORT"),
            user=source.get("DB_USER"),
            password=source.get("DB_PASSWORD"),
            name=source.get("DB_NAME"),
            sslmode=source.get("DB_SSLMODE"),
            max_idle_conns=source.get_int("DB_MAX_IDLE_CONNS"),
            max_open_conns=source.get_int("DB_MAX_OPEN_CONNS"),
        ),
        redis=RedisConfig(
            host=source.get("REDIS_HOST"),
            port=source.get("REDIS_PORT"),
            password=source.get("REDIS_PASSWORD"),
            db=source.get_int("REDIS_DB"),
        ),
        jwt=JWTConfig(
            secret=source.get("JWT_SECRET"),
            expire_hours=source.get_int("JWT_EXPIRE_HOURS"),
        ),
        security=SecurityConfig(cors_origins=origins.split(",") if origins else []),
    )