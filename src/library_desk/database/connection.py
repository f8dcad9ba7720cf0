from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector

from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10

    @classmethod
    def from_mapping(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        """Validate raw settings; anything missing is fatal at startup."""

        missing = [key for key in ("host", "user", "database") if not str(db_config.get(key) or "").strip()]
        if missing:
            raise ConfigurationError(f"Missing database settings: {', '.join(missing)}")

        try:
            port = int(db_config.get("port", 3306))
            timeout = int(db_config.get("connection_timeout", 10))
        except (TypeError, ValueError):
            raise ConfigurationError("Database port/timeout must be integers")
        if not 0 < port < 65536:
            raise ConfigurationError(f"Invalid database port: {port}")

        return cls(
            host=str(db_config["host"]).strip(),
            port=port,
            user=str(db_config["user"]).strip(),
            password=str(db_config.get("password") or ""),
            database=str(db_config["database"]).strip(),
            connection_timeout=timeout,
        )


class DatabaseConnection:
    """Process-wide DB connection factory.

    Built once from validated settings. We create short-lived connections per operation.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=self._config.connection_timeout,
        )
