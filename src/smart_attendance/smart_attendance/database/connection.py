from __future__ import annotations

from dataclasses import dataclass

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "smart_attendance")),
        )


class DatabaseConnection:
    """DB connection factory for one durable store.

    Note: Short-lived connections are created per operation. The local and the
    remote store each get their own instance, built explicitly by the
    container rather than shared through a global.
    """

    def __init__(self, config: DBConfig, *, connect_timeout: int = 10):
        self._config = config
        self._connect_timeout = int(connect_timeout)

    @property
    def config(self) -> DBConfig:
        return self._config

    @property
    def connect_timeout(self) -> int:
        return self._connect_timeout

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=self._connect_timeout,
        )

    def describe(self) -> str:
        c = self._config
        return f"{c.user}@{c.host}:{c.port}/{c.database}"
