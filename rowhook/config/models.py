"""Configuration models for rowhook."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rowhook.triggers.expression import normalize_expression
from rowhook.triggers.models import Statement


class MySQLConfig(BaseModel):
    """Connection settings for the replication source."""

    host: str = Field(default="localhost")
    port: int = Field(default=3306, ge=1, le=65535)
    user: str = Field(default="root")
    password: str = Field(default="", repr=False)
    server_id: int = Field(default=100, ge=1, description="Replica id announced to the source server.")

    def connection_settings(self) -> dict[str, Any]:
        return {"host": self.host, "port": self.port, "user": self.user, "passwd": self.password}


class StreamConfig(BaseModel):
    """Replication stream behaviour."""

    blocking: bool = Field(default=True)
    only_schemas: list[str] | None = None
    only_tables: list[str] | None = None
    join_timeout_seconds: float = Field(default=5.0, ge=0.0)


class LoggingConfig(BaseModel):
    """Log level used by the CLI."""

    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"unknown log level: {value}")
        return normalized


class TriggerConfig(BaseModel):
    """Declarative subscription used by ``rowhook watch``."""

    expression: str = "*"
    statement: Statement = Statement.ALL
    tag: str | None = None

    @field_validator("expression")
    @classmethod
    def _canonical_expression(cls, value: str) -> str:
        return normalize_expression(value)

    @field_validator("statement", mode="before")
    @classmethod
    def _coerce_statement(cls, value: Any) -> Statement:
        return Statement.coerce(value)


class RowHookConfig(BaseSettings):
    """Root configuration model for rowhook."""

    mysql: MySQLConfig = Field(default_factory=MySQLConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    triggers: list[TriggerConfig] = Field(default_factory=list)

    model_config = SettingsConfigDict(
        env_prefix="ROWHOOK_",
        env_nested_delimiter="__",
        extra="ignore",
    )
