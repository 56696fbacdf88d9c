"""Structured logging for pipeline runs."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog
from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    level: int = Field(logging.INFO, description="Root log level; names such as 'debug' are accepted.")
    to_console: bool = True
    to_file: bool = False
    file: str = "logs/lexiscore.log"
    max_bytes: int = Field(10 * 1024 * 1024, gt=0)
    backup_count: int = Field(5, ge=0)
    json_output: bool = Field(True, alias="json", description="JSON lines, or plain key=value text.")

    model_config = {"populate_by_name": True}

    @field_validator("level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> int:
        if isinstance(value, int):
            return value
        if not value:
            return logging.INFO
        resolved = logging.getLevelName(str(value).upper())
        return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(config: LoggingConfig | Mapping[str, Any] | None = None) -> LoggingConfig:
    """Route stdlib and structlog records through one renderer on the root logger."""

    if not isinstance(config, LoggingConfig):
        raw = dict(config or {})
        config = LoggingConfig.model_validate(raw.get("logging", raw))

    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.format_exc_info,
    ]
    renderer = (
        structlog.processors.JSONRenderer()
        if config.json_output
        else structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])
    )
    formatter = structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)

    handlers: list[logging.Handler] = []
    if config.to_console:
        handlers.append(logging.StreamHandler())
    if config.to_file:
        path = Path(config.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(config.level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return config


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def run_context(run_id: str, lexicon: Optional[str] = None):
    """Tag every record emitted inside the block with the run and its lexicon."""

    context = {"run_id": run_id}
    if lexicon is not None:
        context["lexicon"] = lexicon
    return structlog.contextvars.bound_contextvars(**context)
