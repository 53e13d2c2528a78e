"""Configuration file schema for request_reconciler.

Defines Pydantic models for the YAML config structure with dedicated
sections for HTTP transport, comparison, status storage and logging, plus
a flattening adapter that feeds the result into ``load_config()`` as
fallback values.

Usage:
    from request_reconciler.config_schema import build_config, to_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = load_config(yaml_fallbacks=to_fallbacks(unified))
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class HttpConfig(BaseModel):
    """HTTP transport settings."""

    timeout: float = Field(
        default=30.0, gt=0, description="Read timeout in seconds"
    )
    connect_timeout: float = Field(
        default=10.0, gt=0, description="Connect timeout in seconds"
    )
    insecure: bool = Field(
        default=False,
        description="Disable TLS verification (development only)",
    )

    model_config = {"frozen": True}


class ComparisonConfig(BaseModel):
    array_mode: Literal["ordered", "unordered"] = Field(
        default="ordered",
        description="How JSON arrays are compared against desired state",
    )

    model_config = {"frozen": True}


class StoreConfig(BaseModel):
    state_dir: str | None = Field(
        default=None, description="Directory for persisted resource status"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: "text" or "json".
        debug: Force DEBUG level.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log line format"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level configuration.

    Every section has sensible defaults, so ``UnifiedConfig()``
    (zero-config) is always valid.
    """

    http: HttpConfig = Field(default_factory=HttpConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_fallbacks(unified: UnifiedConfig) -> dict:
    """Flatten a ``UnifiedConfig`` into the ``yaml_fallbacks`` dict
    accepted by ``load_config()``.

    Only values that ``load_config()`` resolves are included;
    ``state_dir`` is omitted when unset so the built-in default applies.
    """
    fallbacks: dict = {
        "timeout": unified.http.timeout,
        "connect_timeout": unified.http.connect_timeout,
        "insecure": unified.http.insecure,
        "debug": unified.logging.debug,
        "array_mode": unified.comparison.array_mode,
    }
    if unified.store.state_dir:
        fallbacks["state_dir"] = unified.store.state_dir
    return fallbacks
