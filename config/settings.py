"""
Resolution-layer configuration using Pydantic Settings.

Loads from environment variables, .env files, and YAML overrides
(``config/environments/base.yaml`` then ``<APP_ENV>.yaml``).
"""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Optional

import yaml
from dotenv import dotenv_values
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Backend(str, Enum):
    AWS = "aws"
    MEMORY = "memory"


_CONFIG_DIR = Path(__file__).resolve().parent / "environments"
_ENV_FILE = ".env"


def _load_yaml_config(env: str) -> dict[str, Any]:
    """Load base + environment-specific YAML, merged."""
    base_path = _CONFIG_DIR / "base.yaml"
    env_path = _CONFIG_DIR / f"{env}.yaml"
    config: dict[str, Any] = {}
    for p in (base_path, env_path):
        if p.exists():
            with open(p, "r") as f:
                loaded = yaml.safe_load(f) or {}
                config = _deep_merge(config, loaded)
    return config


def _deep_merge(base: dict, override: dict) -> dict:
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Settings(BaseSettings):
    """Root resolution-layer configuration."""
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Namespace ────────────────────────────────────────────────
    project_name: str = Field(default="app", min_length=1)
    environment_name: str = Field(default="dev", min_length=1)

    # ── Backends ─────────────────────────────────────────────────
    backend: Backend = Field(default=Backend.AWS)
    aws_region: str = Field(default="us-east-1")
    aws_endpoint_url: Optional[str] = Field(default=None, description="Override for LocalStack and similar")
    aws_connect_timeout: float = Field(default=5.0, gt=0)
    aws_read_timeout: float = Field(default=10.0, gt=0)

    # ── Resolution ───────────────────────────────────────────────
    secret_names: Annotated[list[str], NoDecode] = Field(default=["api-keys"], description="Comma-separated in env vars")
    feature_config_profile: str = Field(default="default", min_length=1)
    decrypt_parameters: bool = Field(default=False)
    load_timeout_seconds: Optional[float] = Field(default=10.0, gt=0)
    max_workers: int = Field(default=8, ge=1)

    # ── Resilience ───────────────────────────────────────────────
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=0.2, ge=0.0)
    retry_max_delay: float = Field(default=5.0, ge=0.0)

    # ── Audit & logging ──────────────────────────────────────────
    audit_log_enabled: bool = Field(default=True)
    audit_log_file: str = Field(default="logs/audit.jsonl")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="", description="pretty | json; empty picks json for prod and staging")

    @field_validator("secret_names", mode="before")
    @classmethod
    def split_secret_names(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Singleton factory — loads settings from env vars, .env,
    and YAML config overlays (per APP_ENV).
    """
    env = os.getenv("APP_ENV", os.getenv("ENVIRONMENT_NAME", "dev"))
    yaml_overrides = _load_yaml_config(env)

    # Flatten nested YAML (aws: {region: ...} -> aws_region); env vars and .env win over YAML
    flat: dict[str, Any] = {}
    for key, value in yaml_overrides.items():
        if isinstance(value, dict):
            for sub_key, sub_val in value.items():
                flat[f"{key}_{sub_key}"] = sub_val
        else:
            flat[key] = value
    overridden = {k.upper() for k in os.environ}
    overridden.update(k.upper() for k in dotenv_values(_ENV_FILE))
    flat = {k: v for k, v in flat.items() if k.upper() not in overridden}

    return Settings(**flat)
