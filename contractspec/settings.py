"""
contractspec.settings

Purpose:
    Centralized configuration for services built on contractspec.
    Keeps deployment flexible and avoids hard-coded app metadata.

Author:
    Kanir Pandya

Created:
    2026-02-15

Updated:
    2026-03-06
"""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, Field, field_validator

ENV_SERVICE_NAME = "CONTRACTSPEC_SERVICE_NAME"
ENV_SERVICE_VERSION = "CONTRACTSPEC_SERVICE_VERSION"
ENV_API_PREFIX = "CONTRACTSPEC_API_PREFIX"
ENV_LOG_LEVEL = "CONTRACTSPEC_LOG_LEVEL"


class Settings(BaseModel):
    service_name: str = Field(default="contractspec-api")
    service_version: str = Field(default="0.1.0")

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    @field_validator("api_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("api_prefix must start with '/'.")
        return v


def get_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    overrides = {
        field: env[var]
        for field, var in (
            ("service_name", ENV_SERVICE_NAME),
            ("service_version", ENV_SERVICE_VERSION),
            ("api_prefix", ENV_API_PREFIX),
            ("log_level", ENV_LOG_LEVEL),
        )
        if var in env
    }
    return Settings(**overrides)
