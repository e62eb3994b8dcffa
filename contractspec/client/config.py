"""
contractspec.client.config

Purpose:
    Validated construction options for ContractClient.
    Centralized, validated env configuration (fail-fast; no hidden defaults).

Author:
    Kanir Pandya

Created:
    2026-03-05
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ----------------------------
# Environment variable constants
# ----------------------------
ENV_BASE_URL = "CONTRACTSPEC_BASE_URL"
ENV_TIMEOUT_SECONDS = "CONTRACTSPEC_TIMEOUT_SECONDS"
ENV_AUTH_TOKEN = "CONTRACTSPEC_AUTH_TOKEN"

AUTHORIZATION_HEADER = "authorization"


class ClientConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = Field(..., min_length=1, description="Base URL for every request")
    headers: dict[str, str] = Field(default_factory=dict, description="Headers sent with every request")
    transport_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Passed through to httpx.Client(...) (timeout, transport, verify, ...)",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        stripped = v.rstrip("/")
        if not stripped:
            raise ValueError("base_url must be a non-empty URL.")
        return stripped

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientConfig":
        env = os.environ if environ is None else environ

        base_url = (env.get(ENV_BASE_URL) or "").strip()
        if not base_url:
            raise ValueError(f"{ENV_BASE_URL} must be set")

        headers: dict[str, str] = {}
        token = (env.get(ENV_AUTH_TOKEN) or "").strip()
        if token:
            headers[AUTHORIZATION_HEADER] = f"Bearer {token}"

        transport_options: dict[str, Any] = {}
        timeout_raw = (env.get(ENV_TIMEOUT_SECONDS) or "").strip()
        if timeout_raw:
            transport_options["timeout"] = float(timeout_raw)

        return cls(base_url=base_url, headers=headers, transport_options=transport_options)
