"""Configuration — Pydantic model for terminal settings."""

from __future__ import annotations

import json
import os
from typing import Any

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

TIMEOUT_DISABLED = -1


class TerminalConfig(BaseModel):
    """Defaults applied to every :class:`~clu.terminal.Terminal`."""

    timeout_ms: int = Field(
        default=TIMEOUT_DISABLED,
        ge=TIMEOUT_DISABLED,
        description="Maximum wait for the child to exit; -1 waits forever.",
    )
    settle_ms: int = Field(
        default=128,
        ge=0,
        description="Quiet period without new output before capture is complete.",
    )
    poll_interval_ms: int = Field(
        default=32,
        gt=0,
        description="Longest single wait between exit checks.",
    )
    break_on_error: bool = Field(
        default=False,
        description="Raise instead of returning when a command fails or times out.",
    )
    inherit_env: bool = Field(
        default=True, description="Copy the caller's environment into the child"
    )
    env: dict[str, str] = Field(
        default_factory=dict, description="Extra variables layered on top"
    )
    legacy_status: bool = Field(
        default=False,
        description=(
            "Report status 2 when a command exits 0 but writes to stderr, "
            "and treat that as a failure."
        ),
    )
    log_output: bool = Field(
        default=False, description="Log every captured line at DEBUG level"
    )

    @classmethod
    def load(cls, config_path: str | None = None) -> TerminalConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars (including a .env file) > config file > defaults.

        Env vars:
            CLU_TIMEOUT_MS       - Timeout in milliseconds (-1 disables)
            CLU_SETTLE_MS        - Settle window in milliseconds
            CLU_BREAK_ON_ERROR   - true/false
            CLU_INHERIT_ENV      - true/false
            CLU_LEGACY_STATUS    - true/false
            CLU_LOG_OUTPUT       - true/false
        """
        # Load .env from the working directory (or a parent) if present.
        # override=True lets .env values win over stale exported vars.
        load_dotenv(find_dotenv(usecwd=True), override=True)

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path) as f:
                config_data = json.load(f)

        for field_name in ("timeout_ms", "settle_ms"):
            value = os.environ.get(f"CLU_{field_name.upper()}")
            if value:
                config_data[field_name] = int(value)

        for field_name in (
            "break_on_error",
            "inherit_env",
            "legacy_status",
            "log_output",
        ):
            value = os.environ.get(f"CLU_{field_name.upper()}")
            if value:
                config_data[field_name] = _parse_bool(value)

        return cls.model_validate(config_data)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")
