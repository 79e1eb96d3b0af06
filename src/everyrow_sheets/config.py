"""Runtime configuration for the everyrow client and task polling."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from everyrow_sheets.client.api_client import DEFAULT_BASE_URL
from everyrow_sheets.exceptions import ConfigurationError
from everyrow_sheets.tasks.scheduler import BackoffPolicy

DEFAULT_STATE_PATH = Path("~/.everyrow_sheets/pending_task.json")


@dataclass
class ApiSettings:
    """everyrow API connection settings."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 30.0
    max_retries: int = 2
    retry_base_delay: float = 1.0


@dataclass
class PollingSettings:
    """Task polling schedule, in seconds."""

    initial_interval: float = 2.0
    growth_factor: float = 1.5
    max_interval: float = 10.0
    budget: float = 120.0

    def to_policy(self) -> BackoffPolicy:
        return BackoffPolicy(
            initial_interval=self.initial_interval,
            growth_factor=self.growth_factor,
            max_interval=self.max_interval,
            budget=self.budget,
        )


@dataclass
class Settings:
    """Application settings grouped by concern."""

    api: ApiSettings = field(default_factory=ApiSettings)
    polling: PollingSettings = field(default_factory=PollingSettings)
    state_path: Path = DEFAULT_STATE_PATH

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults for local use."""

        return cls(
            api=ApiSettings(
                base_url=os.getenv("EVERYROW_API_URL", DEFAULT_BASE_URL),
                timeout_seconds=_env_float("EVERYROW_TIMEOUT_SECONDS", 30.0),
                max_retries=_env_int("EVERYROW_MAX_RETRIES", 2),
                retry_base_delay=_env_float("EVERYROW_RETRY_BASE_DELAY", 1.0),
            ),
            polling=PollingSettings(
                initial_interval=_env_float("EVERYROW_POLL_INITIAL_SECONDS", 2.0),
                growth_factor=_env_float("EVERYROW_POLL_GROWTH", 1.5),
                max_interval=_env_float("EVERYROW_POLL_MAX_SECONDS", 10.0),
                budget=_env_float("EVERYROW_POLL_BUDGET_SECONDS", 120.0),
            ),
            state_path=Path(os.getenv("EVERYROW_STATE_PATH", str(DEFAULT_STATE_PATH))).expanduser(),
        )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
