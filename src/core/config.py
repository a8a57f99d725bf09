"""Runtime configuration model for Vantage.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_METRICS_URL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_WORKERS_CAP,
)
from core.errors import VantageConfigError

_LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True)
class VantageConfig:
    """Validated runtime configuration.

    Attributes:
        metrics_url: Base URL of the metrics store REST API.
        metrics_token: Optional bearer token sent with store requests.
        request_timeout_seconds: HTTP timeout for store requests.
        discovery_workers: Requested worker count, 0 for automatic sizing.
        log_level: Minimum structured log level name.
    """

    metrics_url: str
    metrics_token: str | None
    request_timeout_seconds: float
    discovery_workers: int
    log_level: str

    @classmethod
    def from_env(cls) -> "VantageConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            VantageConfigError: If environment values are invalid.
        """
        metrics_url = os.getenv("VANTAGE_METRICS_URL", DEFAULT_METRICS_URL).rstrip("/")
        metrics_token = os.getenv("VANTAGE_METRICS_TOKEN") or None
        timeout_value = os.getenv("VANTAGE_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT_SECONDS))
        workers_value = os.getenv("VANTAGE_DISCOVERY_WORKERS", "0")
        log_level_value = os.getenv("VANTAGE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
        return cls(
            metrics_url=metrics_url,
            metrics_token=metrics_token,
            request_timeout_seconds=_parse_timeout(timeout_value),
            discovery_workers=_parse_workers(workers_value),
            log_level=_parse_log_level(log_level_value),
        )


def resolve_worker_count(requested: int, cpu_count: int | None = None) -> int:
    """Resolve the effective discovery worker count.

    Args:
        requested: Configured worker count; values <= 0 select automatic sizing.
        cpu_count: Optional CPU count override, mostly for tests.

    Returns:
        Worker count clamped to ``[1, DEFAULT_WORKERS_CAP]``.
    """
    cpu = max(1, int(cpu_count or os.cpu_count() or 4))
    auto = max(2, cpu // 2)
    value = requested if requested > 0 else auto
    return max(1, min(value, DEFAULT_WORKERS_CAP))


def _parse_timeout(raw_value: str) -> float:
    """Parse the request timeout environment value.

    Raises:
        VantageConfigError: If the value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise VantageConfigError(
            "Invalid VANTAGE_REQUEST_TIMEOUT value: "
            f"expected number of seconds, got '{raw_value}'. "
            "Set VANTAGE_REQUEST_TIMEOUT to a positive number."
        ) from error
    if timeout <= 0:
        raise VantageConfigError(
            f"Invalid VANTAGE_REQUEST_TIMEOUT value: {timeout} must be positive. "
            "Set VANTAGE_REQUEST_TIMEOUT to a positive number."
        )
    return timeout


def _parse_workers(raw_value: str) -> int:
    """Parse the discovery worker count environment value.

    Raises:
        VantageConfigError: If the value is not a non-negative integer.
    """
    try:
        workers = int(raw_value)
    except ValueError as error:
        raise VantageConfigError(
            "Invalid VANTAGE_DISCOVERY_WORKERS value: "
            f"expected integer, got '{raw_value}'. "
            "Set VANTAGE_DISCOVERY_WORKERS to 0 (auto) or a positive count."
        ) from error
    if workers < 0:
        raise VantageConfigError(
            f"Invalid VANTAGE_DISCOVERY_WORKERS value: {workers} is negative. "
            "Set VANTAGE_DISCOVERY_WORKERS to 0 (auto) or a positive count."
        )
    return workers


def _parse_log_level(raw_value: str) -> str:
    level = raw_value.strip().lower()
    if level not in _LOG_LEVELS:
        raise VantageConfigError(
            f"Invalid VANTAGE_LOG_LEVEL value '{raw_value}'. "
            f"Use one of: {', '.join(_LOG_LEVELS)}."
        )
    return level
