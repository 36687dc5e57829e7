"""
GATE Core Config — Engine Tunables
====================================
Tunables come from the GATE_ACCESS dict in Django settings.
Services receive an EngineConfig at construction and never read
settings at call time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Hard ceiling on a credential's max_usage. Settings may only lower it.
MAX_USAGE_CEILING = 50


@dataclass(frozen=True)
class EngineConfig:
    """
    Fields:
        pin_length:            Digits in a PIN code.
        pin_collision_retries: PIN draws before CapacityExceeded.
        qr_token_bytes:        Random bytes behind a QR token.
        max_usage_limit:       Upper bound for a credential's max_usage.
        cas_retry_attempts:    Optimistic-update attempts before Conflict.
        async_notifications:   Hand sink delivery to a background executor.
        access_log_capacity:   Newest access-log entries kept in memory.
    """

    pin_length: int = 6
    pin_collision_retries: int = 10
    qr_token_bytes: int = 24
    max_usage_limit: int = MAX_USAGE_CEILING
    cas_retry_attempts: int = 3
    async_notifications: bool = True
    access_log_capacity: int = 10_000

    def __post_init__(self) -> None:
        for name in (
            "pin_length",
            "pin_collision_retries",
            "qr_token_bytes",
            "max_usage_limit",
            "cas_retry_attempts",
            "access_log_capacity",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}.")
        if self.max_usage_limit > MAX_USAGE_CEILING:
            raise ValueError(
                f"max_usage_limit must be <= {MAX_USAGE_CEILING}, got {self.max_usage_limit}."
            )
        if self.qr_token_bytes < 16:
            raise ValueError("qr_token_bytes must be >= 16.")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EngineConfig":
        known = {
            "PIN_LENGTH": "pin_length",
            "PIN_COLLISION_RETRIES": "pin_collision_retries",
            "QR_TOKEN_BYTES": "qr_token_bytes",
            "MAX_USAGE_LIMIT": "max_usage_limit",
            "CAS_RETRY_ATTEMPTS": "cas_retry_attempts",
            "ASYNC_NOTIFICATIONS": "async_notifications",
            "ACCESS_LOG_CAPACITY": "access_log_capacity",
        }
        unknown = sorted(set(values) - set(known))
        if unknown:
            raise ValueError(f"Unknown GATE_ACCESS keys: {unknown}")
        return cls(**{known[key]: value for key, value in values.items()})


def load_engine_config(overrides: Optional[Mapping[str, Any]] = None) -> EngineConfig:
    """
    Build EngineConfig from settings.GATE_ACCESS, then apply overrides.
    Falls back to defaults when Django settings are not configured.
    """
    from django.conf import settings

    values: dict = {}
    if settings.configured:
        values.update(getattr(settings, "GATE_ACCESS", {}) or {})
    if overrides:
        values.update(overrides)
    return EngineConfig.from_mapping(values)
