"""Runtime configuration read from environment variables."""
from __future__ import annotations

import os
from typing import Final, Optional


def env_flag(name: str, *, default: bool = False) -> bool:
    """Return a boolean flag from environment variables.

    ``1``, ``true``, ``yes`` and ``on`` count as ``True``; ``0``, ``false``,
    ``no`` and ``off`` count as ``False``.  Unset or unrecognised values fall
    back to ``default``.
    """
    value = os.getenv(name)
    if value is None:
        return default

    normalised = value.strip().lower()
    if normalised in {"1", "true", "yes", "on"}:
        return True
    if normalised in {"0", "false", "no", "off"}:
        return False
    return default


def normalize_webhook_base(raw_url: str) -> str:
    """Strip trailing slashes and an optional ``/webhook`` suffix.

    ``WEBHOOK_URL`` may be configured either as the service root or as the
    full webhook endpoint; both produce the same base so the registered
    webhook is always ``<base>/webhook``.
    """
    normalized = raw_url.rstrip("/")
    if normalized.endswith("/webhook"):
        normalized = normalized[: -len("/webhook")]
        normalized = normalized.rstrip("/")
    return normalized


def require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"{name} environment variable is not set")
    return value


def webhook_base() -> Optional[str]:
    raw = os.getenv("WEBHOOK_URL")
    return normalize_webhook_base(raw) if raw else None


LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()
DROP_PENDING_UPDATES: Final[bool] = env_flag("DROP_PENDING_UPDATES", default=False)

__all__ = [
    "DROP_PENDING_UPDATES",
    "LOG_LEVEL",
    "env_flag",
    "normalize_webhook_base",
    "require_env",
    "webhook_base",
]
