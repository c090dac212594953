"""Utility functions and helpers for the bootstrapctl application."""
import logging
import secrets
import string
from typing import Any

from ..exceptions import EnrichmentError

logger = logging.getLogger("bootstrapctl.utils")

# Bootstrap token ids are validated by the API server against [a-z0-9]
TOKEN_ALPHABET = string.ascii_lowercase + string.digits

REDACT_KEYS = ("api_key", "password", "secret", "token")


def random_string(length: int, alphabet: str = TOKEN_ALPHABET) -> str:
    """Return ``length`` characters drawn from the OS CSPRNG.

    Raises:
        EnrichmentError: If the secure random source is unavailable
    """
    if length <= 0:
        raise ValueError("length must be positive")
    try:
        return ''.join(secrets.choice(alphabet) for _ in range(length))
    except (NotImplementedError, OSError) as e:
        raise EnrichmentError(f"secure random source unavailable: {e}") from e


def redact_sensitive_data(data: Any) -> Any:
    """Recursively redact sensitive data from dictionaries and lists.

    Args:
        data: Input data that might contain sensitive information

    Returns:
        Data with sensitive values redacted
    """
    if isinstance(data, dict):
        return {
            k: "[REDACTED]" if any(
                redact_key in str(k).lower()
                for redact_key in REDACT_KEYS
            ) else redact_sensitive_data(v)
            for k, v in data.items()
        }
    elif isinstance(data, (list, tuple)):
        return [redact_sensitive_data(item) for item in data]
    return data
