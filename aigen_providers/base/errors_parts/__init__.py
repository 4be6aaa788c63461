"""Errors parts package public surface.

Prefer importing from `aigen_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .classification import (
    RETRYABLE_CODES,
    classify_exception,
    classify_status,
    error_from_status,
    wrap_transport_error,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "RETRYABLE_CODES",
    "classify_exception",
    "classify_status",
    "error_from_status",
    "wrap_transport_error",
]
