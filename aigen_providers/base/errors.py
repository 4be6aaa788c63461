"""Unified provider error taxonomy public surface.

Re-exports the one-class-per-file implementations under
``aigen_providers.base.errors_parts`` so callers have a single stable import
path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import (
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
