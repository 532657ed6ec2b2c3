"""
Centralized constants for the engine.

Usage:
    from crud_shared.config.constants import Limits, ErrorCodes

    if len(term) > Limits.MAX_SEARCH_TERM_LENGTH: ...
"""

from typing import Final


# =============================================================================
# Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # Search terms longer than this are rejected at the transport boundary
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 200
    DEFAULT_PAGE: Final[int] = 0


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCodes:
    """Machine-readable codes carried in error responses."""

    RESOURCE_NOT_FOUND: Final[str] = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT: Final[str] = "RESOURCE_CONFLICT"
    INVALID_ARGUMENT: Final[str] = "INVALID_ARGUMENT"
    PATCH_FAILED: Final[str] = "PATCH_FAILED"
    METHOD_NOT_ALLOWED: Final[str] = "METHOD_NOT_ALLOWED"


# Default message surfaced when an operation check denies without details
DEFAULT_DENIED_MESSAGE: Final[str] = "Operation is not allowed"
