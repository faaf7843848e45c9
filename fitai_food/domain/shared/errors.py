"""
Domain exceptions.

Typed exceptions for explicit error handling across the
enhancement pipeline.
"""

from __future__ import annotations


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# FOOD DOMAIN EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class FoodDomainError(DomainError):
    """Base exception for food recognition domain."""

    pass


class RecognitionError(FoodDomainError):
    """
    AI food recognition failed.

    Raised when:
    - Vision provider call fails
    - Vision provider returns malformed output

    Example:
        >>> raise RecognitionError("Vision model returned invalid JSON")
    """

    pass


class EnrichmentError(FoodDomainError):
    """
    Enhancement of a single dish failed.

    Raised when a dish cannot be classified, matched or corrected.
    The orchestrator isolates it and degrades the dish to a
    vision-only record.

    Example:
        >>> raise EnrichmentError("Enhancement failed for 'biryani'")
    """

    pass


class InvalidQuantityError(FoodDomainError):
    """
    Invalid portion quantity specified.

    Raised when:
    - Quantity <= 0
    - Quantity is not a finite number

    Example:
        >>> raise InvalidQuantityError("Portion must be positive: -50g")
    """

    pass


# ═══════════════════════════════════════════════════════════
# VALIDATION EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ValidationError(DomainError):
    """
    Input validation failed.

    Raised when:
    - Image payload is malformed
    - Caller passes an empty dish list
    - Feedback list is empty

    Example:
        >>> raise ValidationError("Expected base64 data URL (data:image/...)")
    """

    pass


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all external service errors.

    Example:
        >>> raise ExternalServiceError("USDA API error: 500")
    """

    pass


class RateLimitError(ExternalServiceError):
    """
    API rate limit exceeded.

    Example:
        >>> raise RateLimitError("USDA rate limit (attempt 1)")
    """

    pass


class TimeoutError(ExternalServiceError):  # noqa: A001
    """
    API call timed out.

    Example:
        >>> raise TimeoutError("OpenFoodFacts API timeout")
    """

    pass


class ServiceUnavailableError(ExternalServiceError):
    """
    External service unavailable or not configured.

    Raised when:
    - Service down
    - Circuit breaker open
    - Missing API key

    Example:
        >>> raise ServiceUnavailableError("USDA API key not configured")
    """

    pass
