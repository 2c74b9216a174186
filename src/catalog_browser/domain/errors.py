"""Domain error classes.

Protocol-agnostic errors that represent browsing and upstream failures.
These errors are translated to user-facing load states by the pagination
controller and to HTTP responses by the HTTP entrypoint.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain errors.

    Protocol-agnostic. Contains business error information that
    can be translated to a load state or an HTTP response.
    """

    # Default error code (can be used as i18n key)
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        """Create a domain error.

        Args:
            message: Human-readable error message (default locale)
            **context: Additional context for error (e.g., field names, values)
        """
        self.message = message
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured format for protocol translation."""
        return {
            "message": self.message,
            "code": self.error_code,
            **self.context,
        }


class ValidationError(DomainError):
    """Business rule validation error.

    Examples:
        - year filter that is not a four-digit year
        - page number below 1
        - empty title identifier

    Protocol mappings:
        - REST: 422 Unprocessable Entity
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
        **context: Any,
    ) -> None:
        """Create a validation error.

        Args:
            message: Overall validation error message (optional if errors provided)
            errors: List of field-specific errors, each with 'field' and 'message'
                   Example: [{"field": "year", "message": "Must be a four-digit year"}]
            **context: Additional context
        """
        self.errors: list[dict[str, str]] | None
        if errors:
            self.errors = errors
            msg = message or "Validation failed"
        else:
            self.errors = None
            msg = message or "Validation error"

        super().__init__(msg, **context)

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured format."""
        if self.errors:
            return {
                "message": self.message,
                "code": self.error_code,
                "errors": self.errors,
                **self.context,
            }
        return super().to_dict()


class InvalidIdentifier(ValidationError):
    """Detail lookup requested with a missing or blank title id.

    Raised before any network call is made.
    """

    def __init__(self, identifier: str | None = None) -> None:
        super().__init__(
            errors=[
                {
                    "field": "title_id",
                    "message": "Must be a non-empty title identifier",
                    "code": "INVALID_IDENTIFIER",
                }
            ],
            identifier=identifier,
        )


class NotFoundError(DomainError):
    """Resource not found.

    Examples:
        - Title with ID not found upstream
        - Browse session doesn't exist

    Protocol mappings:
        - REST: 404 Not Found
    """

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str | None = None, **context: Any) -> None:
        """Create a not found error.

        Args:
            resource: Type of resource (e.g., "Title", "BrowseSession")
            identifier: Resource identifier
            **context: Additional context
        """
        if identifier:
            message = f"{resource} with identifier '{identifier}' not found"
        else:
            message = f"{resource} not found"

        super().__init__(message, resource=resource, identifier=identifier, **context)


# ==============================================================================
# Upstream Errors
# ==============================================================================


class UpstreamError(DomainError):
    """Base class for failures of the upstream search API.

    ``retryable`` tells the presentation layer whether repeating the same
    request can succeed without the user changing their input.
    """

    error_code: str = "UPSTREAM_ERROR"
    kind: str = "upstream"
    retryable: bool = False


class TransportError(UpstreamError):
    """Network failure, timeout, non-2xx status or unreadable payload.

    Protocol mappings:
        - REST: 502 Bad Gateway
    """

    error_code: str = "TRANSPORT_ERROR"
    kind: str = "transport"
    retryable: bool = True


class UpstreamDomainError(UpstreamError):
    """Upstream answered but explicitly reported a failure.

    Examples:
        - "Too many results."
        - "Invalid API key!"

    Protocol mappings:
        - REST: 502 Bad Gateway
    """

    error_code: str = "UPSTREAM_DOMAIN_ERROR"
    kind: str = "domain"


class NoMatchesError(UpstreamDomainError):
    """Upstream reported that nothing matches the request.

    The pagination controller treats this as exhaustion, not failure.

    Protocol mappings:
        - REST: 404 Not Found
    """

    error_code: str = "NO_MATCHES"


class PartialEnrichmentLoss(DomainError):
    """A detail lookup failed while filtering a page by genre.

    Never surfaces as a top-level error: the affected record is dropped
    from the page and the loss is logged.
    """

    error_code: str = "PARTIAL_ENRICHMENT_LOSS"

    def __init__(self, title_id: str, cause: Exception) -> None:
        super().__init__(
            f"Genre lookup failed for '{title_id}'; record dropped",
            title_id=title_id,
            cause=type(cause).__name__,
        )
