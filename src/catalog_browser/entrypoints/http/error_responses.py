"""REST API error response models.

Structured error responses that provide consistent format for all HTTP errors.
"""

from pydantic import BaseModel, ConfigDict


class ErrorDetail(BaseModel):
    """Individual error detail for field-level errors.

    Used in validation errors to indicate which field failed and why.
    """

    field: str
    message: str
    code: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "field": "year",
                "message": "Must be a four-digit year",
                "code": "INVALID_YEAR",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Structured error response format.

    Supports:
    - Simple errors (just detail and code)
    - Field-level validation errors (detail + errors array)
    - Error codes for i18n (code field can be used for translation keys)
    - Upstream failures (retryable tells clients whether repeating can help)

    Examples:
        Simple error:
            {
                "detail": "Title not found",
                "code": "NOT_FOUND"
            }

        Validation error with field details:
            {
                "detail": "Validation failed",
                "code": "VALIDATION_ERROR",
                "errors": [
                    {
                        "field": "year",
                        "message": "Must be a four-digit year",
                        "code": "INVALID_YEAR"
                    }
                ]
            }
    """

    detail: str
    code: str | None = None
    errors: list[ErrorDetail] | None = None
    retryable: bool | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"detail": "Title with identifier 'tt0000000' not found", "code": "NOT_FOUND"},
                {
                    "detail": "Upstream request timed out",
                    "code": "TRANSPORT_ERROR",
                    "retryable": True,
                },
                {
                    "detail": "Validation failed",
                    "code": "VALIDATION_ERROR",
                    "errors": [
                        {
                            "field": "year",
                            "message": "Must be between 1888 and 2027",
                            "code": "YEAR_OUT_OF_RANGE",
                        },
                    ],
                },
            ]
        }
    )
