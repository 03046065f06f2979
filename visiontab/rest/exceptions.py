from ..core.exceptions import ExternalCallError


class VisionClientError(ExternalCallError):
    """Base exception for all client errors."""


class VisionRateLimitError(VisionClientError):
    """Raised when API returns 429 Too Many Requests."""


class VisionValidationError(VisionClientError):
    """Raised when the API response format is invalid or malformed."""


class VisionHTTPError(VisionClientError):
    """Raised for unexpected non-2xx HTTP responses."""


class VisionResponseError(VisionClientError):
    """Raised when a successful HTTP response carries an error status for the image or file."""
