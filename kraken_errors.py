"""
Exceptions raised by the Kraken REST client.

Every failure a call can produce derives from KrakenAPIError so callers can
catch the whole family at once and branch on ``error_type`` when they need to.
"""
from typing import Optional, Dict, List


class KrakenAPIError(Exception):
    """Base exception for Kraken API errors."""
    def __init__(self, message: str, error_type: str = "unknown", details: Optional[Dict] = None):
        super().__init__(message)
        self.error_type = error_type
        self.details = details or {}


class KrakenRequestBuildError(KrakenAPIError):
    """Raised when a request cannot be constructed. Nothing was sent."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, error_type="construction", details=details)


class KrakenSigningError(KrakenAPIError):
    """Raised when the API-Sign header cannot be computed. Nothing was sent."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, error_type="signing", details=details)


class KrakenAPITransportError(KrakenAPIError):
    """Raised when the HTTP request itself fails."""
    def __init__(self, message: str, error_type: str = "transport", details: Optional[Dict] = None):
        super().__init__(message, error_type=error_type, details=details)


class KrakenAPITimeoutError(KrakenAPITransportError):
    """Raised when API request times out."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, error_type="timeout", details=details)


class KrakenAPIConnectionError(KrakenAPITransportError):
    """Raised when connection to Kraken fails."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, error_type="connection", details=details)


class KrakenAPIStatusError(KrakenAPIError):
    """Raised when Kraken answers with anything other than HTTP 200."""
    def __init__(self, message: str, status_code: int, error_type: str = "http_status",
                 details: Optional[Dict] = None):
        details = details or {}
        details['status_code'] = status_code
        super().__init__(message, error_type=error_type, details=details)
        self.status_code = status_code


class KrakenAPIRateLimitError(KrakenAPIStatusError):
    """Raised when API rate limit is exceeded (HTTP 429)."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, status_code=429, error_type="rate_limit", details=details)


class KrakenAPIBodyError(KrakenAPIError):
    """Raised when a 200 response carries no body."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, error_type="body", details=details)


class KrakenAPIDecodeError(KrakenAPIError):
    """Raised when the body is not a valid envelope or the result has the wrong shape."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, error_type="decode", details=details)


class KrakenAPIServerError(KrakenAPIError):
    """
    Raised when the envelope's ``error`` list is non-empty.

    Kraken error strings look like ``EOrder:Invalid price``: a severity letter,
    a category, then a message. ``errors`` keeps them verbatim.
    """
    def __init__(self, errors: List[str], details: Optional[Dict] = None):
        self.errors = list(errors)
        details = details or {}
        details['errors'] = self.errors
        super().__init__(f"Kraken API error: {', '.join(self.errors)}",
                         error_type="server_error", details=details)

    @property
    def categories(self) -> List[str]:
        """Error categories without the severity prefix, e.g. ``['Order']``."""
        categories = []
        for error in self.errors:
            if ':' not in error:
                continue
            head = error.split(':', 1)[0]
            if len(head) > 1 and head[0] in ('E', 'W'):
                head = head[1:]
            categories.append(head)
        return categories
