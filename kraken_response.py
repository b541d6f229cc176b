"""
Decoding of Kraken API responses.

Every endpoint answers with the same envelope:

    {"error": ["EOrder:Invalid price", ...], "result": ...}

A non-empty error list means the call failed, whatever the HTTP status or
the shape of "result". Only when it is empty is "result" decoded into the
type the caller asked for.
"""
import functools
from typing import Any, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from kraken_errors import (
    KrakenAPIBodyError, KrakenAPIDecodeError, KrakenAPIRateLimitError,
    KrakenAPIServerError, KrakenAPIStatusError,
)


class Envelope(BaseModel):
    """Uniform wrapper around every Kraken response."""

    error: Optional[List[str]] = None
    result: Any = None


@functools.lru_cache(maxsize=None)
def _adapter(result_type):
    return TypeAdapter(result_type)


def decode_result(result, result_type=None):
    """
    Validate a raw result against the expected type.

    Args:
        result: Decoded JSON value of the envelope's "result" field
        result_type: pydantic model or any type TypeAdapter accepts; None
            returns the raw value untouched

    Raises:
        KrakenAPIDecodeError: If the result does not fit result_type
    """
    if result_type is None:
        return result
    try:
        return _adapter(result_type).validate_python(result)
    except ValidationError as e:
        raise KrakenAPIDecodeError(
            f"Failed to unmarshal response: {e}",
            details={'result_type': getattr(result_type, '__name__', str(result_type))}
        ) from e


def decode_envelope(body, result_type=None):
    """
    Decode a response body into the caller's result type.

    Args:
        body: Raw response body (bytes or str)
        result_type: Expected type of "result" (optional)

    Returns:
        The decoded result

    Raises:
        KrakenAPIDecodeError: If the body is not a valid envelope
        KrakenAPIServerError: If the envelope carries errors
    """
    try:
        envelope = Envelope.model_validate_json(body)
    except ValidationError as e:
        raise KrakenAPIDecodeError(f"Failed to unmarshal response: {e}") from e

    if envelope.error:
        raise KrakenAPIServerError(envelope.error)

    return decode_result(envelope.result, result_type)


def parse_response(response, result_type=None):
    """
    Check the status of an HTTP response and decode its envelope.

    The body of a non-200 response is never looked at, even if it holds a
    well formed envelope.

    Args:
        response: requests.Response returned by the transport
        result_type: Expected type of "result" (optional)

    Returns:
        The decoded result

    Raises:
        KrakenAPIStatusError: If the status is not 200 (KrakenAPIRateLimitError for 429)
        KrakenAPIBodyError: If the response has no body
        KrakenAPIDecodeError: If the body is not a valid envelope
        KrakenAPIServerError: If the envelope carries errors
    """
    status = response.status_code
    if status != 200:
        if status == 429:
            raise KrakenAPIRateLimitError("Kraken API rate limit exceeded")
        raise KrakenAPIStatusError(
            f"Failed to get a successful response. Status {status}",
            status_code=status
        )

    body = response.content
    if not body:
        raise KrakenAPIBodyError("Failed to get a response body")

    return decode_envelope(body, result_type)
