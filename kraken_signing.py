"""
Kraken request signing.

Signature = HMAC-SHA512 of (URI path + SHA256(nonce + POST data)), keyed with
the base64 decoded API secret, then base64 encoded.
"""
import base64
import binascii
import hashlib
import hmac
import time

from kraken_errors import KrakenSigningError


def epoch_millis():
    """Current wall-clock time in whole milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def make_nonce(clock=None):
    """
    Generate a nonce for a private request.

    The nonce is only as unique as the clock: two calls inside the same
    millisecond get the same value and Kraken rejects the second one.

    Args:
        clock: Callable returning integer milliseconds (default: epoch_millis)

    Returns:
        Nonce as a decimal string
    """
    clock = clock or epoch_millis
    return str(int(clock()))


def sign(api_secret, urlpath, encoded_body, nonce):
    """
    Generate Kraken API signature for authentication.

    Args:
        api_secret: Base64 encoded API secret
        urlpath: URI path of the endpoint, e.g. '/0/private/AddOrder'
        encoded_body: Form encoded POST data, nonce field included
        nonce: Nonce value sent in the body

    Returns:
        Base64 encoded signature

    Raises:
        KrakenSigningError: If the secret is not valid base64
    """
    try:
        secret = base64.b64decode(api_secret, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise KrakenSigningError(f"API secret is not valid base64: {e}") from e

    encoded = (str(nonce) + encoded_body).encode()
    message = urlpath.encode() + hashlib.sha256(encoded).digest()

    mac = hmac.new(secret, message, hashlib.sha512)
    return base64.b64encode(mac.digest()).decode()
