"""
Kraken API Client for interacting with Kraken exchange.
"""
from datetime import datetime, timezone

import requests

from creds import find_api_url, find_kraken_credentials
from kraken_errors import (
    KrakenAPIConnectionError, KrakenAPIError, KrakenAPITimeoutError,
    KrakenAPITransportError,
)
from kraken_request import API_URL, API_VERSION, RequestBuilder
from kraken_response import parse_response


class KrakenAPI:
    """
    Client for interacting with Kraken API.

    Holds the credentials and one requests.Session for its whole lifetime.
    Every endpoint goes through call(), which builds, signs, sends and decodes
    a single request. Nothing call-specific is stored on the instance, so one
    client can be shared between threads; the only caveat is that two private
    calls made within the same millisecond get the same nonce.

    Example:
        api = KrakenAPI(api_key="...", api_secret="...")
        server_time = api.call('Time')
        cancelled = api.call('CancelOrder', True, {'txid': txid}, CancelOrderResponse)
    """

    def __init__(self, api_key=None, api_secret=None, base_url=API_URL, api_version=API_VERSION,
                 session=None, timeout=None, clock=None, verbose=False):
        """
        Initialize Kraken API client.

        Args:
            api_key: Kraken API key
            api_secret: Kraken API secret (base64)
            base_url: Base URL for Kraken API
            api_version: API version path segment
            session: requests.Session to reuse (default: a new one owned by the client)
            timeout: Request timeout in seconds passed to the transport (default: none)
            clock: Callable returning integer milliseconds, used for nonces
            verbose: If True, print debug messages
        """
        # Do not auto-discover credentials in the constructor to preserve
        # predictable behavior for unit tests. Use `from_env` for that.
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url
        self.timeout = timeout
        self.verbose = verbose
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.builder = RequestBuilder(
            api_key=api_key,
            api_secret=api_secret,
            base_url=base_url,
            api_version=api_version,
            clock=clock,
        )

    @classmethod
    def from_env(cls, readwrite: bool = False, env_file: str = '.env', **kwargs):
        """Construct a KrakenAPI using credentials discovered from env/.env.

        Args:
            readwrite: If True, use read-write credentials
            env_file: Path to .env file
            **kwargs: Passed to the constructor; base_url defaults to
                KRAKEN_API_URL when set
        """
        key, secret = find_kraken_credentials(readwrite=readwrite, env_file=env_file)
        kwargs.setdefault('base_url', find_api_url(API_URL))
        api = cls(api_key=key, api_secret=secret, **kwargs)
        if not key or not secret:
            kind = 'read-write' if readwrite else 'read-only'
            api.log('WARNING', f'No {kind} Kraken credentials found; only public endpoints will work')
        return api

    def __repr__(self):
        # Never show the credentials themselves
        auth = 'authenticated' if self.api_key and self.api_secret else 'public'
        return f"KrakenAPI(base_url={self.base_url!r}, {auth})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()

    def log(self, level, message):
        """
        Log a message.

        Args:
            level: Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
            message: Log message
        """
        if self.verbose or level in ['ERROR', 'WARNING']:
            timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')
            print(f"[{timestamp}] {level}: {message}")

    def call(self, endpoint, is_private=False, data=None, result_type=None):
        """
        Perform one API call and decode its result.

        Args:
            endpoint: API method name (e.g. 'AddOrder')
            is_private: Whether the endpoint needs authentication
            data: Mapping of form field names to string values (optional)
            result_type: Expected type of the result, e.g. a pydantic model;
                None returns the raw decoded JSON

        Returns:
            The decoded result

        Raises:
            KrakenRequestBuildError: If the request cannot be built (nothing is sent)
            KrakenSigningError: If the request cannot be signed (nothing is sent)
            KrakenAPITimeoutError: If request times out
            KrakenAPIConnectionError: If connection fails
            KrakenAPITransportError: For any other transport failure
            KrakenAPIStatusError: If the HTTP status is not 200
            KrakenAPIBodyError: If the response has no body
            KrakenAPIDecodeError: If the body or result cannot be decoded
            KrakenAPIServerError: If Kraken reports errors in the envelope
        """
        request = self.builder.build(endpoint, is_private, data)
        self.log('DEBUG', f'KrakenAPI.call: Calling {request.url}')

        response = self._send(endpoint, request)
        self.log('DEBUG', f'KrakenAPI.call: Response status={response.status_code}')

        try:
            return parse_response(response, result_type)
        except KrakenAPIError as e:
            self.log('DEBUG', f'KrakenAPI.call: {endpoint} failed ({e.error_type})')
            raise

    def query_public(self, endpoint, data=None, result_type=None):
        """Call a public endpoint."""
        return self.call(endpoint, False, data, result_type)

    def query_private(self, endpoint, data=None, result_type=None):
        """Call a private endpoint (requires credentials)."""
        return self.call(endpoint, True, data, result_type)

    def _send(self, endpoint, request):
        details = {'endpoint': endpoint, 'url': request.url}
        try:
            return self.session.send(request, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise KrakenAPITimeoutError(
                f"Request to Kraken API timed out after {self.timeout}s for {endpoint}",
                details=dict(details, timeout=self.timeout)
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise KrakenAPIConnectionError(
                f"Failed to connect to Kraken API for {endpoint}: {e}",
                details=details
            ) from e
        except requests.exceptions.RequestException as e:
            raise KrakenAPITransportError(
                f"Request failed for {endpoint}: {e}",
                details=details
            ) from e
