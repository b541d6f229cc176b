"""
Request construction for the Kraken REST API.

Every call is a POST with a form encoded body. Private calls additionally get
a fresh nonce in the body and the API-Key / API-Sign headers.
"""
import re
import urllib.parse

import requests

from kraken_errors import KrakenRequestBuildError
from kraken_signing import make_nonce, sign

API_URL = "https://api.kraken.com"
API_VERSION = "0"
USER_AGENT = "krakenrest/0.1.0"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_ENDPOINT_RE = re.compile(r"[A-Za-z0-9_\-]+")


def encode_form(data):
    """
    Form encode a mapping of string fields.

    Keys are sorted so the encoding is deterministic; the exact string
    returned is what gets hashed and what goes on the wire.
    """
    return urllib.parse.urlencode(sorted(data.items()))


class RequestBuilder:
    """Turns (endpoint, public/private, form data) into a prepared HTTP request."""

    def __init__(self, api_key=None, api_secret=None, base_url=API_URL, api_version=API_VERSION, clock=None):
        """
        Args:
            api_key: Kraken API key, sent verbatim in the API-Key header
            api_secret: Base64 encoded Kraken API secret
            base_url: Scheme and host of the API
            api_version: Version path segment
            clock: Callable returning integer milliseconds, used for nonces
        """
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = base_url.rstrip('/')
        self.api_version = api_version
        self.clock = clock

    def url_path(self, endpoint, is_private):
        """Path component that is both requested and signed, e.g. '/0/private/AddOrder'."""
        scope = 'private' if is_private else 'public'
        return f"/{self.api_version}/{scope}/{endpoint}"

    def build(self, endpoint, is_private=False, data=None):
        """
        Build a POST request for an endpoint.

        The caller's data is copied, never modified. For private calls any
        caller supplied 'nonce' is replaced with a freshly generated one.

        Args:
            endpoint: API method name (e.g. 'AddOrder', 'Time')
            is_private: Whether the endpoint needs authentication
            data: Mapping of form field names to string values (optional)

        Returns:
            requests.PreparedRequest ready to be sent

        Raises:
            KrakenRequestBuildError: If the endpoint, data, credentials or URL are invalid
            KrakenSigningError: If the signature cannot be computed
        """
        if not isinstance(endpoint, str) or not _ENDPOINT_RE.fullmatch(endpoint):
            raise KrakenRequestBuildError(
                f"Invalid endpoint name: {endpoint!r}",
                details={'endpoint': endpoint}
            )

        form = self._copy_form(endpoint, data)
        urlpath = self.url_path(endpoint, is_private)
        url = f"{self.base_url}{urlpath}"

        headers = {
            'User-Agent': USER_AGENT,
            'Content-Type': FORM_CONTENT_TYPE,
        }

        if is_private:
            if not self.api_key or not self.api_secret:
                raise KrakenRequestBuildError(
                    "API key and secret required for private endpoints",
                    details={'endpoint': endpoint}
                )
            nonce = make_nonce(self.clock)
            form['nonce'] = nonce
            body = encode_form(form)
            headers['API-Key'] = self.api_key
            headers['API-Sign'] = sign(self.api_secret, urlpath, body, nonce)
        else:
            body = encode_form(form)

        try:
            return requests.Request('POST', url, data=body, headers=headers).prepare()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise KrakenRequestBuildError(
                f"Failed to create api request for {endpoint}: {e}",
                details={'endpoint': endpoint, 'url': url}
            ) from e

    @staticmethod
    def _copy_form(endpoint, data):
        form = {}
        for key, value in (data or {}).items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise KrakenRequestBuildError(
                    f"Form fields must be strings, got {type(key).__name__}={type(value).__name__} "
                    f"for {key!r}",
                    details={'endpoint': endpoint, 'field': key}
                )
            form[key] = value
        return form
