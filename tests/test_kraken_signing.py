#!/usr/bin/env python3
"""
Tests for Kraken request signing and nonce generation.
"""
import base64

import pytest

from kraken_errors import KrakenSigningError
from kraken_signing import epoch_millis, make_nonce, sign

# Example published in the Kraken REST API authentication docs
DOC_SECRET = "kQH5HW/8p1uGOVjbgWA7FunAmGO8lsSUXNsu3eow76sz84Q18fWxnyRzBHCd3pd5nE9qa99HAZtuZuj6F1huXg=="
DOC_NONCE = "1616492376594"
DOC_PATH = "/0/private/AddOrder"
DOC_BODY = "nonce=1616492376594&ordertype=limit&pair=XBTUSD&price=37500&type=buy&volume=1.25"
DOC_SIGNATURE = "4/dpxb3iT4tp/ZCVEwSnEsLxx0bqyhLpdfOpc6fn7OR8+UClSV5n9E6aSS8MPtnRfp32bAb0nmbRn6H8ndwLUQ=="

SECRET = base64.b64encode(b"test_secret_key").decode()


class TestSign:
    """Test signature generation."""

    def test_known_answer(self):
        """Signature matches the value from the Kraken documentation."""
        assert sign(DOC_SECRET, DOC_PATH, DOC_BODY, DOC_NONCE) == DOC_SIGNATURE

    def test_integer_nonce_same_as_string(self):
        """The nonce is hashed in its decimal string form."""
        assert sign(DOC_SECRET, DOC_PATH, DOC_BODY, int(DOC_NONCE)) == DOC_SIGNATURE

    def test_signature_is_base64_sha512(self):
        """Signature decodes to a 64 byte HMAC-SHA512 digest."""
        signature = sign(SECRET, "/0/private/Balance", "nonce=1234567890000", "1234567890000")

        assert isinstance(signature, str)
        assert len(base64.b64decode(signature)) == 64

    def test_deterministic(self):
        """Same inputs give the same signature."""
        args = (SECRET, "/0/private/Balance", "nonce=1", "1")
        assert sign(*args) == sign(*args)

    @pytest.mark.parametrize("index,replacement", [
        (0, base64.b64encode(b"other_secret").decode()),
        (1, "/0/private/TradeBalance"),
        (2, "nonce=1&asset=ZUSD"),
        (3, "2"),
    ])
    def test_any_input_change_changes_signature(self, index, replacement):
        """Changing secret, path, body or nonce changes the signature."""
        args = [SECRET, "/0/private/Balance", "nonce=1", "1"]
        original = sign(*args)
        args[index] = replacement

        assert sign(*args) != original

    def test_empty_body(self):
        """An empty body still signs; only the nonce is hashed."""
        signature = sign(SECRET, "/0/private/Balance", "", "1234567890000")
        assert len(base64.b64decode(signature)) == 64

    @pytest.mark.parametrize("secret", ["not base64!!", "abc", "ünïcode"])
    def test_invalid_secret(self, secret):
        """Invalid base64 secrets raise KrakenSigningError."""
        with pytest.raises(KrakenSigningError) as exc_info:
            sign(secret, "/0/private/Balance", "nonce=1", "1")

        assert exc_info.value.error_type == "signing"


class TestNonce:
    """Test nonce generation."""

    def test_nonce_format(self):
        """Nonce is a millisecond timestamp in decimal."""
        nonce = make_nonce()
        assert nonce.isdigit()
        assert len(nonce) >= 13

    def test_nonce_uses_clock(self):
        """The injected clock drives the nonce."""
        assert make_nonce(lambda: 1616492376594) == "1616492376594"

    def test_epoch_millis_close_to_now(self):
        """epoch_millis is in milliseconds, not seconds or nanoseconds."""
        import time
        assert abs(epoch_millis() - time.time() * 1000) < 5000

    def test_frozen_clock_repeats_nonce(self):
        """Two nonces read in the same millisecond collide.

        This is the known weakness of clock-derived nonces: Kraken would
        reject the second request.
        """
        first = make_nonce(lambda: 1700000000000)
        second = make_nonce(lambda: 1700000000000)

        assert first == second
