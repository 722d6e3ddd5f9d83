"""
Module: signer.py
Description: HMAC-SHA256 signing and timing-safe verification.

The Signer is constructed with the shared secret and a scheme and holds
no other state. The secret is decoded once into key bytes and never
appears in logs, reprs or error messages.

Dependencies: hmac, typing
Author: HookRelay Team
"""

import hmac
from typing import Union

from ..errors import SigningError
from .schemes import SignatureScheme, get_scheme


class Signer:
    """
    Signs and verifies messages for one secret and scheme.

    A signature is valid for exactly the (message_id, timestamp, body)
    triple it was computed over. With the simple scheme only the body is
    covered and the timestamp is checked for freshness separately.
    """

    def __init__(self, secret: str, scheme: Union[str, SignatureScheme] = "svix"):
        """
        Initialize signer.

        Args:
            secret: Shared secret ('whsec_<base64>' or any non-empty string)
            scheme: Scheme instance or scheme name

        Raises:
            SigningError: If the secret is missing or cannot be decoded
        """
        if not secret or not isinstance(secret, str):
            raise SigningError("secret is required")

        self.scheme = get_scheme(scheme) if isinstance(scheme, str) else scheme
        self._key = self.scheme.decode_secret(secret)
        if not self._key:
            raise SigningError("secret decodes to an empty key")

    def __repr__(self) -> str:
        return f"Signer(scheme={self.scheme.name!r})"

    def sign(self, message_id: str, timestamp: int, body: bytes) -> str:
        """
        Compute the signature header value.

        Args:
            message_id: Unique message identifier
            timestamp: Signing time as integer unix seconds
            body: Exact bytes that will be transmitted

        Returns:
            Signature in the scheme's header format

        Raises:
            SigningError: If the signing primitive fails
        """
        try:
            return self.scheme.sign(self._key, message_id, int(timestamp), body)
        except (TypeError, ValueError, UnicodeError) as e:
            raise SigningError(f"failed to sign message {message_id!r}: {type(e).__name__}") from e

    def verify(self, message_id: str, timestamp: int, body: bytes, signature: str) -> bool:
        """
        Check a received signature in constant time.

        Every candidate from the header is compared against the expected
        value with hmac.compare_digest, so the comparison time does not
        depend on the position of the first differing byte.

        Returns:
            True if any candidate signature matches, False otherwise
        """
        if not signature:
            return False

        try:
            expected = self.scheme.expected(self._key, message_id, int(timestamp), body).encode("ascii")
        except (TypeError, ValueError, UnicodeError):
            return False

        matched = False
        for candidate in self.scheme.candidates(signature):
            try:
                candidate_bytes = candidate.encode("ascii")
            except UnicodeEncodeError:
                continue
            if hmac.compare_digest(expected, candidate_bytes):
                matched = True
        return matched
