"""
Module: schemes.py
Description: Pluggable signature/header schemes.

Both schemes compute HMAC-SHA256 with the shared secret; they differ in
what is signed, how the signature is encoded and which headers carry
the message ID, timestamp and signature. Sender and receiver must be
configured with the same scheme.

Key Components:
- SvixScheme: 'svix-*' headers, HMAC over "id.timestamp.body", base64 'v1,' signatures
- SimpleScheme: 'X-Webhook-*' headers, HMAC over the body, hex signature
- get_scheme(): lookup by configured name

Dependencies: hmac, hashlib, base64, datetime
Author: HookRelay Team
"""

import base64
import binascii
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Dict, List

from ..errors import SigningError

SECRET_PREFIX = "whsec_"


class SignatureScheme:
    """Base class for signature schemes."""

    name = ""
    id_header = ""
    timestamp_header = ""
    signature_header = ""

    def decode_secret(self, secret: str) -> bytes:
        """Turn the configured secret into HMAC key bytes."""
        return secret.encode("utf-8")

    def format_timestamp(self, timestamp: int) -> str:
        """Render unix seconds as the timestamp header value."""
        return str(timestamp)

    def parse_timestamp(self, value: str) -> int:
        """
        Parse a timestamp header value into unix seconds.

        Only the canonical decimal form is accepted, so the value that is
        signed is byte-for-byte the header that was received.

        Raises:
            ValueError: If the value is not a timestamp in this scheme's format
        """
        if not (value.isascii() and value.isdigit()) or str(int(value)) != value:
            raise ValueError(f"timestamp {value!r} is not canonical unix seconds")
        return int(value)

    def sign(self, key: bytes, message_id: str, timestamp: int, body: bytes) -> str:
        """Return the signature header value."""
        raise NotImplementedError

    def candidates(self, header_value: str) -> List[str]:
        """Split a received signature header into comparable signatures."""
        return [header_value.strip()]

    def expected(self, key: bytes, message_id: str, timestamp: int, body: bytes) -> str:
        """Signature in the form candidates() yields."""
        return self.sign(key, message_id, timestamp, body)

    def headers(self, message_id: str, timestamp: int, signature: str) -> Dict[str, str]:
        """Build the outbound signature headers."""
        return {
            self.id_header: message_id,
            self.timestamp_header: self.format_timestamp(timestamp),
            self.signature_header: signature,
        }


class SvixScheme(SignatureScheme):
    """
    Enveloped scheme compatible with Svix.

    The signed content binds the message ID and timestamp to the body, so
    changing any of the three invalidates the signature. The header may
    carry several space separated 'v1,<sig>' entries during key rotation.
    """

    name = "svix"
    id_header = "svix-id"
    timestamp_header = "svix-timestamp"
    signature_header = "svix-signature"
    version = "v1"

    def decode_secret(self, secret: str) -> bytes:
        if secret.startswith(SECRET_PREFIX):
            try:
                return base64.b64decode(secret[len(SECRET_PREFIX):], validate=True)
            except (binascii.Error, ValueError) as e:
                raise SigningError("secret with 'whsec_' prefix is not valid base64") from e
        return secret.encode("utf-8")

    def expected(self, key: bytes, message_id: str, timestamp: int, body: bytes) -> str:
        signed_content = b".".join([message_id.encode("utf-8"), str(timestamp).encode("ascii"), body])
        digest = hmac.new(key, signed_content, hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def sign(self, key: bytes, message_id: str, timestamp: int, body: bytes) -> str:
        return f"{self.version},{self.expected(key, message_id, timestamp, body)}"

    def candidates(self, header_value: str) -> List[str]:
        signatures = []
        for entry in header_value.split():
            version, _, signature = entry.partition(",")
            if version == self.version and signature:
                signatures.append(signature)
        return signatures


class SimpleScheme(SignatureScheme):
    """
    Plain HMAC over the raw body.

    The timestamp travels as an RFC 3339 header and is only checked for
    freshness; it is not covered by the signature.
    """

    name = "simple"
    id_header = "X-Webhook-Id"
    timestamp_header = "X-Webhook-Timestamp"
    signature_header = "X-Webhook-Signature"

    def format_timestamp(self, timestamp: int) -> str:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def parse_timestamp(self, value: str) -> int:
        value = value.strip()
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp())

    def sign(self, key: bytes, message_id: str, timestamp: int, body: bytes) -> str:
        return hmac.new(key, body, hashlib.sha256).hexdigest()

    def candidates(self, header_value: str) -> List[str]:
        return [header_value.strip().lower()]


_SCHEMES = {
    SvixScheme.name: SvixScheme,
    SimpleScheme.name: SimpleScheme,
}


def get_scheme(name: str) -> SignatureScheme:
    """
    Return a scheme instance by name.

    Raises:
        SigningError: If the name is unknown
    """
    try:
        return _SCHEMES[name]()
    except KeyError:
        raise SigningError(
            f"unknown signature scheme {name!r}, expected one of: {', '.join(sorted(_SCHEMES))}"
        ) from None
