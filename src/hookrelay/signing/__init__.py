"""
Package: signing
Description: Message signing for HookRelay.

Provides the HMAC-SHA256 Signer and the pluggable header/signature
schemes shared by the delivery and verification sides.
"""

from .schemes import SignatureScheme, SimpleScheme, SvixScheme, get_scheme
from .signer import Signer

__all__ = ["Signer", "SignatureScheme", "SvixScheme", "SimpleScheme", "get_scheme"]
