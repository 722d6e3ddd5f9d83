"""
Package: verification
Description: Inbound webhook verification for HookRelay.

Provides the VerificationEngine (headers, freshness, signature, body)
and the optional recently-seen message ID cache.
"""

from .engine import VerificationContext, VerificationEngine
from .replay import RecentMessageCache

__all__ = ["VerificationEngine", "VerificationContext", "RecentMessageCache"]
