"""
Module: utils
Description: Package initialization for utility functions.

This package contains shared helpers used throughout HookRelay:
- logger: Structured logging configuration and helpers
- metrics: CloudWatch metrics publishing
"""

__all__ = []
