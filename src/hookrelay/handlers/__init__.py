"""
Module: handlers
Description: Package initialization for the HTTP route handlers.

- webhook: POST /webhook receiver
- trigger: POST /trigger sender endpoints
- dependencies: shared dependency providers
"""

__all__ = []
