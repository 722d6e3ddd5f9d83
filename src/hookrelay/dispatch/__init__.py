"""
Package: dispatch
Description: Routing of verified webhook payloads to application handlers.
"""

from .dispatcher import EventDispatcher, log_handler_error

__all__ = ["EventDispatcher", "log_handler_error"]
