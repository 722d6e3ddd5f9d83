"""
Module: dispatcher.py
Description: Event handler registry and dispatch.

Routes a verified payload to the handlers registered for its event,
followed by the wildcard handlers registered for every event. A failing
handler is reported to the error callback and never stops the others.

Key Components:
- EventDispatcher.register()/unregister(): per-event handlers
- EventDispatcher.register_wildcard()/unregister_wildcard(): handlers for all events
- EventDispatcher.dispatch(): sequential or parallel execution
- on()/on_all(): decorator forms of registration

Dependencies: asyncio, inspect, threading
Author: HookRelay Team
"""

import asyncio
import inspect
import threading
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from ..errors import HandlerError
from ..models.payload import Payload
from ..utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any, Payload], Union[None, Awaitable[None]]]
ErrorCallback = Callable[[HandlerError], None]


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or type(handler).__name__


def log_handler_error(error: HandlerError) -> None:
    """Default error callback: log the failure."""
    logger.error(
        "Webhook handler failed",
        event_name=error.event,
        handler=error.handler_name,
        error=str(error.original),
        error_type=type(error.original).__name__,
    )


class EventDispatcher:
    """
    Registry of event handlers with isolated execution.

    Handlers are called as handler(data, payload) and may be plain
    functions or coroutine functions. Registration replaces immutable
    tuples under a lock, so a dispatch in progress keeps working on the
    snapshot it started with.
    """

    def __init__(self, parallel: bool = False, on_error: Optional[ErrorCallback] = None):
        """
        Initialize dispatcher.

        Args:
            parallel: Run all handlers concurrently instead of in registration order
            on_error: Called once per failing handler; defaults to logging
        """
        self.parallel = parallel
        self.on_error = on_error or log_handler_error
        self._handlers: Dict[str, Tuple[Handler, ...]] = {}
        self._wildcard: Tuple[Handler, ...] = ()
        self._lock = threading.Lock()

    def register(self, event: str, handler: Handler) -> "EventDispatcher":
        """Append a handler for one event."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            self._handlers[event] = self._handlers.get(event, ()) + (handler,)
        return self

    def unregister(self, event: str, handler: Handler) -> "EventDispatcher":
        """Remove the first registration of handler for event; no-op if absent."""
        with self._lock:
            current = self._handlers.get(event, ())
            remaining = _without(current, handler)
            if remaining:
                self._handlers[event] = remaining
            else:
                self._handlers.pop(event, None)
        return self

    def register_wildcard(self, handler: Handler) -> "EventDispatcher":
        """Append a handler invoked for every event."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            self._wildcard = self._wildcard + (handler,)
        return self

    def unregister_wildcard(self, handler: Handler) -> "EventDispatcher":
        """Remove the first wildcard registration of handler; no-op if absent."""
        with self._lock:
            self._wildcard = _without(self._wildcard, handler)
        return self

    def on(self, event: str) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        def decorator(handler: Handler) -> Handler:
            self.register(event, handler)
            return handler
        return decorator

    def on_all(self) -> Callable[[Handler], Handler]:
        """Decorator form of register_wildcard()."""
        def decorator(handler: Handler) -> Handler:
            self.register_wildcard(handler)
            return handler
        return decorator

    def handlers_for(self, event: str) -> List[Handler]:
        """Handlers dispatch would run for event, in order."""
        with self._lock:
            return list(self._handlers.get(event, ()) + self._wildcard)

    async def dispatch(self, payload: Payload) -> List[HandlerError]:
        """
        Run every handler for the payload's event.

        Returns only after all handlers finished. Handler exceptions are
        reported through on_error and returned, never raised.

        Args:
            payload: Verified payload

        Returns:
            Errors reported for failing handlers, in reporting order
        """
        handlers = self.handlers_for(payload.event)
        if not handlers:
            logger.info("No handlers registered for event", event_name=payload.event)
            return []

        logger.debug(
            "Dispatching webhook event",
            event_name=payload.event,
            handler_count=len(handlers),
            parallel=self.parallel,
        )

        errors: List[HandlerError] = []
        if self.parallel:
            await asyncio.gather(*(self._run(handler, payload, errors, threaded=True) for handler in handlers))
        else:
            for handler in handlers:
                await self._run(handler, payload, errors, threaded=False)
        return errors

    async def _run(self, handler: Handler, payload: Payload, errors: List[HandlerError], threaded: bool) -> None:
        try:
            if threaded and not inspect.iscoroutinefunction(handler):
                result = await asyncio.to_thread(handler, payload.data, payload)
            else:
                result = handler(payload.data, payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            error = HandlerError(payload.event, _handler_name(handler), e)
            errors.append(error)
            self._report(error)

    def _report(self, error: HandlerError) -> None:
        try:
            self.on_error(error)
        except Exception as e:
            logger.error(
                "Handler error callback failed",
                event_name=error.event,
                handler=error.handler_name,
                error=str(e),
            )


def _without(handlers: Tuple[Handler, ...], handler: Handler) -> Tuple[Handler, ...]:
    for index, registered in enumerate(handlers):
        if registered == handler:
            return handlers[:index] + handlers[index + 1:]
    return handlers
