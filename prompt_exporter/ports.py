#!/usr/bin/env python3
"""
Prompt Exporter - Host Ports

Explicit integration points between a host chat application and the
capture pipeline. The host owns the port and publishes into it; the
pipeline only subscribes.

    PromptReadyPort   - the host emits a "prompt ready" event with the record
    InterceptionPort  - the host wraps its prompt-builder function; every
                        value it returns is passed to subscribers unchanged

Usage:
    port = InterceptionPort()
    build_prompt = port.wrap(build_prompt)
    pipeline.attach(interception_port=port)
"""

import functools
from typing import Any, Callable, List

Listener = Callable[[Any], Any]


class PromptReadyPort:
    """Host-side event source for assembled prompt records."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, record: Any) -> None:
        """Deliver a record to every listener, in subscription order."""
        for listener in list(self._listeners):
            listener(record)


class InterceptionPort(PromptReadyPort):
    """Observes the return value of a host-owned prompt builder."""

    def wrap(self, builder: Callable[..., Any]) -> Callable[..., Any]:
        """Return a wrapper around builder that publishes each result."""
        @functools.wraps(builder)
        def observed(*args: Any, **kwargs: Any) -> Any:
            result = builder(*args, **kwargs)
            self.publish(result)
            return result
        return observed
