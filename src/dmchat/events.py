from collections import defaultdict
from typing import Callable, Coroutine, TypeVar, overload

import structlog

A = TypeVar("A", bound=Callable[..., Coroutine])


log = structlog.stdlib.get_logger(mod="events")


class EventHub:
    def __init__(self) -> None:
        self.listeners: dict[str, list[Callable[..., Coroutine]]] = defaultdict(list)

    async def dispatch(self, key: str, *args, **kwargs) -> bool:
        """Run the listeners for key one after another, in registration order."""
        # .get() so unknown keys from clients don't grow the table.
        listeners = self.listeners.get(key, [])
        for listener in listeners:
            await listener(*args, **kwargs)
        return bool(listeners)

    @overload
    def on(self, key: str) -> Callable[[A], A]:
        ...

    @overload
    def on(self, key: str, fn: Callable[..., Coroutine]) -> None:
        ...

    def on(
        self, key: str, fn: Callable[..., Coroutine] | None = None
    ) -> Callable[[A], A] | None:
        if fn is None:

            def decorator(fn: A) -> A:
                self.on(key, fn)
                return fn

            return decorator
        else:
            log.debug("Adding listener", key=key, fn=fn.__name__)
            self.listeners[key].append(fn)


EVENTS = EventHub()
