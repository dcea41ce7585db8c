"""
Pluggable future implementation backing every ExtendedFuture.

Cells never touch asyncio directly: they go through the FutureImplementation
registered here. The interface is a fixed list of members, split in two
groups:

- instance plumbing: create, then, catch, schedule
- combinators: all, all_settled, race, resolve, reject

AsyncioFutureImplementation is registered by default. Any object exposing
every member as a callable may be registered instead with
set_future_implementation(); cells bind whichever implementation is active
when they are constructed.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Coroutine, Dict, Iterable, List, Optional, Set

from .errors import FutureImplementationError, as_exception

logger = logging.getLogger(__name__)

SettleFunction = Callable[..., None]
Executor = Callable[[SettleFunction, SettleFunction], None]
Handler = Callable[[Any], Any]

REQUIRED_MEMBERS = ("create", "then", "catch", "schedule", "all", "all_settled", "race", "resolve", "reject")


class FutureImplementation(ABC):
    """Operations a cell needs from the future type that backs it."""

    @abstractmethod
    def create(self, executor: Executor) -> Awaitable:
        """Build a pending future and hand its two settle functions to ``executor``."""

    @abstractmethod
    def then(self, future: Awaitable, on_fulfilled: Optional[Handler] = None, on_rejected: Optional[Handler] = None) -> Awaitable:
        """Return a new future settled by ``on_fulfilled``/``on_rejected`` applied to ``future``."""

    def catch(self, future: Awaitable, on_rejected: Handler) -> Awaitable:
        return self.then(future, None, on_rejected)

    @abstractmethod
    def schedule(self, coroutine: Coroutine) -> Awaitable:
        """Run ``coroutine`` as a continuation on the implementation's queue."""

    @abstractmethod
    def all(self, awaitables: Iterable[Awaitable]) -> Awaitable:
        ...

    @abstractmethod
    def all_settled(self, awaitables: Iterable[Awaitable]) -> Awaitable:
        ...

    @abstractmethod
    def race(self, awaitables: Iterable[Awaitable]) -> Awaitable:
        ...

    @abstractmethod
    def resolve(self, value: Any = None) -> Awaitable:
        ...

    @abstractmethod
    def reject(self, error: Any = None) -> Awaitable:
        ...


def _transfer(source: asyncio.Future, target: asyncio.Future) -> None:
    """Copy the outcome of a finished ``source`` onto ``target``."""
    if source.cancelled():
        if not target.done():
            target.cancel()
        return
    # exception() also marks the error as retrieved on source
    error = source.exception()
    if target.done():
        return
    if error is not None:
        target.set_exception(error)
    else:
        target.set_result(source.result())


def _settled_record(future: asyncio.Future) -> Dict[str, Any]:
    if future.cancelled():
        return {"status": "rejected", "reason": asyncio.CancelledError()}
    error = future.exception()
    if error is not None:
        return {"status": "rejected", "reason": error}
    return {"status": "fulfilled", "value": future.result()}


class AsyncioFutureImplementation(FutureImplementation):
    """asyncio-backed implementation; every future lives on the running loop."""

    def __init__(self):
        # create_task only keeps weak references
        self._tasks: Set[asyncio.Task] = set()

    def _adopt(self, target: asyncio.Future, awaitable: Awaitable) -> None:
        source = asyncio.ensure_future(awaitable, loop=target.get_loop())
        source.add_done_callback(lambda done: _transfer(done, target))

    def create(self, executor: Executor) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        locked = False

        def settle_fulfilled(value: Any = None) -> None:
            nonlocal locked
            if locked or future.done():
                return
            locked = True
            if inspect.isawaitable(value):
                self._adopt(future, value)
            else:
                future.set_result(value)

        def settle_rejected(reason: Any = None) -> None:
            nonlocal locked
            if locked or future.done():
                return
            locked = True
            future.set_exception(as_exception(reason))

        try:
            executor(settle_fulfilled, settle_rejected)
        except Exception as exc:
            logger.debug("executor raised %r; rejecting future", exc)
            settle_rejected(exc)
        return future

    def then(self, future: asyncio.Future, on_fulfilled: Optional[Handler] = None, on_rejected: Optional[Handler] = None) -> asyncio.Future:
        chained = future.get_loop().create_future()

        def _relay(source: asyncio.Future) -> None:
            if source.cancelled():
                if not chained.done():
                    chained.cancel()
                return
            error = source.exception()
            if chained.done():
                return
            handler = on_rejected if error is not None else on_fulfilled
            if handler is None:
                _transfer(source, chained)
                return
            try:
                outcome = handler(error if error is not None else source.result())
            except Exception as exc:
                chained.set_exception(exc)
                return
            if inspect.isawaitable(outcome):
                self._adopt(chained, outcome)
            else:
                chained.set_result(outcome)

        future.add_done_callback(_relay)
        return chained

    def schedule(self, coroutine: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def all(self, awaitables: Iterable[Awaitable]) -> asyncio.Future:
        return asyncio.gather(*awaitables)

    def all_settled(self, awaitables: Iterable[Awaitable]) -> asyncio.Task:
        futures = [asyncio.ensure_future(aw) for aw in awaitables]

        async def _collect() -> List[Dict[str, Any]]:
            await asyncio.gather(*futures, return_exceptions=True)
            return [_settled_record(f) for f in futures]

        return self.schedule(_collect())

    def race(self, awaitables: Iterable[Awaitable]) -> asyncio.Future:
        futures = [asyncio.ensure_future(aw) for aw in awaitables]
        if not futures:
            raise ValueError("race() needs at least one awaitable")
        winner = futures[0].get_loop().create_future()
        for future in futures:
            future.add_done_callback(lambda done: _transfer(done, winner))
        return winner

    def resolve(self, value: Any = None) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        if inspect.isawaitable(value):
            self._adopt(future, value)
        else:
            future.set_result(value)
        return future

    def reject(self, error: Any = None) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.set_exception(as_exception(error))
        return future


_default_implementation = AsyncioFutureImplementation()
_active_implementation: Any = _default_implementation


def get_future_implementation() -> Any:
    return _active_implementation


def set_future_implementation(implementation: Any) -> Any:
    """Register the implementation used by cells created from now on.

    ``None`` restores the asyncio default. Objects missing any of
    REQUIRED_MEMBERS are refused with FutureImplementationError.
    """
    global _active_implementation
    if implementation is None:
        implementation = _default_implementation
    missing = [name for name in REQUIRED_MEMBERS if not callable(getattr(implementation, name, None))]
    if missing:
        raise FutureImplementationError(
            f"{type(implementation).__name__} does not provide: {', '.join(missing)}"
        )
    _active_implementation = implementation
    logger.debug("future implementation set to %s", type(implementation).__name__)
    return implementation


def reset_future_implementation() -> Any:
    return set_future_implementation(None)
