"""
ExtendedFuture: a settle-once cell wrapping an underlying future.

The cell adds resolve()/reject() entry points, status flags that report the
outcome the cell has committed to, and two interception hooks that run before
the underlying future is settled.

Commitment is synchronous: right after resolve() returns, ``is_resolved`` is
already true even though the hook has not run yet. The hook then runs as a
scheduled continuation, and the underlying future is settled only once the
hook (and any awaitable it returns) has finished.

The two pipelines are asymmetric:

- a failing on_resolve hook escalates: the cell re-opens and goes through
  reject() with the hook's error, so on_reject gets a chance to recover it;
- a succeeding on_reject hook recovers: its value fulfils the underlying
  future directly and never passes through on_resolve.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Generator, Iterable, Mapping, Optional, Union

from .config import get_settings
from .errors import ExecutorModeError, as_exception
from .implementation import Executor, get_future_implementation, set_future_implementation

logger = logging.getLogger(__name__)

Hook = Callable[[Any], Any]


class SettlementState(str, Enum):
    OPEN = "open"
    COMMITTED_RESOLVE = "committed_resolve"
    COMMITTED_REJECT = "committed_reject"
    SETTLED_RESOLVED = "settled_resolved"
    SETTLED_REJECTED = "settled_rejected"


RESOLVED_TRACK = (SettlementState.COMMITTED_RESOLVE, SettlementState.SETTLED_RESOLVED)
REJECTED_TRACK = (SettlementState.COMMITTED_REJECT, SettlementState.SETTLED_REJECTED)


@dataclass
class ExtendedFutureOptions:
    on_resolve: Optional[Hook] = None
    on_reject: Optional[Hook] = None
    # None defers to get_settings().SUPPRESS_UNHANDLED_REJECTIONS
    suppress_unhandled_rejections: Optional[bool] = None


def default_on_resolve(value: Any) -> Any:
    return value


def default_on_reject(error: Any) -> Any:
    raise as_exception(error)


def _ignore_rejection(error: BaseException) -> None:
    return None


class ExtendedFuture:
    """Settle-once cell with status flags and resolve/reject interception hooks.

    Construct with hook options (an ExtendedFutureOptions, a mapping, or
    keyword arguments), or with a raw executor ``fn(settle_fulfilled,
    settle_rejected)``. Executor mode hands the executor straight to the
    future implementation: no hooks, flags stay false, and resolve()/reject()
    raise ExecutorModeError.
    """

    def __init__(self, options: Union[None, ExtendedFutureOptions, Mapping[str, Any], Executor] = None, **overrides: Any):
        self._implementation = get_future_implementation()
        self._state = SettlementState.OPEN
        self._settle_fulfilled: Optional[Callable[..., None]] = None
        self._settle_rejected: Optional[Callable[..., None]] = None
        self._on_resolve: Optional[Hook] = None
        self._on_reject: Optional[Hook] = None

        if callable(options):
            if overrides:
                raise TypeError("executor-mode construction does not accept options")
            self._executor_mode = True
            self._future = self._implementation.create(options)
            return

        self._executor_mode = False
        options = self._build_options(options, overrides)
        self._future = self._implementation.create(self._capture_settle_functions)
        self._on_resolve = options.on_resolve or default_on_resolve
        self._on_reject = options.on_reject or default_on_reject

        if self.should_suppress_unhandled_rejections(options):
            self._implementation.catch(self._future, _ignore_rejection)

    @staticmethod
    def _build_options(options: Any, overrides: Mapping[str, Any]) -> ExtendedFutureOptions:
        if options is None:
            options = ExtendedFutureOptions()
        elif isinstance(options, Mapping):
            options = ExtendedFutureOptions(**options)
        elif not isinstance(options, ExtendedFutureOptions):
            raise TypeError(f"unsupported options type: {type(options).__name__}")
        if overrides:
            options = replace(options, **overrides)
        return options

    @staticmethod
    def should_suppress_unhandled_rejections(options: ExtendedFutureOptions) -> bool:
        if options.suppress_unhandled_rejections is not None:
            return bool(options.suppress_unhandled_rejections)
        return bool(get_settings().SUPPRESS_UNHANDLED_REJECTIONS)

    def _capture_settle_functions(self, settle_fulfilled: Callable[..., None], settle_rejected: Callable[..., None]) -> None:
        self._settle_fulfilled = settle_fulfilled
        self._settle_rejected = settle_rejected

    # -- combinators, delegated to the active future implementation --

    @staticmethod
    def all(awaitables: Iterable[Awaitable]) -> Awaitable:
        return get_future_implementation().all(awaitables)

    @staticmethod
    def all_settled(awaitables: Iterable[Awaitable]) -> Awaitable:
        return get_future_implementation().all_settled(awaitables)

    @staticmethod
    def race(awaitables: Iterable[Awaitable]) -> Awaitable:
        return get_future_implementation().race(awaitables)

    @staticmethod
    def resolved(value: Any = None) -> Awaitable:
        return get_future_implementation().resolve(value)

    @staticmethod
    def rejected(error: Any = None) -> Awaitable:
        return get_future_implementation().reject(error)

    set_future_implementation = staticmethod(set_future_implementation)

    # -- status --

    @property
    def future(self) -> Awaitable:
        return self._future

    @property
    def state(self) -> SettlementState:
        return self._state

    @property
    def executor_mode(self) -> bool:
        return self._executor_mode

    @property
    def is_fulfilled(self) -> bool:
        return self._state is not SettlementState.OPEN

    @property
    def is_resolved(self) -> bool:
        return self._state in RESOLVED_TRACK

    @property
    def is_rejected(self) -> bool:
        return self._state in REJECTED_TRACK

    # -- continuations on the underlying future --

    def then(self, on_fulfilled: Optional[Callable[[Any], Any]] = None, on_rejected: Optional[Callable[[BaseException], Any]] = None) -> Awaitable:
        return self._implementation.then(self._future, on_fulfilled, on_rejected)

    def catch(self, on_rejected: Callable[[BaseException], Any]) -> Awaitable:
        return self._implementation.catch(self._future, on_rejected)

    def __await__(self) -> Generator[Any, None, Any]:
        return self._future.__await__()

    # -- entry points --

    def resolve(self, value: Any = None) -> "ExtendedFuture":
        self._ensure_hook_mode("resolve")
        if self.is_fulfilled:
            return self
        self._state = SettlementState.COMMITTED_RESOLVE
        self._implementation.schedule(self._run_resolution(value))
        return self

    def reject(self, error: Any = None) -> "ExtendedFuture":
        self._ensure_hook_mode("reject")
        if self.is_fulfilled:
            return self
        self._state = SettlementState.COMMITTED_REJECT
        self._implementation.schedule(self._run_rejection(error))
        return self

    def _ensure_hook_mode(self, operation: str) -> None:
        if self._executor_mode:
            raise ExecutorModeError(
                f"{operation}() is unavailable on a future built from an executor; settle it through the executor"
            )

    async def _call_hook(self, hook: Hook, argument: Any) -> Any:
        result = hook(argument)
        while True:
            if result is self or result is self._future:
                raise TypeError("an ExtendedFuture cannot settle with itself")
            if not inspect.isawaitable(result):
                break
            result = await result
        # settle on a later loop step than the one that finished the hook
        await asyncio.sleep(0)
        return result

    async def _run_resolution(self, value: Any) -> None:
        try:
            result = await self._call_hook(self._on_resolve, value)
        except (Exception, asyncio.CancelledError) as exc:
            logger.debug("on_resolve hook failed with %r; escalating to reject", exc)
            # re-open and re-commit in one step, with no await in between
            self._state = SettlementState.OPEN
            self.reject(exc)
            return
        self._state = SettlementState.SETTLED_RESOLVED
        self._settle_fulfilled(result)

    async def _run_rejection(self, error: Any) -> None:
        try:
            result = await self._call_hook(self._on_reject, error)
        except (Exception, asyncio.CancelledError) as exc:
            logger.debug("settling rejected with %r", exc)
            self._state = SettlementState.SETTLED_REJECTED
            self._settle_rejected(exc)
            return
        logger.debug("on_reject hook recovered %r", error)
        self._state = SettlementState.SETTLED_RESOLVED
        self._settle_fulfilled(result)

    def __repr__(self) -> str:
        mode = " executor" if self._executor_mode else ""
        return f"<ExtendedFuture{mode} state={self._state.value}>"
