"""Exception types raised by extended_future."""

from typing import Any


class ExtendedFutureError(Exception):
    """Base class for errors raised by this package."""


class RejectionError(ExtendedFutureError):
    """Rejection carrying a reason that is not itself an exception.

    asyncio futures can only fail with exceptions, so ``reject("nope")`` or a
    bare ``reject()`` settles with a RejectionError whose ``reason`` holds the
    original value.
    """

    def __init__(self, reason: Any = None):
        self.reason = reason
        super().__init__(f"future rejected with non-exception reason: {reason!r}")


class ExecutorModeError(ExtendedFutureError):
    """resolve()/reject() called on a cell built from a raw executor."""


class FutureImplementationError(ExtendedFutureError, TypeError):
    """The object passed to set_future_implementation() is not usable."""


def as_exception(reason: Any) -> BaseException:
    if isinstance(reason, BaseException):
        return reason
    return RejectionError(reason)
