from .cell import (
    ExtendedFuture,
    ExtendedFutureOptions,
    SettlementState,
    default_on_reject,
    default_on_resolve,
)
from .config import Settings, get_settings
from .errors import (
    ExecutorModeError,
    ExtendedFutureError,
    FutureImplementationError,
    RejectionError,
)
from .implementation import (
    AsyncioFutureImplementation,
    FutureImplementation,
    get_future_implementation,
    reset_future_implementation,
    set_future_implementation,
)
from .log import close_logging, setup_logging

__all__ = [
    "AsyncioFutureImplementation",
    "ExecutorModeError",
    "ExtendedFuture",
    "ExtendedFutureError",
    "ExtendedFutureOptions",
    "FutureImplementation",
    "FutureImplementationError",
    "RejectionError",
    "Settings",
    "SettlementState",
    "close_logging",
    "default_on_reject",
    "default_on_resolve",
    "get_future_implementation",
    "get_settings",
    "reset_future_implementation",
    "set_future_implementation",
    "setup_logging",
]
