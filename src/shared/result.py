"""Return-based error propagation for core operations."""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from .exceptions import ErrorKind, ReceiptTrackerException

T = TypeVar('T')


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either the value produced by an operation or the error it reported."""

    value: Optional[T] = None
    error: Optional[ReceiptTrackerException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @property
    def detail(self) -> Optional[str]:
        return self.error.detail if self.error else None

    def unwrap(self) -> T:
        """Return the value, raising the stored error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value


def attempt(func: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """
    Run a core operation and capture its outcome.

    Only application errors are captured; anything else is a bug and propagates.

    Args:
        func: Operation to run
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result holding the value or the typed error
    """
    try:
        return Result(value=func(*args, **kwargs))
    except ReceiptTrackerException as e:
        return Result(error=e)
