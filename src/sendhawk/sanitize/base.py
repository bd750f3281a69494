# =============================================================================
# Sanitizer Contract
# =============================================================================
# A sanitizer is anything with a single `sanitize(text) -> text` method.
# Messages accept either such an object or a plain function; functions are
# wrapped in SanitizerFunc so the rest of the code only sees one shape.
# =============================================================================

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Sanitizer(Protocol):
    """
    Neutralizes injection risk in a user-supplied string.

    Implementations must be stateless (or at least safe to call from several
    threads at once), since the default instances are shared process-wide.
    """

    def sanitize(self, text: str) -> str:
        ...


@dataclass(frozen=True)
class SanitizerFunc:
    """
    Adapts a plain function to the Sanitizer contract.

    Example:
        >>> upper = SanitizerFunc(str.upper)
        >>> upper.sanitize("hello")
        'HELLO'
    """
    func: Callable[[str], str]

    def sanitize(self, text: str) -> str:
        return self.func(text)


def as_sanitizer(value: "Sanitizer | Callable[[str], str] | None") -> Sanitizer | None:
    """
    Normalize a sanitizer-like value.

    Returns None for None, the object itself if it already has a `sanitize`
    method, or a SanitizerFunc wrapping a callable.

    Raises:
        TypeError: If the value is neither a sanitizer nor callable.
    """
    if value is None:
        return None
    if isinstance(value, Sanitizer):
        return value
    if callable(value):
        return SanitizerFunc(value)
    raise TypeError(f"Expected a Sanitizer or a callable, got {type(value).__name__}")
