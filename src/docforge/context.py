"""Execution-context predicate consulted by validation.

Validation invoked with ``simulation=False`` only runs inside the trusted
execution context. The host application installs the predicate that decides
whether the current call is trusted; by default every call is.
"""

from typing import Callable

TrustedPredicate = Callable[[], bool]


def _always_trusted() -> bool:
    return True


_predicate: TrustedPredicate = _always_trusted


def is_trusted() -> bool:
    """Return True when running in the trusted execution context."""
    return bool(_predicate())


def set_trusted_predicate(predicate: TrustedPredicate) -> None:
    """Install the predicate used by is_trusted()."""
    global _predicate
    _predicate = predicate


def reset_trusted_predicate() -> None:
    """Restore the default predicate. Primarily for testing."""
    global _predicate
    _predicate = _always_trusted
