"""User lookup.

A stand-in directory with a single hard-coded record. The lookup is a pure
function of the identifier: no I/O, no state.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Found:
    """The identifier resolved to a user."""

    name: str


@dataclass(frozen=True)
class NotFound:
    """The identifier matched no user."""


NOT_FOUND: Final = NotFound()

LookupResult = Found | NotFound
UserLookup = Callable[[str], LookupResult]

_USERS: Final[dict[str, str]] = {"123": "otelchi tester"}


def lookup_user(user_id: str) -> LookupResult:
    """Resolve a user identifier to a display name.

    Args:
        user_id: Decimal user identifier from the request path

    Returns:
        Found with the user's name, or NOT_FOUND
    """
    name = _USERS.get(user_id)
    if name is None:
        return NOT_FOUND
    return Found(name)
