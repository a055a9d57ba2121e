"""Exception types for the pair pool engine.

Every public operation either completes or raises one of these; a raised
error means no ledger mutation is visible (see ``TransferFailure`` for the
single partial-payout exception).
"""

from __future__ import annotations

from typing import Optional, Sequence


class PoolError(Exception):
    """Base class for all pool engine failures."""


class Expired(PoolError):
    """Raised when a call is observed after the caller's deadline."""

    def __init__(self, deadline: int, now: int) -> None:
        self.deadline = deadline
        self.now = now
        super().__init__(f"deadline {deadline} has passed (now={now})")


class InvalidPair(PoolError, ValueError):
    """Raised for identical assets or an asset that is not part of the pair."""


class PairNotFound(PoolError, LookupError):
    """Raised when an operation needs a funded pool that does not exist."""


class ZeroLiquidity(PoolError):
    """Raised when an operation would mint, burn or output nothing."""


class SlippageExceeded(PoolError):
    """Raised when a computed amount violates the caller's stated bound."""

    def __init__(self, what: str, actual: int, bound: int) -> None:
        self.what = what
        self.actual = actual
        self.bound = bound
        super().__init__(f"{what}: computed {actual}, bound {bound}")


class InsufficientClaim(PoolError):
    """Raised when a party tries to burn more claims than it holds."""

    def __init__(self, party: str, held: int, requested: int) -> None:
        self.party = party
        self.held = held
        self.requested = requested
        super().__init__(f"party {party!r} holds {held} claims, requested {requested}")


class InvalidInput(PoolError, ValueError):
    """Raised for zero/negative amounts, empty reserves or malformed numbers."""


class EmptyReserve(InvalidInput, ZeroDivisionError):
    """Raised when a price is requested against an empty reserve."""


class TransferFailure(PoolError):
    """Raised when the asset transfer collaborator declines a pull or push."""

    def __init__(self, message: str, *, undelivered: Optional[Sequence[tuple[str, str, int]]] = None) -> None:
        # (asset, party, amount) moves that were owed but never delivered.
        self.undelivered = tuple(undelivered or ())
        super().__init__(message)


class InvariantViolation(PoolError):
    """Raised when a computed post-state would break a pool invariant."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
