"""
Claim (LP share) balance tracking for a single pool.

Claims are scoped to one pool record and are tracked separately from asset
balances. A party's claim disappears from the table once its balance is zero.
"""

from __future__ import annotations

from typing import Dict, Iterator, Tuple

from .balances import Amount, PartyId


class ClaimTable:
    """
    Claim balance table mapping party -> claim amount.

    Notes:
    - Claim balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    """

    def __init__(self) -> None:
        self._balances: Dict[PartyId, Amount] = {}

    def get(self, party: PartyId) -> Amount:
        """Get claim balance for party. Returns 0 if not found."""
        return self._balances.get(party, 0)

    def set(self, party: PartyId, amount: Amount) -> None:
        """Set claim balance for party."""
        if amount < 0:
            raise ValueError(f"Claim balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(party, None)
        else:
            self._balances[party] = amount

    def add(self, party: PartyId, delta: int) -> None:
        """Add delta to a claim balance (delta may be negative)."""
        current = self.get(party)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient claim balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(party, new_balance)

    def subtract(self, party: PartyId, delta: Amount) -> None:
        """Subtract a non-negative amount from a claim balance."""
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(party, -delta)

    def total(self) -> Amount:
        """Sum of all claim balances."""
        return sum(self._balances.values())

    def holders(self) -> Tuple[PartyId, ...]:
        """Parties with a non-zero balance, sorted."""
        return tuple(sorted(self._balances))

    def copy(self) -> "ClaimTable":
        clone = ClaimTable()
        clone._balances = dict(self._balances)
        return clone

    def __iter__(self) -> Iterator[Tuple[PartyId, Amount]]:
        return iter(sorted(self._balances.items()))

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"ClaimTable({len(self._balances)} holders)"
