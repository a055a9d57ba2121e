"""
Asset holdings outside and inside the pools.

`CustodyLedger` keeps two sparse tables: what each party holds externally and
what the pools hold in custody, per asset. Assets only move between the two
through `move_in` / `move_out`, so the sum over both tables per asset changes
only through `credit`.
"""

from typing import Dict, Tuple

PartyId = str  # opaque party identity (account, address, pubkey)
AssetId = str  # opaque, totally ordered asset identifier
Amount = int  # non-negative, arbitrary precision

# Public amounts are capped at the 256-bit range of the reference pools.
UINT256_MAX = (1 << 256) - 1


class CustodyLedger:
    def __init__(self) -> None:
        self._held: Dict[Tuple[PartyId, AssetId], Amount] = {}
        self._custody: Dict[AssetId, Amount] = {}

    @staticmethod
    def _bump(table: dict, key, delta: int, what: str) -> None:
        value = table.get(key, 0) + delta
        if value < 0:
            raise ValueError(f"{what} would go negative: {table.get(key, 0)} + {delta}")
        if value:
            table[key] = value
        else:
            table.pop(key, None)

    def held(self, party: PartyId, asset: AssetId) -> Amount:
        return self._held.get((party, asset), 0)

    def custody(self, asset: AssetId) -> Amount:
        return self._custody.get(asset, 0)

    def credit(self, party: PartyId, asset: AssetId, amount: Amount) -> None:
        """Mint external funds to ``party`` (bootstrap and tests)."""
        if amount < 0:
            raise ValueError(f"credit must be non-negative: {amount}")
        self._bump(self._held, (party, asset), amount, f"holding of {party!r}")

    def move_in(self, party: PartyId, asset: AssetId, amount: Amount) -> None:
        """Party -> custody. Raises ValueError without moving anything on a shortfall."""
        if amount < 0:
            raise ValueError(f"amount must be non-negative: {amount}")
        self._bump(self._held, (party, asset), -amount, f"holding of {party!r}")
        self._bump(self._custody, asset, amount, "custody")

    def move_out(self, party: PartyId, asset: AssetId, amount: Amount) -> None:
        """Custody -> party. Raises ValueError without moving anything on a shortfall."""
        if amount < 0:
            raise ValueError(f"amount must be non-negative: {amount}")
        self._bump(self._custody, asset, -amount, f"custody of {asset}")
        self._bump(self._held, (party, asset), amount, f"holding of {party!r}")

    def __repr__(self) -> str:
        return f"CustodyLedger({len(self._held)} holdings, {len(self._custody)} assets in custody)"
