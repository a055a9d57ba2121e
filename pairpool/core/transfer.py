"""
Asset custody collaborator.

The engine never moves assets itself: it asks an `AssetTransfer` to pull
funds from a party into pool custody and to push funds out of custody. Both
operations are all-or-nothing and raise `TransferFailure` instead of moving
less than asked.
"""

from __future__ import annotations

from typing import Dict, Protocol, Tuple, runtime_checkable

from ..errors import TransferFailure
from ..state.balances import Amount, AssetId, CustodyLedger, PartyId


@runtime_checkable
class AssetTransfer(Protocol):
    def pull(self, asset: AssetId, party: PartyId, amount: Amount) -> None:
        """Move ``amount`` of ``asset`` from ``party`` into pool custody."""
        ...

    def push(self, asset: AssetId, party: PartyId, amount: Amount) -> None:
        """Move ``amount`` of ``asset`` from pool custody to ``party``."""
        ...


class LedgerTransfer:
    """
    In-memory `AssetTransfer` over a `CustodyLedger`.

    With ``require_approval`` set, a pull also consumes an allowance granted
    through `approve`.
    """

    def __init__(self, ledger: CustodyLedger | None = None, *, require_approval: bool = False) -> None:
        self.ledger = ledger if ledger is not None else CustodyLedger()
        self.require_approval = require_approval
        self._allowances: Dict[Tuple[PartyId, AssetId], Amount] = {}

    def credit(self, party: PartyId, asset: AssetId, amount: Amount) -> None:
        self.ledger.credit(party, asset, amount)

    def approve(self, owner: PartyId, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, asset), None)
        else:
            self._allowances[(owner, asset)] = amount

    def allowance(self, owner: PartyId, asset: AssetId) -> Amount:
        return self._allowances.get((owner, asset), 0)

    def balance_of(self, party: PartyId, asset: AssetId) -> Amount:
        return self.ledger.held(party, asset)

    def custody_of(self, asset: AssetId) -> Amount:
        return self.ledger.custody(asset)

    def pull(self, asset: AssetId, party: PartyId, amount: Amount) -> None:
        if amount == 0:
            return
        if amount < 0:
            raise TransferFailure(f"cannot pull a negative amount: {amount}")
        held = self.ledger.held(party, asset)
        if held < amount:
            raise TransferFailure(f"{party!r} holds {held} {asset}, pull of {amount} declined")
        if self.require_approval:
            allowed = self.allowance(party, asset)
            if allowed < amount:
                raise TransferFailure(f"{party!r} approved {allowed} {asset}, pull of {amount} declined")
            self.approve(party, asset, allowed - amount)
        self.ledger.move_in(party, asset, amount)

    def push(self, asset: AssetId, party: PartyId, amount: Amount) -> None:
        if amount == 0:
            return
        if amount < 0:
            raise TransferFailure(f"cannot push a negative amount: {amount}")
        custody = self.ledger.custody(asset)
        if custody < amount:
            raise TransferFailure(f"pool custody holds {custody} {asset}, push of {amount} declined")
        self.ledger.move_out(party, asset, amount)

    def __repr__(self) -> str:
        return f"LedgerTransfer({self.ledger!r})"
