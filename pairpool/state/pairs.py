"""
Canonical pair keys.

A pair of assets is unordered: ``derive_key(x, y) == derive_key(y, x)``. The
smaller identifier always occupies slot A (index 0) and the larger slot B
(index 1); that assignment is what every pool record stores its reserves by.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Tuple, TypeVar

from ..errors import InvalidPair
from .balances import AssetId

T = TypeVar("T")

PAIR_ID_DOMAIN = b"pairpool/pair/v1"


def canonical_order(x: AssetId, y: AssetId) -> Tuple[AssetId, AssetId]:
    """Return ``(x, y)`` sorted by the identifiers' total order."""
    return (x, y) if x <= y else (y, x)


def compute_pair_id(asset_a: AssetId, asset_b: AssetId) -> str:
    """
    Deterministic hex id for a canonically ordered pair.

    Each identifier is length-prefixed so that ("ab", "c") and ("a", "bc")
    never hash to the same input.
    """
    h = hashlib.sha256(PAIR_ID_DOMAIN)
    for asset in (asset_a, asset_b):
        raw = asset.encode("utf-8")
        h.update(len(raw).to_bytes(4, "big"))
        h.update(raw)
    return "0x" + h.hexdigest()


@dataclass(frozen=True, order=True)
class PairKey:
    """
    Canonical key of an unordered asset pair.

    Attributes:
        asset_a: The smaller identifier (slot 0)
        asset_b: The larger identifier (slot 1)
    """

    asset_a: AssetId
    asset_b: AssetId

    def __post_init__(self) -> None:
        for name, v in (("asset_a", self.asset_a), ("asset_b", self.asset_b)):
            if not isinstance(v, str):
                raise TypeError(f"{name} must be a str")
        if self.asset_a > self.asset_b:
            raise ValueError(f"Assets must be in canonical order: {self.asset_a} <= {self.asset_b}")

    @property
    def pair_id(self) -> str:
        return compute_pair_id(self.asset_a, self.asset_b)

    @property
    def assets(self) -> Tuple[AssetId, AssetId]:
        return (self.asset_a, self.asset_b)

    def contains(self, asset: AssetId) -> bool:
        return asset == self.asset_a or asset == self.asset_b

    def slot_of(self, asset: AssetId) -> int:
        """Return 0 if ``asset`` is A, 1 if it is B."""
        if asset == self.asset_a:
            return 0
        if asset == self.asset_b:
            return 1
        raise InvalidPair(f"Asset {asset!r} not in pair ({self.asset_a!r}, {self.asset_b!r})")

    def other(self, asset: AssetId) -> AssetId:
        return self.asset_b if self.slot_of(asset) == 0 else self.asset_a

    def orient(self, asset_x: AssetId, value_x: T, value_y: T) -> Tuple[T, T]:
        """
        Map values given in caller order ``(x, y)`` onto canonical ``(A, B)`` slots.

        The same call maps canonical values back to caller order, since the
        permutation is its own inverse.
        """
        if self.slot_of(asset_x) == 0:
            return value_x, value_y
        return value_y, value_x

    def __str__(self) -> str:
        return f"{self.asset_a}/{self.asset_b}"


def derive_key(x: AssetId, y: AssetId) -> PairKey:
    """
    Map an unordered pair of asset identifiers to its canonical key.

    ``x != y`` is checked by callers, not here.
    """
    first, second = canonical_order(x, y)
    return PairKey(asset_a=first, asset_b=second)
