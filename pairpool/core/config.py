"""
Engine configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml


DEFAULT_FEE_NUMERATOR = 3
DEFAULT_FEE_DENOMINATOR = 1000
DEFAULT_PRICE_SCALE = 10**18


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip(), 10)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer: {raw!r}") from exc


@dataclass(frozen=True)
class PoolConfig:
    """
    Runtime config for a pool engine.

    The swap fee is ``fee_numerator / fee_denominator`` of the input amount
    and is retained in the pool. ``fee_numerator = 0`` disables it.

    ``minimum_liquidity`` claims are locked forever on every bootstrap, so a
    pool with a lock can never be drained back to zero claims.
    """

    fee_numerator: int = DEFAULT_FEE_NUMERATOR
    fee_denominator: int = DEFAULT_FEE_DENOMINATOR
    price_scale: int = DEFAULT_PRICE_SCALE
    minimum_liquidity: int = 0

    def __post_init__(self) -> None:
        for name, v in (
            ("fee_numerator", self.fee_numerator),
            ("fee_denominator", self.fee_denominator),
            ("price_scale", self.price_scale),
            ("minimum_liquidity", self.minimum_liquidity),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be positive: {self.fee_denominator}")
        if not (0 <= self.fee_numerator < self.fee_denominator):
            raise ValueError(
                f"fee_numerator must be in [0, {self.fee_denominator}): {self.fee_numerator}"
            )
        if self.price_scale <= 0:
            raise ValueError(f"price_scale must be positive: {self.price_scale}")
        if self.minimum_liquidity < 0:
            raise ValueError(f"minimum_liquidity must be non-negative: {self.minimum_liquidity}")

    @property
    def fee(self) -> tuple[int, int]:
        return self.fee_numerator, self.fee_denominator

    @classmethod
    def fee_free(cls, **kwargs: int) -> "PoolConfig":
        return cls(fee_numerator=0, **kwargs)

    @classmethod
    def from_env(cls, prefix: str = "PAIRPOOL_", env: Optional[Mapping[str, str]] = None) -> "PoolConfig":
        """
        Build a config from ``<prefix>FEE_NUMERATOR``, ``<prefix>FEE_DENOMINATOR``,
        ``<prefix>PRICE_SCALE`` and ``<prefix>MINIMUM_LIQUIDITY``.

        Unset or blank variables keep their defaults.
        """
        source = os.environ if env is None else env
        return cls(
            fee_numerator=_env_int(source, prefix + "FEE_NUMERATOR", DEFAULT_FEE_NUMERATOR),
            fee_denominator=_env_int(source, prefix + "FEE_DENOMINATOR", DEFAULT_FEE_DENOMINATOR),
            price_scale=_env_int(source, prefix + "PRICE_SCALE", DEFAULT_PRICE_SCALE),
            minimum_liquidity=_env_int(source, prefix + "MINIMUM_LIQUIDITY", 0),
        )

    @classmethod
    def from_mapping(cls, obj: Mapping[str, Any]) -> "PoolConfig":
        if not isinstance(obj, Mapping):
            raise TypeError("pool config must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(obj) - known)
        if unknown:
            raise ValueError(f"unknown pool config keys: {', '.join(map(str, unknown))}")
        return cls(**dict(obj))

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PoolConfig":
        """Load a config from a YAML mapping; missing keys keep their defaults."""
        obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if obj is None:
            return cls()
        return cls.from_mapping(obj)
