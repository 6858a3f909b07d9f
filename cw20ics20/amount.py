"""Token amounts: native coins or cw20 tokens."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import AmountOverflow

CW20_PREFIX = "cw20:"
_UINT128_MAX = 2**128 - 1
_UINT64_MAX = 2**64 - 1


@dataclass(frozen=True)
class Amount:
    """An amount of either a native denom or a cw20 token contract."""

    amount: int
    native_denom: str | None = None
    cw20_address: str | None = None

    def __post_init__(self) -> None:
        if (self.native_denom is None) == (self.cw20_address is None):
            raise ValueError("an amount names exactly one of a native denom or a cw20 address")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError(f"amount must be an integer, got {self.amount!r}")
        if not 0 <= self.amount <= _UINT128_MAX:
            raise ValueError(f"amount out of range: {self.amount}")

    @classmethod
    def from_parts(cls, denom: str, amount: int) -> Amount:
        """Build from a denom string, where a "cw20:" prefix marks a token contract."""
        if denom.startswith(CW20_PREFIX):
            return cls(amount, cw20_address=denom[len(CW20_PREFIX):])
        return cls(amount, native_denom=denom)

    @classmethod
    def cw20(cls, amount: int, addr: str) -> Amount:
        return cls(amount, cw20_address=addr)

    @classmethod
    def native(cls, amount: int, denom: str) -> Amount:
        return cls(amount, native_denom=denom)

    @property
    def is_cw20(self) -> bool:
        return self.cw20_address is not None

    def denom(self) -> str:
        if self.cw20_address is not None:
            return f"{CW20_PREFIX}{self.cw20_address}"
        return self.native_denom

    def u64_amount(self) -> int:
        """Return the amount, raising AmountOverflow if it does not fit in 64 bits."""
        if self.amount > _UINT64_MAX:
            raise AmountOverflow()
        return self.amount

    def is_empty(self) -> bool:
        return self.amount == 0