"""Exact u64 ratio arithmetic with explicit rounding.

Every product is formed with Python's unbounded integers and only the final
result is range-checked, which matches the 128-bit intermediates the on-chain
program uses. ``None`` means "does not fit in a u64".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

U64_MAX = (1 << 64) - 1

# Inclusive (start, end) range of u64 values.
U64Range = tuple[int, int]


def check_u64(name: str, v: int) -> None:
    if not 0 <= v <= U64_MAX:
        raise ValueError(f"{name} out of range for u64: {v}")


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


@dataclass(frozen=True)
class Ratio:
    n: int  # u64
    d: int  # u64

    def __post_init__(self) -> None:
        check_u64("numerator", self.n)
        check_u64("denominator", self.d)

    def is_zero(self) -> bool:
        return self.n == 0 or self.d == 0


@dataclass(frozen=True)
class Floor:
    """``floor(amount * n / d)``."""

    ratio: Ratio

    def apply(self, amount: int) -> int | None:
        check_u64("amount", amount)
        n, d = self.ratio.n, self.ratio.d
        if n == 0:
            return 0
        if d == 0:
            return None
        res = amount * n // d
        return res if res <= U64_MAX else None

    def reverse_est(self, amount_after_apply: int) -> U64Range | None:
        """Inclusive range of inputs that :meth:`apply` maps to ``amount_after_apply``.

        When the ratio exceeds 1 some outputs are unreachable; the range then
        collapses to the smallest input whose image exceeds the output.
        """
        check_u64("amount", amount_after_apply)
        y = amount_after_apply
        n, d = self.ratio.n, self.ratio.d
        if n == 0:
            return (0, U64_MAX) if y == 0 else None
        if d == 0:
            return None
        lo = _ceil_div(y * d, n)
        if lo > U64_MAX:
            return None
        hi = min(_ceil_div((y + 1) * d, n) - 1, U64_MAX)
        return lo, max(hi, lo)


@dataclass(frozen=True)
class Ceil:
    """``ceil(amount * n / d)``."""

    ratio: Ratio

    def apply(self, amount: int) -> int | None:
        check_u64("amount", amount)
        n, d = self.ratio.n, self.ratio.d
        if n == 0:
            return 0
        if d == 0:
            return None
        res = _ceil_div(amount * n, d)
        return res if res <= U64_MAX else None

    def reverse_est(self, amount_after_apply: int) -> U64Range | None:
        """Inclusive range of inputs that :meth:`apply` maps to ``amount_after_apply``."""
        check_u64("amount", amount_after_apply)
        y = amount_after_apply
        n, d = self.ratio.n, self.ratio.d
        if n == 0:
            return (0, U64_MAX) if y == 0 else None
        if d == 0:
            return None
        if y == 0:
            return 0, 0
        lo = (y - 1) * d // n + 1
        if lo > U64_MAX:
            return None
        hi = min(y * d // n, U64_MAX)
        return lo, max(hi, lo)


Rounding = Union[Floor, Ceil]


@dataclass(frozen=True)
class FeeApplied:
    rem: int  # u64, amount left after the fee
    fee: int  # u64

    @property
    def amount(self) -> int:
        return self.rem + self.fee


@dataclass(frozen=True)
class FeeRatio:
    """A fee of ``n / d`` of an amount, rounded by ``rounding``.

    ``n <= d`` and ``d != 0`` are enforced at construction, so :meth:`apply`
    always partitions the amount exactly into ``rem + fee``.
    """

    rounding: Rounding

    def __post_init__(self) -> None:
        r = self.rounding.ratio
        if r.d == 0:
            raise ValueError("fee denominator must be non-zero")
        if r.n > r.d:
            raise ValueError(f"fee ratio {r.n}/{r.d} exceeds 1")

    @property
    def ratio(self) -> Ratio:
        return self.rounding.ratio

    def is_zero(self) -> bool:
        return self.ratio.n == 0

    def apply(self, amount: int) -> FeeApplied:
        fee = self.rounding.apply(amount)
        # n <= d so fee <= amount
        assert fee is not None
        return FeeApplied(rem=amount - fee, fee=fee)

    def reverse_from_rem(self, rem: int) -> U64Range | None:
        """Range of pre-fee amounts whose :meth:`apply` leaves ``rem``.

        ``amount - ceil(amount * n / d) == floor(amount * (d - n) / d)`` and
        symmetrically for floor-rounded fees, so this inverts the complement
        ratio with the opposite rounding.
        """
        r = self.ratio
        complement = Ratio(r.d - r.n, r.d)
        if isinstance(self.rounding, Ceil):
            return Floor(complement).reverse_est(rem)
        return Ceil(complement).reverse_est(rem)


def referral_fee_ratio(fee_pct: int) -> FeeRatio | None:
    """Floor-rounded ``fee_pct`` percent operator. ``None`` if ``fee_pct > 100``."""
    if fee_pct > 100:
        return None
    return FeeRatio(Floor(Ratio(fee_pct, 100)))
