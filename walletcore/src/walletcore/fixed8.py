"""
Fixed-point amounts with eight decimal places.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import ClassVar

from walletcore.constants import FIXED8_DECIMALS

_FACTOR = 10**FIXED8_DECIMALS
_MIN = -(2**63)
_MAX = 2**63 - 1
_MAX_DIGITS = len(str(_MAX))


@dataclass(frozen=True, order=True)
class Fixed8:
    """Signed 64-bit value scaled by 10^8."""

    ZERO: ClassVar[Fixed8]

    raw: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.raw, int) or isinstance(self.raw, bool):
            raise TypeError(f"Fixed8 raw value must be int, got {type(self.raw).__name__}")
        if not _MIN <= self.raw <= _MAX:
            raise ValueError(f"Fixed8 value out of range: {self.raw}")

    @classmethod
    def parse(cls, value: str | int) -> Fixed8:
        """
        Parse a decimal amount.

        Raises:
            ValueError: If the text is not a decimal, has more than eight
                fractional digits, or overflows int64.
        """
        if isinstance(value, bool):
            raise ValueError(f"Invalid amount: {value!r}")
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e

        if not amount.is_finite():
            raise ValueError(f"Invalid amount: {value!r}")

        # Scale the exact digits; Decimal arithmetic rounds at context precision
        sign, digits, exponent = amount.as_tuple()
        coefficient = int("".join(map(str, digits)))
        if coefficient == 0:
            return cls(0)

        shift = exponent + FIXED8_DECIMALS
        if shift >= 0:
            if len(digits) + shift > _MAX_DIGITS:
                raise ValueError(f"Amount out of range: {value!r}")
            raw = coefficient * 10**shift
        else:
            if -shift > len(digits) or coefficient % 10**-shift:
                raise ValueError(f"Too many decimal places: {value!r}")
            raw = coefficient // 10**-shift

        return cls(-raw if sign else raw)

    @classmethod
    def from_units(cls, units: int) -> Fixed8:
        """Whole units (e.g. 10 -> 10.00000000)."""
        return cls(units * _FACTOR)

    @classmethod
    def sum(cls, values: Iterable[Fixed8]) -> Fixed8:
        total = 0
        for v in values:
            total += v.raw
        return cls(total)

    def __add__(self, other: Fixed8) -> Fixed8:
        if not isinstance(other, Fixed8):
            return NotImplemented
        return Fixed8(self.raw + other.raw)

    def __sub__(self, other: Fixed8) -> Fixed8:
        if not isinstance(other, Fixed8):
            return NotImplemented
        return Fixed8(self.raw - other.raw)

    def __neg__(self) -> Fixed8:
        return Fixed8(-self.raw)

    def __bool__(self) -> bool:
        return self.raw != 0

    def __str__(self) -> str:
        sign = "-" if self.raw < 0 else ""
        whole, frac = divmod(abs(self.raw), _FACTOR)
        if not frac:
            return f"{sign}{whole}"
        frac_str = f"{frac:0{FIXED8_DECIMALS}d}".rstrip("0")
        return f"{sign}{whole}.{frac_str}"

    def __repr__(self) -> str:
        return f"Fixed8({self})"


Fixed8.ZERO = Fixed8(0)
