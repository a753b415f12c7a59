"""
Fixed-width hash identifiers.

Bytes are stored little-endian (wire order) and displayed big-endian with a
``0x`` prefix, so ``UInt256.parse(str(x)) == x``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import ClassVar, TypeVar

T = TypeVar("T", bound="_UIntBase")


@total_ordering
@dataclass(frozen=True, eq=True)
class _UIntBase:
    SIZE: ClassVar[int] = 0

    data: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes | bytearray):
            raise TypeError(f"{type(self).__name__} requires bytes")
        if len(self.data) != self.SIZE:
            raise ValueError(
                f"{type(self).__name__} requires {self.SIZE} bytes, got {len(self.data)}"
            )
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def parse(cls: type[T], text: str) -> T:
        if not isinstance(text, str):
            raise ValueError(f"Expected hex string, got {type(text).__name__}")
        value = text.strip()
        if value.startswith(("0x", "0X")):
            value = value[2:]
        if len(value) != cls.SIZE * 2:
            raise ValueError(f"{cls.__name__} must be {cls.SIZE * 2} hex characters")
        try:
            raw = bytes.fromhex(value)
        except ValueError as e:
            raise ValueError(f"Invalid hex for {cls.__name__}: {text!r}") from e
        return cls(raw[::-1])

    @classmethod
    def zero(cls: type[T]) -> T:
        return cls(bytes(cls.SIZE))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return NotImplemented
        return int.from_bytes(self.data, "little") < int.from_bytes(other.data, "little")

    def __str__(self) -> str:
        return "0x" + self.data[::-1].hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class UInt160(_UIntBase):
    """20-byte script hash."""

    SIZE = 20


class UInt256(_UIntBase):
    """32-byte asset identifier or transaction hash."""

    SIZE = 32
