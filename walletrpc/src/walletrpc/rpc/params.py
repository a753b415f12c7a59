"""
Positional parameter parsing.

Every parser raises InvalidParams on bad input; nothing is silently coerced.
"""

from __future__ import annotations

from typing import Any

from walletcore import Fixed8, TransactionOutput, UInt160, UInt256, address_to_script_hash

from walletrpc.errors import InvalidParams


def check_count(params: list[Any], minimum: int, maximum: int) -> None:
    if not minimum <= len(params) <= maximum:
        if minimum == maximum:
            expected = str(minimum)
        else:
            expected = f"{minimum}-{maximum}"
        raise InvalidParams(f"Invalid params: expected {expected} parameter(s), got {len(params)}")


def parse_string(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise InvalidParams(f"Invalid params: {name} must be a string")
    return value


def parse_asset(value: Any) -> UInt256:
    try:
        return UInt256.parse(parse_string(value, "asset"))
    except ValueError as e:
        raise InvalidParams(f"Invalid params: {e}") from e


def parse_address(value: Any) -> UInt160:
    try:
        return address_to_script_hash(parse_string(value, "address"))
    except ValueError as e:
        raise InvalidParams(f"Invalid params: {e}") from e


def parse_amount(value: Any, name: str = "value") -> Fixed8:
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        raise InvalidParams(f"Invalid params: {name} must be a decimal string or number")
    try:
        return Fixed8.parse(value)
    except ValueError as e:
        raise InvalidParams(f"Invalid params: {e}") from e


def parse_positive_amount(value: Any, name: str = "value") -> Fixed8:
    amount = parse_amount(value, name)
    if amount <= Fixed8.ZERO:
        raise InvalidParams(f"Invalid params: {name} must be positive")
    return amount


def parse_fee(value: Any) -> Fixed8:
    fee = parse_amount(value, "fee")
    if fee < Fixed8.ZERO:
        raise InvalidParams("Invalid params: fee must not be negative")
    return fee


def parse_output(value: Any) -> TransactionOutput:
    """Parse a ``{"asset", "value", "address"}`` transfer."""
    if not isinstance(value, dict):
        raise InvalidParams("Invalid params: each output must be an object")
    missing = {"asset", "value", "address"} - value.keys()
    if missing:
        raise InvalidParams(f"Invalid params: output missing {', '.join(sorted(missing))}")
    return TransactionOutput(
        asset_id=parse_asset(value["asset"]),
        value=parse_positive_amount(value["value"]),
        script_hash=parse_address(value["address"]),
    )
