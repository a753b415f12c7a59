"""
RPC-level error types with stable numeric codes.
"""

from __future__ import annotations

from typing import Any


class RpcError(Exception):
    """Base class for every error surfaced to an RPC caller."""

    code: int = -32603
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, code: int | None = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_json(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class AccessDenied(RpcError):
    code = -400
    default_message = "Access denied"


class InsufficientFunds(RpcError):
    code = -300
    default_message = "Insufficient funds"


class InvalidParams(RpcError):
    code = -32602
    default_message = "Invalid params"


class MethodNotFound(RpcError):
    code = -32601
    default_message = "Method not found"


class InvalidRequest(RpcError):
    code = -32600
    default_message = "Invalid Request"


class ParseError(RpcError):
    code = -32700
    default_message = "Parse error"
