"""JSON-RPC 2.0 message types and message parsing."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

JSONRPC_VERSION = "2.0"


class ErrorCode(IntEnum):
    """Standard JSON-RPC error codes and the MCP-specific extensions."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    INITIALIZATION_ERROR = -32000
    PROTOCOL_ERROR = -32001
    RESOURCE_ERROR = -32002
    TOOL_ERROR = -32003


class MessageParseError(ValueError):
    """Raised when a JSON-RPC message cannot be decoded."""


@dataclass
class RpcError:
    """The error object carried by an error response."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass
class Request:
    """A JSON-RPC request."""

    method: str
    params: Any = None
    id: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def validate(self) -> None:
        """Raise ValueError if the request is not a well-formed JSON-RPC 2.0 request."""
        if self.jsonrpc != JSONRPC_VERSION:
            raise ValueError(f"invalid jsonrpc version: {self.jsonrpc}")
        if not self.method:
            raise ValueError("method is required")
        if self.id is None:
            raise ValueError("id is required for requests")

    def is_notification(self) -> bool:
        return self.id is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            out["params"] = self.params
        out["id"] = self.id
        return out


@dataclass
class Response:
    """A JSON-RPC response, carrying either a result or an error."""

    result: Any = None
    error: RpcError | None = None
    id: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.result is not None:
            out["result"] = self.result
        if self.error is not None:
            out["error"] = self.error.to_dict()
        out["id"] = self.id
        return out


@dataclass
class Notification:
    """A JSON-RPC notification, which has no id."""

    method: str
    params: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            out["params"] = self.params
        return out


Message = Union[Request, Response, Notification]


def error_response(code: int, message: str, data: Any = None, id: Any = None) -> Response:
    """Build an error response."""
    return Response(error=RpcError(int(code), message, data), id=id)


def _string_field(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string, got {type(value).__name__}")
    return value


def _decode_error(value: Any) -> RpcError | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise TypeError(f"field 'error' must be an object, got {type(value).__name__}")
    code = value.get("code")
    if code is None:
        code = 0
    elif isinstance(code, bool) or not isinstance(code, int):
        raise TypeError(f"field 'code' must be an integer, got {code!r}")
    return RpcError(code, _string_field(value, "message"), value.get("data"))


def _decode_response(raw: dict[str, Any]) -> Response:
    return Response(
        result=raw.get("result"),
        error=_decode_error(raw.get("error")),
        id=raw.get("id"),
        jsonrpc=_string_field(raw, "jsonrpc"),
    )


def parse_message(data: str | bytes) -> Message:
    """Decode a JSON message into a Request, Response or Notification.

    Raises MessageParseError when the text is not JSON or its fields have the wrong types.
    """
    try:
        raw = json.loads(data)
    except ValueError as exc:
        raise MessageParseError(f"invalid JSON: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise MessageParseError(f"invalid JSON: expected an object, got {type(raw).__name__}")

    if "result" in raw:
        label = "invalid response"
        build = _decode_response
    elif "error" in raw:
        label = "invalid error response"
        build = _decode_response
    elif "id" in raw:
        label = "invalid request"

        def build(fields: dict[str, Any]) -> Message:
            return Request(
                method=_string_field(fields, "method"),
                params=fields.get("params"),
                id=fields.get("id"),
                jsonrpc=_string_field(fields, "jsonrpc"),
            )

    else:
        label = "invalid notification"

        def build(fields: dict[str, Any]) -> Message:
            return Notification(
                method=_string_field(fields, "method"),
                params=fields.get("params"),
                jsonrpc=_string_field(fields, "jsonrpc"),
            )

    try:
        return build(raw)
    except (TypeError, ValueError) as exc:
        raise MessageParseError(f"{label}: {exc}") from exc