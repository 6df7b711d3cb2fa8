"""MCP protocol structures: initialize results, tool call parameters and tool results."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

PROTOCOL_VERSION = "2025-06-18"
LEGACY_PROTOCOL_VERSION = "2025-03-26"


def _base_capabilities() -> dict[str, Any]:
    return {
        "tools": {},
        "resources": {},
        "prompts": {},
        "logging": {},
        "roots": {},
    }


def create_initialize_result(server_name: str, server_version: str) -> dict[str, Any]:
    """Build the initialize result for current-protocol clients."""
    capabilities = _base_capabilities()
    capabilities["transport"] = {"http": {"streamable": True, "methods": ["POST", "GET"]}}
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": capabilities,
        "serverInfo": {"name": server_name, "version": server_version},
    }


def create_legacy_initialize_result(server_name: str, server_version: str) -> dict[str, Any]:
    """Build the simplified initialize result for older-protocol clients."""
    return {
        "protocolVersion": LEGACY_PROTOCOL_VERSION,
        "capabilities": _base_capabilities(),
        "serverInfo": {"name": server_name, "version": server_version},
    }


@dataclass
class CallToolParams:
    """Parameters of a tools/call request."""

    name: str = ""
    arguments: Any = None
    meta: Any = None


def parse_call_tool_params(params: Any) -> CallToolParams:
    """Decode tools/call parameters; raise ValueError if they are malformed."""
    try:
        decoded = json.loads(json.dumps(params))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"failed to marshal params: {exc}") from exc
    if decoded is None:
        return CallToolParams()
    if not isinstance(decoded, dict):
        raise ValueError(
            f"failed to unmarshal call tool params: expected an object, got {type(decoded).__name__}"
        )
    name = decoded.get("name")
    if name is None:
        name = ""
    elif not isinstance(name, str):
        raise ValueError("failed to unmarshal call tool params: field 'name' must be a string")
    return CallToolParams(name=name, arguments=decoded.get("arguments"), meta=decoded.get("_meta"))


@dataclass
class ToolContent:
    """One piece of content returned by a tool."""

    text: str
    type: str = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass
class ToolResult:
    """The result of a tool call."""

    content: list[ToolContent] = field(default_factory=list)
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"content": [item.to_dict() for item in self.content]}
        if self.is_error:
            out["isError"] = True
        return out


def tool_result_from_text(text: str, is_error: bool = False) -> ToolResult:
    """Wrap text in a single-item tool result."""
    return ToolResult([ToolContent(text)], is_error)


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def tool_result_from_json(data: Any) -> ToolResult:
    """Render data as indented JSON text; an error result if it cannot be rendered."""
    try:
        text = json.dumps(data, indent=2, ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError) as exc:
        return tool_result_from_text(f"Error marshaling result: {exc}", True)
    return tool_result_from_text(text, False)