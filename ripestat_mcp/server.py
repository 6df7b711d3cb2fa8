"""The MCP server: routes JSON-RPC messages to initialization, tool listing and tool calls."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Sequence

from ripestat_mcp.catalogue import create_tools_list
from ripestat_mcp.datacalls import DataClient
from ripestat_mcp.jsonrpc import (
    ErrorCode,
    MessageParseError,
    Notification,
    Request,
    Response,
    error_response,
    parse_message,
)
from ripestat_mcp.protocol import (
    PROTOCOL_VERSION,
    CallToolParams,
    ToolResult,
    create_initialize_result,
    create_legacy_initialize_result,
    parse_call_tool_params,
)
from ripestat_mcp.toolcalls import WHATS_MY_IP, Backend, ToolExecutionError, ToolExecutor

log = logging.getLogger(__name__)

_RESERVED_QUERY_KEYS = frozenset({"method", "id", "params"})


class _InvalidParams(ValueError):
    """Initialize parameters that cannot be decoded."""


def _decode_initialize_params(params: Any) -> str:
    """Return the client's protocol version from initialize params."""
    if params is None:
        return ""
    try:
        decoded = json.loads(json.dumps(params))
    except (TypeError, ValueError) as exc:
        raise _InvalidParams(str(exc)) from exc
    if decoded is None:
        return ""
    if not isinstance(decoded, dict):
        raise _InvalidParams(
            f"cannot decode initialize params: expected an object, got {type(decoded).__name__}"
        )
    version = decoded.get("protocolVersion")
    if version is None:
        version = ""
    elif not isinstance(version, str):
        raise _InvalidParams("field 'protocolVersion' must be a string")
    client_info = decoded.get("clientInfo")
    if client_info is not None:
        if not isinstance(client_info, dict):
            raise _InvalidParams("field 'clientInfo' must be an object")
        for key in ("name", "version"):
            value = client_info.get(key)
            if value is not None and not isinstance(value, str):
                raise _InvalidParams(f"field 'clientInfo.{key}' must be a string")
    return version


def _first(values: str | Sequence[str] | None) -> str:
    if values is None:
        return ""
    if isinstance(values, str):
        return values
    return values[0] if len(values) > 0 else ""


class Server:
    """An MCP server answering JSON-RPC messages."""

    def __init__(
        self,
        server_name: str,
        server_version: str,
        disable_whats_my_ip: bool = False,
        *,
        backends: Mapping[str, Backend] | None = None,
        data_client: DataClient | None = None,
    ) -> None:
        self.server_name = server_name
        self.server_version = server_version
        self.disable_whats_my_ip = disable_whats_my_ip
        self.initialized = False
        self.globally_initialized = False
        self._executor = ToolExecutor(
            backends, data_client=data_client, disable_whats_my_ip=disable_whats_my_ip
        )

    @property
    def ready(self) -> bool:
        return self.initialized or self.globally_initialized

    def process_message(self, data: str | bytes) -> Response | None:
        """Handle one incoming message; notifications yield None."""
        log.debug("processing MCP message: %r", data)
        try:
            message = parse_message(data)
        except MessageParseError as exc:
            log.error("failed to parse message: %s", exc)
            return error_response(ErrorCode.PARSE_ERROR, "Parse error", str(exc), None)

        if isinstance(message, Request):
            return self._handle_request(message)
        if isinstance(message, Notification):
            return self._handle_notification(message)
        return error_response(
            ErrorCode.INVALID_REQUEST, "Invalid request", "Unknown message type", None
        )

    def _handle_request(self, req: Request) -> Response:
        try:
            req.validate()
        except ValueError as exc:
            return error_response(ErrorCode.INVALID_REQUEST, "Invalid request", str(exc), req.id)

        log.debug("handling request %s (id %r)", req.method, req.id)
        if req.method == "initialize":
            return self._handle_initialize(req)
        if req.method in ("tools/list", "tools/call"):
            if not self.ready:
                return error_response(
                    ErrorCode.INITIALIZATION_ERROR,
                    "Server not initialized",
                    "Initialize first",
                    req.id,
                )
            if req.method == "tools/list":
                return self._handle_tools_list(req)
            return self._handle_tools_call(req)
        if req.method == "ping":
            return Response(result={}, id=req.id)
        return error_response(ErrorCode.METHOD_NOT_FOUND, "Method not found", req.method, req.id)

    def _handle_notification(self, notif: Notification) -> None:
        log.debug("handling notification %s", notif.method)
        if notif.method in ("initialized", "notifications/initialized"):
            self.initialized = True
            log.info("MCP server initialized successfully")
        elif notif.method == "notifications/cancelled":
            log.debug("received cancellation notification")
        else:
            log.warning("unknown notification method: %s", notif.method)
        return None

    def _handle_initialize(self, req: Request) -> Response:
        try:
            client_version = _decode_initialize_params(req.params)
        except _InvalidParams as exc:
            return error_response(ErrorCode.INVALID_PARAMS, "Invalid params", str(exc), req.id)

        is_legacy = client_version != "" and client_version < PROTOCOL_VERSION
        log.info(
            "MCP server %s %s responding to initialize (client protocol %r, legacy %s)",
            self.server_name,
            self.server_version,
            client_version,
            is_legacy,
        )
        if is_legacy:
            self.initialized = True
            self.globally_initialized = True
            log.info("auto-initialized server for legacy protocol version %s", client_version)
            return Response(
                result=create_legacy_initialize_result(self.server_name, self.server_version),
                id=req.id,
            )

        if client_version != PROTOCOL_VERSION:
            log.warning(
                "protocol version mismatch: client %r, server %s", client_version, PROTOCOL_VERSION
            )
        return Response(
            result=create_initialize_result(self.server_name, self.server_version), id=req.id
        )

    def _handle_tools_list(self, req: Request) -> Response:
        tools = [
            tool
            for tool in create_tools_list()
            if not (self.disable_whats_my_ip and tool.name == WHATS_MY_IP)
        ]
        return Response(result={"tools": [tool.to_dict() for tool in tools]}, id=req.id)

    def _handle_tools_call(self, req: Request) -> Response:
        try:
            params = parse_call_tool_params(req.params)
        except ValueError as exc:
            return error_response(ErrorCode.INVALID_PARAMS, "Invalid params", str(exc), req.id)
        try:
            result = self.execute_tool_call(params)
        except ToolExecutionError as exc:
            log.error("tool %s failed: %s", params.name, exc)
            return error_response(
                ErrorCode.TOOL_ERROR, "Tool execution failed", str(exc), req.id
            )
        return Response(result=result.to_dict(), id=req.id)

    def execute_tool_call(self, params: CallToolParams) -> ToolResult:
        """Run a tool call; raises ToolExecutionError for unknown or disabled tools."""
        log.debug("executing tool call %s", params.name)
        return self._executor.execute(params)

    def parse_query_to_request(self, query: Mapping[str, str | Sequence[str]]) -> bytes:
        """Turn URL query parameters into an encoded JSON-RPC request.

        Raises ValueError when the method is missing or the params JSON is malformed.
        """
        method = _first(query.get("method"))
        if not method:
            raise ValueError("method parameter is required")
        request = Request(method=method, id=_first(query.get("id")) or "1")

        params_text = _first(query.get("params"))
        if params_text:
            try:
                request.params = json.loads(params_text)
            except ValueError as exc:
                raise ValueError(f"invalid params JSON: {exc}") from exc
        else:
            params = {
                key: _first(values)
                for key, values in query.items()
                if key not in _RESERVED_QUERY_KEYS
                and (isinstance(values, str) or len(values) > 0)
            }
            if params:
                request.params = params
        return json.dumps(request.to_dict()).encode("utf-8")