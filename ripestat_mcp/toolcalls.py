"""Argument checking and dispatch of tools/call requests to data-call backends."""

from __future__ import annotations

import json
import re
from functools import partial
from typing import Any, Callable, Mapping

from ripestat_mcp.datacalls import (
    AbuseContactFinderClient,
    AddressSpaceHierarchyClient,
    AllocationHistoryClient,
    DataClient,
)
from ripestat_mcp.protocol import (
    CallToolParams,
    ToolResult,
    tool_result_from_json,
    tool_result_from_text,
)

ERR_RESOURCE_REQUIRED = "Error: resource parameter is required"
ERR_PREFIX_REQUIRED = "Error: prefix parameter is required"
ERR_LOD_PARAMETER_INVALID = "Error: lod parameter must be 0 or 1"
ERR_LOOK_BACK_LIMIT_INVALID = "Error: look_back_limit parameter must be a valid integer"
ERR_MAX_RESULTS_INVALID = "Error: max_results parameter must be a valid integer"
ERR_MAX_RESULTS_NEGATIVE = "Error: max_results parameter must be non-negative"

WHATS_MY_IP = "getWhatsMyIP"

_INTEGER = re.compile(r"[+-]?[0-9]+")

Backend = Callable[..., Any]


class ParameterError(ValueError):
    """A tool argument is missing or invalid; the message is shown to the client."""


class ToolExecutionError(Exception):
    """A tool call could not be carried out at all."""


def format_error_message(err: BaseException | str) -> str:
    """Prefix an error with 'Error:' unless it already starts with it."""
    text = str(err)
    if text.startswith("Error:"):
        return text
    return f"Error: {text}"


def get_required_string_param(args: Mapping[str, Any], key: str, error_msg: str) -> str:
    """Return args[key] if it is a string, else raise ParameterError(error_msg)."""
    value = args.get(key)
    if not isinstance(value, str):
        raise ParameterError(error_msg)
    return value


def get_optional_string_param(args: Mapping[str, Any], key: str) -> str:
    """Return args[key] if it is a string, else the empty string."""
    value = args.get(key)
    return value if isinstance(value, str) else ""


def _parse_int(text: str) -> int | None:
    if _INTEGER.fullmatch(text) is None:
        return None
    return int(text)


def validate_lod_param(args: Mapping[str, Any]) -> int:
    """Return the level of detail (0 or 1); 0 when absent or not a string."""
    value = args.get("lod")
    if not isinstance(value, str):
        return 0
    lod = _parse_int(value)
    if lod not in (0, 1):
        raise ParameterError(ERR_LOD_PARAMETER_INVALID)
    return lod


def validate_look_back_limit_param(args: Mapping[str, Any]) -> int:
    """Return the look-back limit in seconds; 0 when absent or not a string."""
    value = args.get("look_back_limit")
    if not isinstance(value, str):
        return 0
    limit = _parse_int(value)
    if limit is None:
        raise ParameterError(ERR_LOOK_BACK_LIMIT_INVALID)
    return limit


def _resource(args: Mapping[str, Any]) -> str:
    return get_required_string_param(args, "resource", ERR_RESOURCE_REQUIRED)


def _resource_only(args: Mapping[str, Any], call: Backend) -> Any:
    return call(_resource(args))


def _routing_history(args: Mapping[str, Any], call: Backend) -> Any:
    resource = _resource(args)
    start_time = get_optional_string_param(args, "start_time")
    end_time = get_optional_string_param(args, "end_time")
    max_results = 0
    raw_max = get_optional_string_param(args, "max_results")
    if raw_max:
        parsed = _parse_int(raw_max)
        if parsed is None:
            raise ParameterError(ERR_MAX_RESULTS_INVALID)
        if parsed < 0:
            raise ParameterError(ERR_MAX_RESULTS_NEGATIVE)
        max_results = parsed
    if start_time or end_time or max_results > 0:
        return call(
            resource, start_time=start_time, end_time=end_time, max_results=max_results
        )
    return call(resource)


def _rpki_validation(args: Mapping[str, Any], call: Backend) -> Any:
    resource = _resource(args)
    prefix = get_required_string_param(args, "prefix", ERR_PREFIX_REQUIRED)
    return call(resource, prefix)


def _asn_neighbours(args: Mapping[str, Any], call: Backend) -> Any:
    resource = _resource(args)
    lod = validate_lod_param(args)
    return call(resource, lod=lod, query_time=get_optional_string_param(args, "query_time"))


def _looking_glass(args: Mapping[str, Any], call: Backend) -> Any:
    resource = _resource(args)
    return call(resource, look_back_limit=validate_look_back_limit_param(args))


def _country_asns(args: Mapping[str, Any], call: Backend) -> Any:
    resource = _resource(args)
    return call(resource, lod=validate_lod_param(args))


def _whats_my_ip(_args: Mapping[str, Any], call: Backend) -> Any:
    return call()


_ADAPTERS: dict[str, Callable[[Mapping[str, Any], Backend], Any]] = {
    **{
        name: _resource_only
        for name in (
            "getNetworkInfo",
            "getASOverview",
            "getAnnouncedPrefixes",
            "getRelatedPrefixes",
            "getRoutingStatus",
            "getWhois",
            "getAbuseContactFinder",
            "getRPKIHistory",
            "getBGPlay",
            "getBGPUpdates",
            "getPrefixRoutingConsistency",
            "getPrefixOverview",
            "getAddressSpaceHierarchy",
            "getAllocationHistory",
            "getASPathLength",
            "getASRoutingConsistency",
        )
    },
    "getRoutingHistory": _routing_history,
    "getRPKIValidation": _rpki_validation,
    "getASNNeighbours": _asn_neighbours,
    "getLookingGlass": _looking_glass,
    "getCountryASNs": _country_asns,
    WHATS_MY_IP: _whats_my_ip,
}


def _decode_arguments(arguments: Any) -> dict[str, Any]:
    if arguments is None:
        return {}
    try:
        encoded = json.dumps(arguments)
    except (TypeError, ValueError) as exc:
        raise ToolExecutionError(f"failed to marshal arguments: {exc}") from exc
    decoded = json.loads(encoded)
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise ToolExecutionError(
            f"failed to unmarshal arguments: expected an object, got {type(decoded).__name__}"
        )
    return decoded


class ToolExecutor:
    """Checks tool arguments and runs the backend registered for each tool.

    The data calls this package implements are registered by default; further
    backends can be supplied by tool name.
    """

    def __init__(
        self,
        backends: Mapping[str, Backend] | None = None,
        *,
        data_client: DataClient | None = None,
        disable_whats_my_ip: bool = False,
    ) -> None:
        client = data_client if data_client is not None else DataClient()
        defaults: dict[str, Backend] = {
            "getAbuseContactFinder": AbuseContactFinderClient(client).get,
            "getAddressSpaceHierarchy": AddressSpaceHierarchyClient(client).get,
            "getAllocationHistory": AllocationHistoryClient(client).get,
        }
        self.backends: dict[str, Backend] = {**defaults, **(backends or {})}
        self.disable_whats_my_ip = disable_whats_my_ip

    def _invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        backend = self.backends.get(name)
        if backend is None:
            raise ToolExecutionError(f"tool {name} is not available")
        return backend(*args, **kwargs)

    def execute(self, params: CallToolParams) -> ToolResult:
        """Run a tool call.

        Bad arguments and backend failures come back as error results; an unknown
        or disabled tool raises ToolExecutionError.
        """
        args = _decode_arguments(params.arguments)
        adapter = _ADAPTERS.get(params.name)
        if adapter is None:
            raise ToolExecutionError(f"unknown tool: {params.name}")
        if params.name == WHATS_MY_IP and self.disable_whats_my_ip:
            raise ToolExecutionError("whats-my-ip tool is disabled")
        try:
            data = adapter(args, partial(self._invoke, params.name))
        except ParameterError as exc:
            return tool_result_from_text(str(exc), True)
        except ToolExecutionError:
            raise
        except Exception as exc:  # any backend failure is reported to the client
            return tool_result_from_text(format_error_message(exc), True)
        return tool_result_from_json(data)