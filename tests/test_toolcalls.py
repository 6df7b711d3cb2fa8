import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from ripestat_mcp.datacalls import DataClient
from ripestat_mcp.protocol import CallToolParams
from ripestat_mcp.toolcalls import (
    ParameterError,
    ToolExecutionError,
    ToolExecutor,
    format_error_message,
    get_optional_string_param,
    get_required_string_param,
    validate_look_back_limit_param,
    validate_lod_param,
)


class Recorder:
    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = {"ok": True} if result is None else result
        self.error = error

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error
        return self.result


def call(executor, name, args):
    return executor.execute(CallToolParams(name=name, arguments=args))


# ---------------------------------------------------------------- helpers


@pytest.mark.parametrize(
    "err, expected",
    [
        (RuntimeError("network timeout"), "Error: network timeout"),
        (RuntimeError("Error: invalid resource"), "Error: invalid resource"),
        (RuntimeError("error: something went wrong"), "Error: error: something went wrong"),
    ],
)
def test_format_error_message(err, expected):
    assert format_error_message(err) == expected


def test_required_string_param_present():
    assert get_required_string_param({"resource": "test-value"}, "resource", "Error: x") == "test-value"


@pytest.mark.parametrize("args", [{}, {"resource": 123}])
def test_required_string_param_missing_or_wrong_type(args):
    with pytest.raises(ParameterError) as info:
        get_required_string_param(args, "resource", "Error: resource required")
    assert str(info.value) == "Error: resource required"


@pytest.mark.parametrize(
    "args, expected",
    [({"query_time": "2023-01-01"}, "2023-01-01"), ({}, ""), ({"query_time": 123}, "")],
)
def test_optional_string_param(args, expected):
    assert get_optional_string_param(args, "query_time") == expected


@pytest.mark.parametrize(
    "args, expected", [({"lod": "0"}, 0), ({"lod": "1"}, 1), ({}, 0), ({"lod": 5}, 0)]
)
def test_validate_lod_param_valid(args, expected):
    assert validate_lod_param(args) == expected


@pytest.mark.parametrize("value", ["2", "abc", "-1"])
def test_validate_lod_param_invalid(value):
    with pytest.raises(ParameterError, match="lod parameter must be 0 or 1"):
        validate_lod_param({"lod": value})


@pytest.mark.parametrize(
    "args, expected", [({"look_back_limit": "10"}, 10), ({}, 0), ({"look_back_limit": 3600}, 0)]
)
def test_validate_look_back_limit_valid(args, expected):
    assert validate_look_back_limit_param(args) == expected


def test_validate_look_back_limit_invalid():
    with pytest.raises(ParameterError, match="must be a valid integer"):
        validate_look_back_limit_param({"look_back_limit": "abc"})


# ---------------------------------------------------------------- dispatch


def test_unknown_tool_raises():
    with pytest.raises(ToolExecutionError, match="unknown tool"):
        call(ToolExecutor(), "unknownTool", {"resource": "test"})


def test_whats_my_ip_disabled_raises():
    executor = ToolExecutor({"getWhatsMyIP": Recorder()}, disable_whats_my_ip=True)
    with pytest.raises(ToolExecutionError, match="disabled"):
        call(executor, "getWhatsMyIP", {})


def test_whats_my_ip_enabled_calls_backend():
    backend = Recorder({"ip": "192.0.2.1"})
    result = call(ToolExecutor({"getWhatsMyIP": backend}), "getWhatsMyIP", {})
    assert not result.is_error
    assert json.loads(result.content[0].text) == {"ip": "192.0.2.1"}
    assert backend.calls == [((), {})]


def test_tool_without_backend_raises():
    with pytest.raises(ToolExecutionError, match="not available"):
        call(ToolExecutor(), "getWhois", {"resource": "8.8.8.8"})


@pytest.mark.parametrize(
    "tool",
    [
        "getNetworkInfo",
        "getASOverview",
        "getAnnouncedPrefixes",
        "getRoutingStatus",
        "getRoutingHistory",
        "getWhois",
        "getAbuseContactFinder",
        "getRPKIHistory",
        "getCountryASNs",
        "getBGPlay",
        "getAddressSpaceHierarchy",
        "getPrefixOverview",
        "getPrefixRoutingConsistency",
        "getASNNeighbours",
        "getLookingGlass",
    ],
)
def test_missing_resource_gives_error_result(tool):
    result = call(ToolExecutor(), tool, {})
    assert result.is_error
    assert "resource parameter is required" in result.content[0].text


@pytest.mark.parametrize(
    "args, message",
    [
        ({"prefix": "8.8.8.0/24"}, "resource parameter is required"),
        ({"resource": "AS15169"}, "prefix parameter is required"),
        ({}, "resource parameter is required"),
    ],
)
def test_rpki_validation_errors(args, message):
    result = call(ToolExecutor(), "getRPKIValidation", args)
    assert result.is_error
    assert message in result.content[0].text


def test_rpki_validation_passes_resource_and_prefix():
    backend = Recorder()
    call(ToolExecutor({"getRPKIValidation": backend}), "getRPKIValidation",
         {"resource": "AS15169", "prefix": "8.8.8.0/24"})
    assert backend.calls == [(("AS15169", "8.8.8.0/24"), {})]


@pytest.mark.parametrize("lod", ["invalid", "2", "abc"])
def test_asn_neighbours_invalid_lod(lod):
    result = call(ToolExecutor(), "getASNNeighbours", {"resource": "AS15169", "lod": lod})
    assert result.is_error
    assert "lod parameter must be 0 or 1" in result.content[0].text


@pytest.mark.parametrize(
    "args, lod, query_time",
    [
        ({"resource": "AS15169", "lod": 5}, 0, ""),
        ({"resource": "AS15169", "lod": -1}, 0, ""),
        ({"resource": "AS15169", "lod": [1, 2]}, 0, ""),
        ({"resource": "AS15169", "lod": "1"}, 1, ""),
        ({"resource": "AS15169", "lod": "0", "query_time": "2023-01-01T00:00:00Z"}, 0,
         "2023-01-01T00:00:00Z"),
    ],
)
def test_asn_neighbours_accepted(args, lod, query_time):
    backend = Recorder()
    result = call(ToolExecutor({"getASNNeighbours": backend}), "getASNNeighbours", args)
    assert not result.is_error
    assert backend.calls == [(("AS15169",), {"lod": lod, "query_time": query_time})]


@pytest.mark.parametrize("limit", ["invalid", "abc", "not_a_number"])
def test_looking_glass_invalid_limit(limit):
    result = call(ToolExecutor(), "getLookingGlass",
                  {"resource": "8.8.8.0/24", "look_back_limit": limit})
    assert result.is_error
    assert "look_back_limit parameter must be a valid integer" in result.content[0].text


@pytest.mark.parametrize(
    "extra, expected",
    [({"look_back_limit": "10"}, 10), ({}, 0), ({"look_back_limit": [1, 2, 3]}, 0),
     ({"look_back_limit": {"invalid": "type"}}, 0)],
)
def test_looking_glass_accepted(extra, expected):
    backend = Recorder()
    result = call(ToolExecutor({"getLookingGlass": backend}), "getLookingGlass",
                  {"resource": "8.8.8.0/24", **extra})
    assert not result.is_error
    assert backend.calls == [(("8.8.8.0/24",), {"look_back_limit": expected})]


def test_country_asns_lod():
    backend = Recorder()
    executor = ToolExecutor({"getCountryASNs": backend})
    assert not call(executor, "getCountryASNs", {"resource": "NL", "lod": "1"}).is_error
    assert backend.calls == [(("NL",), {"lod": 1})]
    bad = call(executor, "getCountryASNs", {"resource": "NL", "lod": "invalid"})
    assert bad.is_error
    assert "lod parameter must be 0 or 1" in bad.content[0].text


def test_routing_history_without_options():
    backend = Recorder()
    call(ToolExecutor({"getRoutingHistory": backend}), "getRoutingHistory", {"resource": "AS3333"})
    assert backend.calls == [(("AS3333",), {})]


@pytest.mark.parametrize(
    "extra, options",
    [
        ({"start_time": "2024-01-01T00:00:00Z", "end_time": "2024-12-31T23:59:59Z",
          "max_results": "100"},
         {"start_time": "2024-01-01T00:00:00Z", "end_time": "2024-12-31T23:59:59Z",
          "max_results": 100}),
        ({"start_time": "2024-01-01T00:00:00Z"},
         {"start_time": "2024-01-01T00:00:00Z", "end_time": "", "max_results": 0}),
        ({"max_results": "50"}, {"start_time": "", "end_time": "", "max_results": 50}),
    ],
)
def test_routing_history_with_options(extra, options):
    backend = Recorder()
    result = call(ToolExecutor({"getRoutingHistory": backend}), "getRoutingHistory",
                  {"resource": "AS3333", **extra})
    assert not result.is_error
    assert backend.calls == [(("AS3333",), options)]


@pytest.mark.parametrize(
    "value, message",
    [("invalid", "max_results parameter must be a valid integer"),
     ("-10", "max_results parameter must be non-negative")],
)
def test_routing_history_bad_max_results(value, message):
    result = call(ToolExecutor(), "getRoutingHistory", {"resource": "AS3333", "max_results": value})
    assert result.is_error
    assert message in result.content[0].text


def test_backend_failure_becomes_error_result():
    executor = ToolExecutor({"getWhois": Recorder(error=RuntimeError("boom"))})
    result = call(executor, "getWhois", {"resource": "8.8.8.8"})
    assert result.is_error
    assert result.content[0].text == "Error: boom"


def test_backend_failure_with_prefix_kept():
    executor = ToolExecutor({"getWhois": Recorder(error=RuntimeError("Error: bad resource"))})
    result = call(executor, "getWhois", {"resource": "8.8.8.8"})
    assert result.content[0].text == "Error: bad resource"


def test_unmarshalable_arguments_raise():
    with pytest.raises(ToolExecutionError, match="failed to marshal arguments"):
        call(ToolExecutor(), "getNetworkInfo", {"resource": object()})


def test_non_object_arguments_raise():
    with pytest.raises(ToolExecutionError, match="failed to unmarshal arguments"):
        call(ToolExecutor(), "getNetworkInfo", "invalid json string")


def test_meta_does_not_affect_arguments():
    backend = Recorder({"resource": "test"})
    params = CallToolParams(name="getNetworkInfo", arguments={"resource": "test"},
                            meta={"progressToken": 123})
    result = ToolExecutor({"getNetworkInfo": backend}).execute(params)
    assert backend.calls == [(("test",), {})]
    assert json.loads(result.content[0].text) == {"resource": "test"}


# ---------------------------------------------------------------- built-in backends


class _Handler(BaseHTTPRequestHandler):
    status = 200
    body = b""

    def do_GET(self):
        self.send_response(self.status)
        self.send_header("Content-Type", "application/json")
        self.end_headers()
        self.wfile.write(self.body)

    def log_message(self, *args):
        pass


@pytest.fixture
def api_server():
    def start(status, body):
        handler = type("Handler", (_Handler,), {"status": status, "body": body.encode()})
        server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_address[1]}"

    servers = []
    yield start
    for server in servers:
        server.shutdown()
        server.server_close()


def test_abuse_contact_finder_default_backend(api_server):
    body = json.dumps({
        "data": {"abuse_contacts": ["abuse@example.com"], "parameters": {"resource": "193.0.0.0/21"}},
        "status": "ok",
        "time": "2025-06-23T20:09:57.048781",
    })
    executor = ToolExecutor(data_client=DataClient(api_server(200, body)))
    result = call(executor, "getAbuseContactFinder", {"resource": "193.0.0.0/21"})
    assert not result.is_error
    assert json.loads(result.content[0].text) == {
        "contacts": ["abuse@example.com"],
        "fetched_at": "2025-06-23T20:09:57.048781",
    }


def test_default_backend_server_error(api_server):
    executor = ToolExecutor(data_client=DataClient(api_server(500, '{"error": "x"}')))
    result = call(executor, "getAbuseContactFinder", {"resource": "193.0.0.0/21"})
    assert result.is_error
    assert result.content[0].text.startswith("Error: ")
    assert "failed to get abuse contact information" in result.content[0].text