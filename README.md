# ripestat-mcp

The core of a Model Context Protocol (MCP) server that answers questions about
Internet routing and address space from the RIPEstat data API. It speaks
JSON-RPC 2.0, negotiates the MCP protocol version with the client, lists its
tools, checks tool arguments and turns tool calls into data-call queries.

The package uses only the Python standard library and supports Python 3.10
and later.

## Modules

- `ripestat_mcp.jsonrpc`: JSON-RPC 2.0 messages (`Request`, `Response`,
  `Notification`, `RpcError`), the standard and MCP error codes (`ErrorCode`),
  `error_response()`, and `parse_message()`, which decodes text or bytes into a
  request, response or notification and raises `MessageParseError` when it
  cannot.
- `ripestat_mcp.protocol`: initialize results for current and legacy clients
  (`create_initialize_result()`, `create_legacy_initialize_result()`), tool
  call parameters (`CallToolParams`, `parse_call_tool_params()`) and tool
  results (`ToolResult`, `ToolContent`, `tool_result_from_text()`,
  `tool_result_from_json()`).
- `ripestat_mcp.catalogue`: the 22 tools the server lists, each a `Tool` with
  its JSON input schema (`create_tools_list()`).
- `ripestat_mcp.datacalls`: `DataClient`, which fetches JSON from the data
  API, and clients for three data calls: `AbuseContactFinderClient`,
  `AddressSpaceHierarchyClient` and `AllocationHistoryClient`, with
  `get_abuse_contact_finder()`, `get_address_space_hierarchy()` and
  `get_allocation_history()` as shortcuts that use a default client.
- `ripestat_mcp.toolcalls`: argument helpers (`get_required_string_param()`,
  `get_optional_string_param()`, `validate_lod_param()`,
  `validate_look_back_limit_param()`, `format_error_message()`) and
  `ToolExecutor`, which runs a tool call against its backend.
- `ripestat_mcp.server`: `Server`, which takes raw JSON-RPC messages and
  returns the response to send back.

## Handling messages

```python
from ripestat_mcp.server import Server

server = Server("ripestat-mcp", "0.1.0", False)

reply = server.process_message(
    b'{"jsonrpc": "2.0", "method": "initialize",'
    b' "params": {"protocolVersion": "2025-06-18"}, "id": 1}'
)
print(reply.to_dict())

# Notifications produce no reply.
server.process_message(b'{"jsonrpc": "2.0", "method": "notifications/initialized"}')

tools = server.process_message(b'{"jsonrpc": "2.0", "method": "tools/list", "id": 2}')
print([tool["name"] for tool in tools.to_dict()["result"]["tools"]])
```

`process_message()` returns a `Response`, or `None` for a notification. Text
that is not valid JSON gets a parse error; a request with a wrong `jsonrpc`
version, no method or no id gets an invalid-request error; an unknown method
gets a method-not-found error. `ping` answers with an empty result.

Requests for `tools/list` or `tools/call` made before the client has
initialized are answered with an initialization error. A client initializes by
sending the `initialized` or `notifications/initialized` notification. Clients
that announce a protocol version older than `2025-06-18` are initialized at
once and receive the legacy result, which reports version `2025-03-26` and no
transport capability.

Passing `True` as the third argument to `Server` drops `getWhatsMyIP` from the
tool list, and a call to it then fails with a tool error.

A request can also be built from URL query parameters, as an HTTP transport
would receive them. Values may be strings or lists of strings, of which the
first is used:

```python
payload = server.parse_query_to_request({"method": ["ping"]})
# b'{"jsonrpc": "2.0", "method": "ping", "id": "1"}'
```

The id defaults to `"1"`. A `params` value is decoded as JSON; otherwise every
key other than `method`, `id` and `params` becomes a parameter. A missing
method or malformed params JSON raises `ValueError`.

## Tool calls and backends

Each tool call answers with a tool result holding one text item. On success
the text is the backend's answer as indented JSON. When an argument is missing
or invalid, or the backend raises, the result is marked as an error and the
text begins with `Error:`. An unknown tool, a disabled `getWhatsMyIP`, or a
tool that has no backend raises `ToolExecutionError`, which the server turns
into a tool-error response.

Only `getAbuseContactFinder`, `getAddressSpaceHierarchy` and
`getAllocationHistory` have backends out of the box. Others are supplied by
tool name through the `backends` keyword of `Server` or `ToolExecutor`; each
is called with the checked arguments:

| Tool | Call |
| --- | --- |
| resource-only tools | `backend(resource)` |
| `getRoutingHistory` | `backend(resource)`, or with `start_time=`, `end_time=`, `max_results=` when any is given |
| `getRPKIValidation` | `backend(resource, prefix)` |
| `getASNNeighbours` | `backend(resource, lod=, query_time=)` |
| `getLookingGlass` | `backend(resource, look_back_limit=)` |
| `getCountryASNs` | `backend(resource, lod=)` |
| `getWhatsMyIP` | `backend()` |

```python
server = Server(
    "ripestat-mcp", "0.1.0",
    backends={"getWhois": lambda resource: {"resource": resource}},
)
```

A `data_client` keyword replaces the `DataClient` the built-in backends use,
for example to point them at another base URL.

## Querying RIPEstat directly

```python
from ripestat_mcp.datacalls import InvalidParameterError, get_abuse_contact_finder

contacts = get_abuse_contact_finder("193.0.0.0/21")
print(contacts.to_dict())  # {"contacts": [...], "fetched_at": "..."}

try:
    get_abuse_contact_finder("")
except InvalidParameterError as exc:
    print(exc)  # invalid parameter: resource parameter is required
```

`DataClient(base_url, timeout)` defaults to the public RIPEstat service and a
30-second timeout. An HTTP error status, a network failure or a body that
cannot be decoded raises `ServerError`; both error types derive from
`RipeStatError`.

## What this package does not do

- It has no transport: nothing here listens on a socket, serves HTTP or reads
  standard input. A caller feeds messages to `Server.process_message()` and
  sends back what it returns.
- It has no command to start a server.
- Of the tools it lists, only the three named above query RIPEstat; the rest
  need backends supplied by the caller.