"""Clients for the abuse-contact-finder, address-space-hierarchy and allocation-history data calls."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Mapping

DEFAULT_BASE_URL = "https://stat.ripe.net"
DEFAULT_TIMEOUT = 30.0

ABUSE_CONTACT_FINDER_PATH = "/data/abuse-contact-finder/data.json"
ADDRESS_SPACE_HIERARCHY_PATH = "/data/address-space-hierarchy/data.json"
ALLOCATION_HISTORY_PATH = "/data/allocation-history/data.json"


class RipeStatError(Exception):
    """Base class for failures talking to the data API."""


class InvalidParameterError(RipeStatError):
    """A request parameter is missing or malformed."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"invalid parameter: {detail}")


class ServerError(RipeStatError):
    """The data API could not be reached or gave an unusable answer."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"server error: {detail}")


class DataClient:
    """Fetches JSON documents from the data API."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def get_json(self, path: str, params: Mapping[str, str] | None = None) -> Any:
        """GET path with the query params and return the decoded JSON body."""
        url = self.base_url + path
        if params:
            url += "?" + urllib.parse.urlencode(params)
        request = urllib.request.Request(url, headers={"Accept": "application/json"})
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                body = response.read()
        except urllib.error.HTTPError as exc:
            raise RipeStatError(f"unexpected HTTP status: {exc.code}") from exc
        except OSError as exc:
            raise RipeStatError(f"request failed: {exc}") from exc
        try:
            return json.loads(body)
        except ValueError as exc:
            raise RipeStatError(f"failed to decode response: {exc}") from exc


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RipeStatError(f"failed to decode response: {what} must be an object")
    return value


def _text(fields: Mapping[str, Any], key: str) -> str:
    value = fields.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise RipeStatError(f"failed to decode response: field {key!r} must be a string")
    return value


def _list(fields: Mapping[str, Any], key: str) -> list[Any]:
    value = fields.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise RipeStatError(f"failed to decode response: field {key!r} must be a list")
    return value


def _split_envelope(document: Any) -> tuple[dict[str, Any], dict[str, Any]]:
    top = _object(document, "response")
    envelope = {key: value for key, value in top.items() if key != "data"}
    return envelope, _object(top.get("data"), "data")


def _require_resource(resource: str) -> None:
    if not resource:
        raise InvalidParameterError("resource parameter is required")


def _fetch(client: DataClient, path: str, resource: str, failure: str) -> Any:
    try:
        return client.get_json(path, {"resource": resource})
    except RipeStatError as exc:
        raise ServerError(f"{failure}: {exc}") from exc


# ---------------------------------------------------------------- abuse contacts


@dataclass
class AbuseContacts:
    """Abuse contacts for a resource and the time they were fetched."""

    contacts: list[str] = field(default_factory=list)
    fetched_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"contacts": list(self.contacts), "fetched_at": self.fetched_at}


class AbuseContactFinderClient:
    """Client for the abuse-contact-finder data call."""

    def __init__(self, client: DataClient | None = None) -> None:
        self.client = client if client is not None else DataClient()

    def get(self, resource: str) -> AbuseContacts:
        _require_resource(resource)
        failure = "failed to get abuse contact information"
        document = _fetch(self.client, ABUSE_CONTACT_FINDER_PATH, resource, failure)
        try:
            envelope, data = _split_envelope(document)
            contacts = [str(item) for item in _list(data, "abuse_contacts")]
            fetched_at = _text(envelope, "time")
        except RipeStatError as exc:
            raise ServerError(f"{failure}: {exc}") from exc
        return AbuseContacts(contacts=contacts, fetched_at=fetched_at)


def get_abuse_contact_finder(resource: str) -> AbuseContacts:
    """Look up abuse contacts with a default client."""
    return AbuseContactFinderClient().get(resource)


# ------------------------------------------------------- address space hierarchy

_ENTRY_KEYS = (
    ("inetnum", "inetnum"),
    ("netname", "netname"),
    ("descr", "descr"),
    ("org", "org"),
    ("remarks", "remarks"),
    ("country", "country"),
    ("admin_c", "admin-c"),
    ("tech_c", "tech-c"),
    ("status", "status"),
    ("mnt_by", "mnt-by"),
    ("mnt_routes", "mnt-routes"),
    ("created", "created"),
    ("last_modified", "last-modified"),
    ("source", "source"),
)
_ALWAYS_PRESENT = {"inetnum", "netname"}


@dataclass
class AddressEntry:
    """One inetnum object in the address space hierarchy."""

    inetnum: str = ""
    netname: str = ""
    descr: str = ""
    org: str = ""
    remarks: str = ""
    country: str = ""
    admin_c: str = ""
    tech_c: str = ""
    status: str = ""
    mnt_by: str = ""
    mnt_routes: str = ""
    created: str = ""
    last_modified: str = ""
    source: str = ""


def _entry_from_dict(raw: Any) -> AddressEntry:
    fields = _object(raw, "address entry")
    return AddressEntry(**{attr: _text(fields, key) for attr, key in _ENTRY_KEYS})


def _entry_to_dict(entry: AddressEntry) -> dict[str, str]:
    out: dict[str, str] = {}
    for attr, key in _ENTRY_KEYS:
        value = getattr(entry, attr)
        if value or key in _ALWAYS_PRESENT:
            out[key] = value
    return out


@dataclass
class AddressSpaceHierarchy:
    """Exact, less specific and more specific objects around a resource."""

    rir: str = ""
    resource: str = ""
    exact: list[AddressEntry] = field(default_factory=list)
    less_specific: list[AddressEntry] = field(default_factory=list)
    more_specific: list[AddressEntry] = field(default_factory=list)
    query_time: str = ""
    parameters: dict[str, Any] = field(default_factory=dict)
    envelope: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.envelope,
            "data": {
                "rir": self.rir,
                "resource": self.resource,
                "exact": [_entry_to_dict(e) for e in self.exact],
                "less_specific": [_entry_to_dict(e) for e in self.less_specific],
                "more_specific": [_entry_to_dict(e) for e in self.more_specific],
                "query_time": self.query_time,
                "parameters": dict(self.parameters),
            },
        }


class AddressSpaceHierarchyClient:
    """Client for the address-space-hierarchy data call."""

    def __init__(self, client: DataClient | None = None) -> None:
        self.client = client if client is not None else DataClient()

    def get(self, resource: str) -> AddressSpaceHierarchy:
        _require_resource(resource)
        failure = "failed to get address space hierarchy"
        document = _fetch(self.client, ADDRESS_SPACE_HIERARCHY_PATH, resource, failure)
        try:
            envelope, data = _split_envelope(document)
            parameters = _object(data.get("parameters"), "parameters")
            return AddressSpaceHierarchy(
                rir=_text(data, "rir"),
                resource=_text(data, "resource"),
                exact=[_entry_from_dict(e) for e in _list(data, "exact")],
                less_specific=[_entry_from_dict(e) for e in _list(data, "less_specific")],
                more_specific=[_entry_from_dict(e) for e in _list(data, "more_specific")],
                query_time=_text(data, "query_time"),
                parameters={
                    "resource": _text(parameters, "resource"),
                    "cache": parameters.get("cache"),
                },
                envelope=envelope,
            )
        except RipeStatError as exc:
            raise ServerError(f"{failure}: {exc}") from exc


def get_address_space_hierarchy(resource: str) -> AddressSpaceHierarchy:
    """Look up the address space hierarchy with a default client."""
    return AddressSpaceHierarchyClient().get(resource)


# ------------------------------------------------------------ allocation history


@dataclass
class AllocationResult:
    """One allocation status of a resource over a set of time spans."""

    resource: str = ""
    status: str = ""
    timelines: list[dict[str, str]] = field(default_factory=list)


def _result_from_dict(raw: Any) -> AllocationResult:
    fields = _object(raw, "allocation result")
    timelines = []
    for item in _list(fields, "timelines"):
        span = _object(item, "timeline")
        timelines.append({"starttime": _text(span, "starttime"), "endtime": _text(span, "endtime")})
    return AllocationResult(
        resource=_text(fields, "resource"), status=_text(fields, "status"), timelines=timelines
    )


def _result_to_dict(result: AllocationResult) -> dict[str, Any]:
    return {
        "resource": result.resource,
        "status": result.status,
        "timelines": [dict(span) for span in result.timelines],
    }


@dataclass
class AllocationHistory:
    """Allocation results per registry for a resource."""

    results: dict[str, list[AllocationResult]] = field(default_factory=dict)
    resource: str = ""
    query_start_time: str = ""
    query_end_time: str = ""
    envelope: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.envelope,
            "data": {
                "results": {
                    registry: [_result_to_dict(r) for r in entries]
                    for registry, entries in self.results.items()
                },
                "resource": self.resource,
                "query_starttime": self.query_start_time,
                "query_endtime": self.query_end_time,
            },
        }


class AllocationHistoryClient:
    """Client for the allocation-history data call."""

    def __init__(self, client: DataClient | None = None) -> None:
        self.client = client if client is not None else DataClient()

    def get(self, resource: str) -> AllocationHistory:
        _require_resource(resource)
        failure = "failed to get allocation history data"
        document = _fetch(self.client, ALLOCATION_HISTORY_PATH, resource, failure)
        try:
            envelope, data = _split_envelope(document)
            raw_results = _object(data.get("results"), "results")
            results = {}
            for registry, entries in raw_results.items():
                if entries is None:
                    entries = []
                if not isinstance(entries, list):
                    raise RipeStatError(
                        f"failed to decode response: results for {registry!r} must be a list"
                    )
                results[registry] = [_result_from_dict(e) for e in entries]
            return AllocationHistory(
                results=results,
                resource=_text(data, "resource"),
                query_start_time=_text(data, "query_starttime"),
                query_end_time=_text(data, "query_endtime"),
                envelope=envelope,
            )
        except RipeStatError as exc:
            raise ServerError(f"{failure}: {exc}") from exc


def get_allocation_history(resource: str) -> AllocationHistory:
    """Look up the allocation history with a default client."""
    return AllocationHistoryClient().get(resource)