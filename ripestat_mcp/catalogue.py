"""The catalogue of tools the server offers, with their input schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Tool:
    """A tool that a client can call."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


def _string_property(description: str) -> dict[str, str]:
    return {"type": "string", "description": description}


def _schema(
    properties: dict[str, dict[str, str]],
    required: list[str] | None = None,
    *,
    additional_properties: bool | None = None,
) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required is not None:
        schema["required"] = required
    if additional_properties is not None:
        schema["additionalProperties"] = additional_properties
    return schema


def _resource_tool(name: str, description: str, resource_description: str) -> Tool:
    return Tool(
        name,
        description,
        _schema({"resource": _string_property(resource_description)}, ["resource"]),
    )


def create_tools_list() -> list[Tool]:
    """Return every tool the server can offer, in catalogue order."""
    return [
        Tool(
            "getNetworkInfo",
            "Get network information for an IP address or prefix.",
            _schema(
                {"resource": _string_property("The IP address or prefix to query.")},
                ["resource"],
                additional_properties=False,
            ),
        ),
        _resource_tool(
            "getASOverview",
            "Get an overview of an Autonomous System (AS).",
            "The AS number to query.",
        ),
        _resource_tool(
            "getAnnouncedPrefixes",
            "Get a list of prefixes announced by an Autonomous System (AS).",
            "The AS number to query.",
        ),
        _resource_tool(
            "getRelatedPrefixes",
            "Get related prefixes that are connected or associated with the given prefix.",
            "The IP prefix in CIDR notation to query.",
        ),
        _resource_tool(
            "getRoutingStatus",
            "Get the routing status for an IP prefix.",
            "The IP prefix to query.",
        ),
        Tool(
            "getRoutingHistory",
            "Get routing history information for an IP address, prefix, or ASN.",
            _schema(
                {
                    "resource": _string_property(
                        "The IP address, prefix, or ASN to query for routing history."
                    ),
                    "start_time": _string_property(
                        "Start time for the query in ISO8601 format (e.g., '2024-01-01T00:00:00Z'). "
                        "If omitted, uses default historical range."
                    ),
                    "end_time": _string_property(
                        "End time for the query in ISO8601 format (e.g., '2024-12-31T23:59:59Z'). "
                        "If omitted, uses current time."
                    ),
                    "max_results": _string_property(
                        "Maximum number of routing events to return. "
                        "Helps limit response size for large datasets."
                    ),
                },
                ["resource"],
            ),
        ),
        _resource_tool(
            "getWhois",
            "Get whois information for an IP address, prefix, or ASN.",
            "The IP address, prefix, or ASN to query.",
        ),
        _resource_tool(
            "getAbuseContactFinder",
            "Get abuse contact information for an IP address or prefix.",
            "The IP address or prefix to query for abuse contacts.",
        ),
        Tool(
            "getRPKIValidation",
            "Get RPKI validation status for a resource (ASN) and prefix combination.",
            _schema(
                {
                    "resource": _string_property("The ASN to validate against the prefix."),
                    "prefix": _string_property("The IP prefix to validate."),
                },
                ["resource", "prefix"],
            ),
        ),
        Tool(
            "getASNNeighbours",
            "Get ASN neighbours for an Autonomous System. Left neighbours are downstream "
            "providers, right neighbours are upstream providers.",
            _schema(
                {
                    "resource": _string_property("The AS number to query for neighbours."),
                    "lod": _string_property(
                        "Level of detail: 0 (basic) or 1 (detailed with power, v4_peers, "
                        "v6_peers). Default is 0."
                    ),
                    "query_time": _string_property(
                        "Query time in ISO8601 format for historical data. "
                        "If omitted, uses latest snapshot."
                    ),
                },
                ["resource"],
            ),
        ),
        Tool(
            "getLookingGlass",
            "Get looking glass information for an IP prefix, showing BGP routing data from "
            "RIPE NCC's Route Reflection Collectors (RRCs).",
            _schema(
                {
                    "resource": _string_property(
                        "The IP prefix to query for looking glass information."
                    ),
                    "look_back_limit": _string_property(
                        "Time limit in seconds to look back for BGP data. Maximum is 172800 "
                        "seconds (48 hours). Default is 0."
                    ),
                },
                ["resource"],
            ),
        ),
        Tool(
            "getCountryASNs",
            "Get Autonomous System Numbers (ASNs) for a given country code.",
            _schema(
                {
                    "resource": _string_property(
                        "Two-letter ISO country code (e.g., 'nl', 'us', 'de')."
                    ),
                    "lod": _string_property(
                        "Level of detail: 0 (basic stats) or 1 (includes lists of "
                        "routed/non-routed ASNs). Default is 0."
                    ),
                },
                ["resource"],
            ),
        ),
        _resource_tool(
            "getRPKIHistory",
            "Get RPKI history information for an IP prefix, showing the historical RPKI "
            "validation status.",
            "The IP prefix to query for RPKI history.",
        ),
        _resource_tool(
            "getBGPlay",
            "Get BGP play data for an IP address or prefix, showing BGP routing events "
            "and timeline.",
            "The IP address or prefix to query for BGP play data.",
        ),
        _resource_tool(
            "getPrefixRoutingConsistency",
            "Get prefix routing consistency information for an IP prefix, showing BGP "
            "routing consistency data.",
            "The IP prefix to query for routing consistency.",
        ),
        _resource_tool(
            "getPrefixOverview",
            "Get prefix overview information for an IP prefix.",
            "The IP prefix to query.",
        ),
        _resource_tool(
            "getAddressSpaceHierarchy",
            "Get address space hierarchy information for an IP address or prefix.",
            "The IP address or prefix to query.",
        ),
        _resource_tool(
            "getAllocationHistory",
            "Get allocation history information for an IP address or prefix.",
            "The IP address or prefix to query for allocation history.",
        ),
        _resource_tool(
            "getASPathLength",
            "Get AS path length statistics and distribution data for an Autonomous System (AS).",
            "The AS number to query (e.g., AS3333).",
        ),
        _resource_tool(
            "getASRoutingConsistency",
            "Get AS routing consistency information for an Autonomous System (AS).",
            "The AS number to query (e.g., AS3333).",
        ),
        _resource_tool(
            "getBGPUpdates",
            "Get BGP update activity and routing changes for an IP address or prefix.",
            "The IP address or prefix to query for BGP updates.",
        ),
        Tool(
            "getWhatsMyIP",
            "Get the caller's public IP address. Respects X-Forwarded-For headers when "
            "behind a proxy.",
            _schema({}),
        ),
    ]