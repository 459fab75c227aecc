"""
Network address extraction from managed resources.

Each supported resource kind stores its addresses in a different place.
Kinds without a dedicated extractor fall back to scanning common
status.atProvider fields.
"""

from __future__ import annotations

from typing import Callable

import structlog

from crosstag.resources.document import Document
from crosstag.resources.models import ManagedResource

logger = structlog.get_logger()

CONNECTION_STRING_DELIMITERS = (":", "/", "@", ",")

COMPUTE_GROUP = "compute.gcp.upbound.io"
SQL_GROUP = "sql.gcp.upbound.io"
REDIS_GROUP = "redis.gcp.upbound.io"
SPANNER_GROUP = "spanner.gcp.upbound.io"


def looks_like_ip(value: str) -> bool:
    """
    Check whether a string is an IPv4 dotted quad.

    Only the shape is checked: four numeric octets of 1-3 digits. Octet
    ranges are not validated.
    """
    parts = value.split(".")
    if len(parts) != 4:
        return False
    return all(0 < len(part) <= 3 and part.isascii() and part.isdigit() for part in parts)


def extract_ips_from_connection_string(value: str) -> list[str]:
    """Find IPs in a connection string by splitting on common delimiters."""
    ips: list[str] = []
    for delimiter in CONNECTION_STRING_DELIMITERS:
        for part in value.split(delimiter):
            part = part.strip()
            if looks_like_ip(part):
                ips.append(part)
    return ips


def _non_empty(doc: Document, *fields: str) -> list[str]:
    values = []
    for name in fields:
        value = doc.get(name).as_str()
        if value:
            values.append(value)
    return values


def _compute_instance(resource: ManagedResource) -> list[str]:
    for_provider = resource.for_provider
    ips = _non_empty(for_provider, "ipAddress", "privateIpAddress", "publicIpAddress")

    for interface in for_provider.get("networkInterfaces").as_list():
        ips.extend(_non_empty(interface, "networkIP", "ipAddress"))
        # Access configs hold the external (NAT) addresses
        for access_config in interface.get("accessConfigs").as_list():
            ips.extend(_non_empty(access_config, "natIP"))

    return ips


def _sql_database_instance(resource: ManagedResource) -> list[str]:
    for_provider = resource.for_provider
    ips: list[str] = []

    private_network = for_provider.str_at("settings", "ipConfiguration", "privateNetwork")
    if private_network:
        # A VPC self-link; the network name is the last path segment
        logger.debug(
            "sql_instance_private_network",
            resource=resource.name,
            network=private_network.rsplit("/", 1)[-1],
        )

    # IP-looking strings one and two levels below forProvider
    for key, child in for_provider.items():
        value = child.as_str()
        if value is not None:
            if looks_like_ip(value):
                ips.append(value)
            continue
        for sub_key, sub_child in child.items():
            sub_value = sub_child.as_str()
            if sub_value is not None and looks_like_ip(sub_value):
                logger.debug(
                    "ip_in_nested_field",
                    resource=resource.name,
                    field=f"{key}.{sub_key}",
                    ip=sub_value,
                )
                ips.append(sub_value)

    for value in _non_empty(for_provider, "connectionName", "host", "endpoint", "uri", "connectionString"):
        ips.extend(extract_ips_from_connection_string(value))

    return ips


def _redis_instance(resource: ManagedResource) -> list[str]:
    for_provider = resource.for_provider
    ips = _non_empty(for_provider, "host")
    for auth_string in _non_empty(for_provider, "authString"):
        ips.extend(extract_ips_from_connection_string(auth_string))
    return ips


def _spanner_instance(resource: ManagedResource) -> list[str]:
    # Spanner instances are reached through Google APIs, never by address
    return []


def _status_fallback(resource: ManagedResource) -> list[str]:
    at_provider = resource.status.get("atProvider")
    ips = [
        value
        for value in _non_empty(at_provider, "ipAddress", "ip", "address", "host", "endpoint")
        if looks_like_ip(value)
    ]

    for entry in at_provider.get("addresses").as_list():
        if entry.is_map:
            ips.extend(v for v in _non_empty(entry, "ip", "ipAddress", "address") if looks_like_ip(v))
        elif entry.is_string and looks_like_ip(entry.as_str() or ""):
            ips.append(entry.as_str())  # type: ignore[arg-type]

    return ips


# (kind, API group) -> extractor
EXTRACTORS: dict[tuple[str, str], Callable[[ManagedResource], list[str]]] = {
    ("Instance", COMPUTE_GROUP): _compute_instance,
    ("DatabaseInstance", SQL_GROUP): _sql_database_instance,
    ("Instance", REDIS_GROUP): _redis_instance,
    ("Instance", SPANNER_GROUP): _spanner_instance,
}


def extract_addresses(resource: ManagedResource) -> list[str]:
    """
    Extract network addresses embedded in a resource.

    Returns:
        Addresses in first-seen order, without duplicates
    """
    extractor = EXTRACTORS.get((resource.kind, resource.group), _status_fallback)
    return list(dict.fromkeys(extractor(resource)))
