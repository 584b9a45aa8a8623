"""
Client IP helpers for click recording.
"""

import ipaddress
from typing import Optional

IPV4_MAPPED_PREFIX = "::ffff:"
# Longest textual IPv6 form (IPv4-mapped, full width)
MAX_IP_LENGTH = 45


def normalize_ip(raw_ip: Optional[str]) -> Optional[str]:
    """
    Canonical form of an address, or None when it is not one.

    Trims whitespace and strips the IPv6-mapped-IPv4 prefix. Hostnames,
    ports and oversized header values are rejected, so only parseable
    addresses ever reach the store.
    """
    if raw_ip is None:
        return None
    ip = raw_ip.strip()
    if not ip or len(ip) > MAX_IP_LENGTH:
        return None
    if ip.lower().startswith(IPV4_MAPPED_PREFIX):
        ip = ip[len(IPV4_MAPPED_PREFIX):]
    try:
        return str(ipaddress.ip_address(ip))
    except ValueError:
        return None


def extract_client_ip(forwarded_for: Optional[str], client_host: Optional[str]) -> Optional[str]:
    """
    Pick the client address for a request.

    The first entry of X-Forwarded-For wins (the original client when
    running behind a proxy). When it is blank or not an address, the
    connection address is used instead.
    """
    if forwarded_for:
        first = forwarded_for.split(",", 1)[0]
        ip = normalize_ip(first)
        if ip:
            return ip
    return normalize_ip(client_host)


def is_private_ip(ip: Optional[str]) -> bool:
    """
    True for addresses that geo lookup cannot resolve: loopback, RFC1918,
    unique-local and link-local IPv6, unspecified, and anything unparsable.
    """
    if not ip or ip.lower() == "localhost":
        return True
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return True
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
        or address.is_reserved
        or address.is_multicast
    )
