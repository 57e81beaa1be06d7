"""Computed IPv6 addresses for ZeroTier network members.

ZeroTier can give every member two addresses that are derived purely from the
network id and the node id: an RFC4193 (ULA) /128 and a 6PLANE /60. They are
always computable, but only live on the member when the network enables the
matching addressing mode.
"""

from __future__ import annotations

from collections.abc import Iterable

_IPV6_GROUP_WIDTH = 4
_SIX_PLANE_PREFIX = "fd"
_SIX_PLANE_MARKER = "9993"
_RFC4193_PREFIX = "fc"
_RFC4193_SUFFIX = "000000000001"
_UINT64_MAX = 0xFFFFFFFFFFFFFFFF
HEX_CHARS = frozenset("0123456789abcdefABCDEF")


class AddressDerivationError(ValueError):
    """Raised when a network id cannot be read as a 64-bit hex integer."""

    error_code = "address_derivation_error"


def format_ipv6_groups(hex_digits: str) -> str:
    """Insert a colon after every fourth digit, never after the last one."""
    return ":".join(
        hex_digits[start : start + _IPV6_GROUP_WIDTH]
        for start in range(0, len(hex_digits), _IPV6_GROUP_WIDTH)
    )


def six_plane_address(network_id: str, node_id: str) -> str:
    return format_ipv6_groups(
        f"{_SIX_PLANE_PREFIX}{network_id}{_SIX_PLANE_MARKER}{node_id}"
    )


def rfc4193_address(network_id: str, node_id: str) -> str:
    network_mask = _network_mask(network_id)
    # The mask is not zero-padded, matching what the controller tooling emits.
    return format_ipv6_groups(
        f"{_RFC4193_PREFIX}{network_mask:x}{node_id}{_RFC4193_SUFFIX}"
    )


def group_assigned_ips(ip_assignments: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split pool assignments into (ipv4s, ipv6s).

    Does not include the RFC4193 or 6PLANE addresses, only the addresses from
    the assignment pool or manually provided ones.
    """
    ipv4s: list[str] = []
    ipv6s: list[str] = []
    for address in ip_assignments:
        if ":" in address:
            ipv6s.append(address)
        else:
            ipv4s.append(address)
    return ipv4s, ipv6s


def _network_mask(network_id: str) -> int:
    normalized = network_id.strip()
    if not normalized or not HEX_CHARS.issuperset(normalized):
        raise AddressDerivationError(f"network id is not a hex integer: {network_id!r}")

    value = int(normalized, 16)
    if value > _UINT64_MAX:
        raise AddressDerivationError(
            f"network id does not fit in 64 bits: {network_id!r}"
        )
    return (value >> 32) ^ (value & 0xFFFFFFFF)
