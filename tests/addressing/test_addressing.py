from __future__ import annotations

import pytest

from ztmember.addressing import (
    AddressDerivationError,
    format_ipv6_groups,
    group_assigned_ips,
    rfc4193_address,
    six_plane_address,
)

NETWORK_ID = "8056c2e21c000001"
NODE_ID = "efcc1b0947"


@pytest.mark.parametrize(
    ("hex_digits", "expected"),
    [
        ("", ""),
        ("a", "a"),
        ("abcd", "abcd"),
        ("abcde", "abcd:e"),
        ("0123456789abcdef", "0123:4567:89ab:cdef"),
        ("0123456789abcdef01", "0123:4567:89ab:cdef:01"),
    ],
)
def test_format_ipv6_groups(hex_digits: str, expected: str) -> None:
    assert format_ipv6_groups(hex_digits) == expected


@pytest.mark.parametrize("length", range(0, 35))
def test_format_ipv6_groups_places_colons_after_every_fourth_digit(length: int) -> None:
    digits = ("0123456789abcdef" * 3)[:length]

    formatted = format_ipv6_groups(digits)

    assert formatted.replace(":", "") == digits
    assert not formatted.endswith(":")
    groups = formatted.split(":") if formatted else []
    assert all(len(group) == 4 for group in groups[:-1])
    assert len(groups) == (length + 3) // 4


def test_six_plane_address_for_known_member() -> None:
    assert six_plane_address(NETWORK_ID, NODE_ID) == "fd80:56c2:e21c:0000:0199:93ef:cc1b:0947"


def test_six_plane_address_with_twelve_digit_node() -> None:
    assert (
        six_plane_address(NETWORK_ID, "0123456789ab")
        == "fd80:56c2:e21c:0000:0199:9301:2345:6789:ab"
    )


def test_rfc4193_address_for_known_member() -> None:
    # 0x8056c2e2 ^ 0x1c000001 == 0x9c56c2e3
    assert rfc4193_address(NETWORK_ID, NODE_ID) == "fc9c:56c2:e3ef:cc1b:0947:0000:0000:0001"


def test_rfc4193_address_keeps_unpadded_network_mask() -> None:
    # High and low halves cancel out except for the last bit.
    network_id = "1c0000011c000000"

    assert rfc4193_address(network_id, NODE_ID) == "fc1e:fcc1:b094:7000:0000:0000:1"


def test_derived_addresses_are_deterministic() -> None:
    assert rfc4193_address(NETWORK_ID, NODE_ID) == rfc4193_address(NETWORK_ID, NODE_ID)
    assert six_plane_address(NETWORK_ID, NODE_ID) == six_plane_address(NETWORK_ID, NODE_ID)


@pytest.mark.parametrize(
    ("network_id", "node_id"),
    [
        ("8056c2e21c000002", NODE_ID),
        (NETWORK_ID, "efcc1b0948"),
        ("9056c2e21c000001", NODE_ID),
    ],
)
def test_derived_addresses_change_with_identifiers(network_id: str, node_id: str) -> None:
    assert rfc4193_address(network_id, node_id) != rfc4193_address(NETWORK_ID, NODE_ID)
    assert six_plane_address(network_id, node_id) != six_plane_address(NETWORK_ID, NODE_ID)


@pytest.mark.parametrize("network_id", ["", "not-hex", "0x8056c2e2", "18056c2e21c000001"])
def test_rfc4193_address_rejects_invalid_network_id(network_id: str) -> None:
    with pytest.raises(AddressDerivationError):
        rfc4193_address(network_id, NODE_ID)


def test_group_assigned_ips_partitions_by_family() -> None:
    assignments = ["10.147.17.5", "fd00::5", "192.168.1.2", "2001:db8::1/128"]

    ipv4s, ipv6s = group_assigned_ips(assignments)

    assert ipv4s == ["10.147.17.5", "192.168.1.2"]
    assert ipv6s == ["fd00::5", "2001:db8::1/128"]
    assert set(ipv4s) | set(ipv6s) == set(assignments)
    assert len(ipv4s) + len(ipv6s) == len(assignments)


def test_group_assigned_ips_handles_empty_pool() -> None:
    assert group_assigned_ips([]) == ([], [])
