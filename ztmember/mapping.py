"""Translation between declared member configuration and controller members."""

from __future__ import annotations

import re
from collections.abc import Mapping

from ztmember.addressing import group_assigned_ips, rfc4193_address, six_plane_address
from ztmember.models import Member, MemberConfig, MemberResourceData, TagTuple

_TAG_KEY_PATTERN = re.compile(r"[+-]?[0-9]+")


class InvalidTagKeyError(ValueError):
    """Raised when a declared tag key is not the decimal form of a tag id."""

    error_code = "invalid_tag_key"

    def __init__(self, key: str) -> None:
        super().__init__(f"tag keys must be integer tag ids, received {key!r}")
        self.key = key


def member_from_resource_data(record: MemberResourceData) -> Member:
    return Member(
        id=record.id,
        network_id=record.network_id,
        node_id=record.node_id,
        name=record.name,
        description=record.description,
        hidden=record.hidden,
        offline_notify_delay=record.offline_notify_delay,
        config=MemberConfig(
            authorized=record.authorized,
            active_bridge=record.allow_ethernet_bridging,
            no_auto_assign_ips=record.no_auto_assign_ips,
            capabilities=frozenset(record.capabilities),
            tags=tag_tuples_from_mapping(record.tags),
            ip_assignments=frozenset(record.ip_assignments),
        ),
    )


def apply_member_to_resource_data(
    record: MemberResourceData,
    member: Member,
    *,
    network_id: str,
    node_id: str,
    include_metadata: bool = True,
) -> None:
    """Write a controller member, and the addresses derived from it, onto ``record``.

    With ``include_metadata=False`` the record keeps its own name, description,
    hidden flag and offline notification delay, for controllers that do not
    store them.
    """
    rfc4193 = rfc4193_address(network_id, node_id)
    six_plane = six_plane_address(network_id, node_id)
    ipv4s, ipv6s = group_assigned_ips(member.config.ip_assignments)

    record.id = member.id
    record.network_id = network_id
    record.node_id = node_id
    if include_metadata:
        record.name = member.name
        record.description = member.description
        record.hidden = member.hidden
        record.offline_notify_delay = member.offline_notify_delay
    record.authorized = member.config.authorized
    record.allow_ethernet_bridging = member.config.active_bridge
    record.no_auto_assign_ips = member.config.no_auto_assign_ips
    record.ip_assignments = set(member.config.ip_assignments)
    record.ipv4_assignments = set(ipv4s)
    record.ipv6_assignments = set(ipv6s)
    record.rfc4193_address = rfc4193
    record.zt6plane_address = six_plane
    record.capabilities = set(member.config.capabilities)
    apply_member_tags(record, member)


def apply_member_tags(record: MemberResourceData, member: Member) -> None:
    record.tags = tag_mapping_from_tuples(member.config.tags)


def tag_tuples_from_mapping(tags: Mapping[str, int]) -> tuple[TagTuple, ...]:
    tuples: list[TagTuple] = []
    for key, value in tags.items():
        if not isinstance(key, str) or _TAG_KEY_PATTERN.fullmatch(key) is None:
            raise InvalidTagKeyError(key)
        tuples.append((int(key), int(value)))
    return tuple(tuples)


def tag_mapping_from_tuples(tags: tuple[TagTuple, ...]) -> dict[str, int]:
    # Later pairs win when the controller repeats a tag id.
    return {str(tag_id): value for tag_id, value in tags}
