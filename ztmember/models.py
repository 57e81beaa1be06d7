"""Member records: the controller's shape and the declared configuration shape."""

from __future__ import annotations

from dataclasses import dataclass, field

from ztmember.config import DEFAULT_MEMBER_DESCRIPTION

TagTuple = tuple[int, int]


@dataclass(frozen=True, slots=True)
class MemberConfig:
    authorized: bool = True
    active_bridge: bool = False
    no_auto_assign_ips: bool = False
    capabilities: frozenset[int] = frozenset()
    tags: tuple[TagTuple, ...] = ()
    ip_assignments: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Member:
    """A node's membership of a network as held by the controller."""

    network_id: str
    node_id: str
    id: str = ""
    name: str = ""
    description: str = DEFAULT_MEMBER_DESCRIPTION
    hidden: bool = False
    offline_notify_delay: int = 0
    config: MemberConfig = field(default_factory=MemberConfig)


@dataclass(slots=True)
class MemberResourceData:
    """Declared configuration for one member plus the fields computed on read.

    ``id`` is the composite ``<network-id>-<node-id>`` external id; it is empty
    while the member is absent on the controller.
    """

    network_id: str = ""
    node_id: str = ""
    id: str = ""
    name: str = ""
    description: str = DEFAULT_MEMBER_DESCRIPTION
    hidden: bool = False
    offline_notify_delay: int = 0
    authorized: bool = True
    allow_ethernet_bridging: bool = False
    no_auto_assign_ips: bool = False
    ip_assignments: set[str] = field(default_factory=set)
    capabilities: set[int] = field(default_factory=set)
    tags: dict[str, int] = field(default_factory=dict)
    # Computed, never sent to the controller.
    ipv4_assignments: set[str] = field(default_factory=set)
    ipv6_assignments: set[str] = field(default_factory=set)
    rfc4193_address: str = ""
    zt6plane_address: str = ""


MUTABLE_MEMBER_FIELDS = (
    "name",
    "description",
    "hidden",
    "offline_notify_delay",
    "authorized",
    "allow_ethernet_bridging",
    "no_auto_assign_ips",
    "capabilities",
    "tags",
    "ip_assignments",
)
IMMUTABLE_MEMBER_FIELDS = ("network_id", "node_id")
COMPUTED_MEMBER_FIELDS = (
    "ipv4_assignments",
    "ipv6_assignments",
    "rfc4193_address",
    "zt6plane_address",
)
