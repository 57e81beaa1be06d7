from __future__ import annotations

from dataclasses import dataclass, field, replace

import pytest

from ztmember.clients.base import ZeroTierNotFoundError
from ztmember.identifiers import member_external_id
from ztmember.models import Member, MemberResourceData


@dataclass(slots=True)
class StubMemberClient:
    """In-memory controller keyed by (network id, node id)."""

    client_name: str = "stub_client"
    stores_member_metadata: bool = True
    members: dict[tuple[str, str], Member] = field(default_factory=dict)
    known_networks: set[str] = field(default_factory=lambda: {"8056c2e21c000001"})
    error: Exception | None = None
    get_error: Exception | None = None
    calls: list[tuple[str, str, str]] = field(default_factory=list)

    def create_member(self, member: Member) -> Member:
        self._record("create", member.network_id, member.node_id)
        if member.network_id not in self.known_networks:
            raise ZeroTierNotFoundError(
                f"network not found zt_network_id={member.network_id}", status_code=404
            )
        stored = replace(member, id=member_external_id(member.network_id, member.node_id))
        self.members[(member.network_id, member.node_id)] = stored
        return stored

    def update_member(self, member: Member) -> Member:
        self._record("update", member.network_id, member.node_id)
        key = (member.network_id, member.node_id)
        if key not in self.members:
            raise ZeroTierNotFoundError("member not found", status_code=404)
        stored = replace(member, id=self.members[key].id)
        self.members[key] = stored
        return stored

    def get_member(self, network_id: str, node_id: str) -> Member | None:
        self._record("get", network_id, node_id)
        if self.get_error is not None:
            raise self.get_error
        return self.members.get((network_id, node_id))

    def delete_member(self, member: Member) -> None:
        self._record("delete", member.network_id, member.node_id)
        self.members.pop((member.network_id, member.node_id), None)

    def check_member_exists(self, network_id: str, node_id: str) -> bool:
        self._record("exists", network_id, node_id)
        return (network_id, node_id) in self.members

    def _record(self, action: str, network_id: str, node_id: str) -> None:
        self.calls.append((action, network_id, node_id))
        if self.error is not None:
            raise self.error


@pytest.fixture()
def stub_client() -> StubMemberClient:
    return StubMemberClient()


@pytest.fixture()
def declared_member() -> MemberResourceData:
    return MemberResourceData(
        network_id="8056c2e21c000001",
        node_id="efcc1b0947",
        name="edge-router",
        description="Edge router",
        hidden=False,
        offline_notify_delay=300,
        authorized=True,
        allow_ethernet_bridging=True,
        no_auto_assign_ips=True,
        ip_assignments={"10.147.17.5", "fd00:8056::5"},
        capabilities={1, 7},
        tags={"1000": 3, "2000": 10},
    )
