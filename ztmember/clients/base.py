"""Member client interface for ZeroTier controllers."""

from __future__ import annotations

from typing import Protocol

from ztmember.models import Member


class ZeroTierMemberClient(Protocol):
    client_name: str
    # False when the controller keeps only the network config, not name/description.
    stores_member_metadata: bool

    def create_member(self, member: Member) -> Member:
        """Create the member and return it as stored by the controller."""

    def update_member(self, member: Member) -> Member:
        """Replace the member's mutable fields and return the stored member."""

    def get_member(self, network_id: str, node_id: str) -> Member | None:
        """Return the member, or None when the controller does not know it."""

    def delete_member(self, member: Member) -> None:
        """Remove the member from its network."""

    def check_member_exists(self, network_id: str, node_id: str) -> bool:
        """Return True when the controller knows the member."""


class ZeroTierClientError(Exception):
    """Base client exception for deterministic failure handling."""

    error_code = "zerotier_client_error"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ZeroTierAuthError(ZeroTierClientError):
    error_code = "zerotier_auth_error"


class ZeroTierNotFoundError(ZeroTierClientError):
    error_code = "zerotier_not_found"


class ZeroTierRequestError(ZeroTierClientError):
    error_code = "zerotier_request_error"
