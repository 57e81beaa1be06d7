"""ZeroTier controller member clients."""

from ztmember.clients.base import (
    ZeroTierAuthError,
    ZeroTierClientError,
    ZeroTierMemberClient,
    ZeroTierNotFoundError,
    ZeroTierRequestError,
)
from ztmember.clients.factory import create_member_client

__all__ = [
    "ZeroTierAuthError",
    "ZeroTierClientError",
    "ZeroTierMemberClient",
    "ZeroTierNotFoundError",
    "ZeroTierRequestError",
    "create_member_client",
]
