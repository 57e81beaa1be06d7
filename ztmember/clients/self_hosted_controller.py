"""Self-hosted ZeroTier controller member client."""

from __future__ import annotations

from typing import Any

import httpx

from ztmember.clients.central import (
    HTTPClientFactory,
    ZeroTierCentralClient,
    _config_from_payload,
    _config_to_payload,
)
from ztmember.config import DEFAULT_MEMBER_DESCRIPTION
from ztmember.identifiers import member_external_id
from ztmember.models import Member


class ZeroTierSelfHostedControllerClient(ZeroTierCentralClient):
    """Client for the local controller API served under ``/controller``.

    The controller only stores the member's network configuration. Name,
    description, hidden and the offline notification delay are Central
    concepts, so they are echoed back from the request on writes and fall
    back to defaults on reads.
    """

    client_name = "self_hosted_controller"
    display_name = "self-hosted controller"
    stores_member_metadata = False

    def __init__(
        self,
        *,
        base_url: str,
        auth_token: str,
        timeout_seconds: float = 10.0,
        http_client_factory: HTTPClientFactory = httpx.Client,
    ) -> None:
        super().__init__(
            base_url=base_url,
            api_token=auth_token,
            timeout_seconds=timeout_seconds,
            http_client_factory=http_client_factory,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"X-ZT1-Auth": self._auth_token}

    def _encode_member(self, member: Member) -> dict[str, Any]:
        return _config_to_payload(member.config)

    def _decode_member(
        self,
        payload: dict[str, Any],
        *,
        network_id: str,
        node_id: str,
        requested: Member | None,
    ) -> Member:
        config = _config_from_payload(payload)
        member_id = member_external_id(network_id, node_id)
        if requested is None:
            return Member(
                id=member_id,
                network_id=network_id,
                node_id=node_id,
                description=DEFAULT_MEMBER_DESCRIPTION,
                config=config,
            )
        return Member(
            id=member_id,
            network_id=network_id,
            node_id=node_id,
            name=requested.name,
            description=requested.description,
            hidden=requested.hidden,
            offline_notify_delay=requested.offline_notify_delay,
            config=config,
        )
