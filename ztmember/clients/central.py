"""ZeroTier Central member client."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from ztmember.clients.base import (
    ZeroTierAuthError,
    ZeroTierNotFoundError,
    ZeroTierRequestError,
)
from ztmember.config import DEFAULT_MEMBER_DESCRIPTION
from ztmember.identifiers import member_external_id
from ztmember.models import Member, MemberConfig, TagTuple

HTTPClientFactory = Callable[..., httpx.Client]

logger = logging.getLogger(__name__)


class ZeroTierCentralClient:
    client_name = "central"
    display_name = "central"
    stores_member_metadata = True

    def __init__(
        self,
        *,
        base_url: str,
        api_token: str,
        timeout_seconds: float = 10.0,
        http_client_factory: HTTPClientFactory = httpx.Client,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth_token = api_token
        self._timeout_seconds = timeout_seconds
        self._http_client_factory = http_client_factory

    def create_member(self, member: Member) -> Member:
        return self._post_member(member, action="create")

    def update_member(self, member: Member) -> Member:
        return self._post_member(member, action="update")

    def get_member(self, network_id: str, node_id: str) -> Member | None:
        response = self._request("GET", _member_path(network_id, node_id))
        if response.status_code == 404:
            return None
        self._raise_for_status(
            response,
            default_message=(
                f"failed to read {self.display_name} member "
                f"zt_network_id={network_id} node_id={node_id}"
            ),
        )
        return self._decode_member(
            _parse_json_object(response),
            network_id=network_id,
            node_id=node_id,
            requested=None,
        )

    def delete_member(self, member: Member) -> None:
        response = self._request(
            "DELETE", _member_path(member.network_id, member.node_id)
        )
        if response.status_code == 404:
            logger.debug(
                "%s member already absent zt_network_id=%s node_id=%s",
                self.display_name,
                member.network_id,
                member.node_id,
            )
            return
        self._raise_for_status(
            response,
            default_message=(
                f"failed to delete {self.display_name} member "
                f"zt_network_id={member.network_id} node_id={member.node_id}"
            ),
        )

    def check_member_exists(self, network_id: str, node_id: str) -> bool:
        response = self._request("GET", _member_path(network_id, node_id))
        if response.status_code == 404:
            return False
        self._raise_for_status(
            response,
            default_message=(
                f"failed to check {self.display_name} member "
                f"zt_network_id={network_id} node_id={node_id}"
            ),
        )
        return True

    def _post_member(self, member: Member, *, action: str) -> Member:
        response = self._request(
            "POST",
            _member_path(member.network_id, member.node_id),
            json_body=self._encode_member(member),
        )
        if response.status_code == 404:
            raise ZeroTierNotFoundError(
                (
                    f"{self.display_name} network not found for "
                    f"zt_network_id={member.network_id} node_id={member.node_id}"
                ),
                status_code=response.status_code,
            )
        self._raise_for_status(
            response,
            default_message=(
                f"failed to {action} {self.display_name} member "
                f"zt_network_id={member.network_id} node_id={member.node_id}"
            ),
        )
        return self._decode_member(
            _parse_json_object(response),
            network_id=member.network_id,
            node_id=member.node_id,
            requested=member,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"token {self._auth_token}"}

    def _encode_member(self, member: Member) -> dict[str, Any]:
        return {
            "name": member.name,
            "description": member.description,
            "hidden": member.hidden,
            "offlineNotifyDelay": member.offline_notify_delay,
            "config": _config_to_payload(member.config),
        }

    def _decode_member(
        self,
        payload: dict[str, Any],
        *,
        network_id: str,
        node_id: str,
        requested: Member | None,
    ) -> Member:
        config = payload.get("config")
        return Member(
            id=_extract_str(
                payload, "id", default=member_external_id(network_id, node_id)
            ),
            network_id=network_id,
            node_id=node_id,
            name=_extract_str(payload, "name", default=""),
            description=_extract_str(
                payload, "description", default=DEFAULT_MEMBER_DESCRIPTION
            ),
            hidden=_extract_bool(payload, "hidden", default=False),
            offline_notify_delay=_extract_int(payload, "offlineNotifyDelay", default=0),
            config=_config_from_payload(config if isinstance(config, dict) else {}),
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        logger.debug("%s request %s %s", self.display_name, method, path)
        with self._http_client_factory(
            base_url=self._base_url,
            headers=self._auth_headers(),
            timeout=self._timeout_seconds,
        ) as client:
            try:
                return client.request(method, path, json=json_body)
            except httpx.HTTPError as exc:
                raise ZeroTierRequestError(
                    f"{self.display_name} request failed: {exc}"
                ) from exc

    def _raise_for_status(self, response: httpx.Response, *, default_message: str) -> None:
        if response.status_code < 400:
            return

        status_code = response.status_code
        if status_code in {401, 403}:
            raise ZeroTierAuthError(
                f"{self.display_name} authentication failed with status={status_code}",
                status_code=status_code,
            )

        response_text = response.text.strip()
        detail = f"{default_message}; status={status_code}"
        if response_text:
            detail = f"{detail}; body={response_text[:240]}"
        raise ZeroTierRequestError(detail, status_code=status_code)


def _member_path(network_id: str, node_id: str) -> str:
    return f"/network/{network_id}/member/{node_id}"


def _config_to_payload(config: MemberConfig) -> dict[str, Any]:
    return {
        "authorized": config.authorized,
        "activeBridge": config.active_bridge,
        "noAutoAssignIps": config.no_auto_assign_ips,
        "capabilities": sorted(config.capabilities),
        "tags": [[tag_id, value] for tag_id, value in config.tags],
        "ipAssignments": sorted(config.ip_assignments),
    }


def _config_from_payload(payload: dict[str, Any]) -> MemberConfig:
    return MemberConfig(
        authorized=_extract_bool(payload, "authorized", default=True),
        active_bridge=_extract_bool(payload, "activeBridge", default=False),
        no_auto_assign_ips=_extract_bool(payload, "noAutoAssignIps", default=False),
        capabilities=frozenset(_extract_capabilities(payload.get("capabilities"))),
        tags=_extract_tags(payload.get("tags")),
        ip_assignments=frozenset(_extract_ip_assignments(payload.get("ipAssignments"))),
    )


def _parse_json_object(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise ZeroTierRequestError(
            f"controller response was not valid JSON (status={response.status_code})",
            status_code=response.status_code,
        ) from exc

    if not isinstance(data, dict):
        raise ZeroTierRequestError(
            f"controller response payload must be an object (status={response.status_code})",
            status_code=response.status_code,
        )
    return data


def _extract_str(payload: dict[str, Any], key: str, *, default: str) -> str:
    value = payload.get(key)
    if isinstance(value, str):
        return value
    return default


def _extract_bool(payload: dict[str, Any], key: str, *, default: bool) -> bool:
    value = payload.get(key)
    if isinstance(value, bool):
        return value
    return default


def _extract_int(payload: dict[str, Any], key: str, *, default: int) -> int:
    value = payload.get(key)
    if _is_int(value):
        return value
    return default


def _extract_capabilities(candidates: Any) -> list[int]:
    if not isinstance(candidates, list):
        return []
    return [item for item in candidates if _is_int(item)]


def _extract_tags(candidates: Any) -> tuple[TagTuple, ...]:
    if not isinstance(candidates, list):
        return ()

    tags: list[TagTuple] = []
    for item in candidates:
        if not isinstance(item, list | tuple) or len(item) != 2:
            continue
        tag_id, value = item
        if _is_int(tag_id) and _is_int(value):
            tags.append((tag_id, value))
    return tuple(tags)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _extract_ip_assignments(candidates: Any) -> list[str]:
    if not isinstance(candidates, list):
        return []

    normalized: list[str] = []
    for item in candidates:
        if not isinstance(item, str):
            continue
        value = item.strip()
        if value:
            normalized.append(value)
    return normalized
