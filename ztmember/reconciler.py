"""Lifecycle reconciliation of declared ZeroTier members against a controller."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ztmember.clients.base import ZeroTierClientError, ZeroTierMemberClient
from ztmember.config import DEFAULT_MEMBER_DESCRIPTION
from ztmember.identifiers import (
    InvalidImportIdentifierError,
    resolve_member_identifiers,
    split_external_id,
)
from ztmember.mapping import (
    apply_member_tags,
    apply_member_to_resource_data,
    member_from_resource_data,
)
from ztmember.models import IMMUTABLE_MEMBER_FIELDS, MemberResourceData

logger = logging.getLogger(__name__)


class MemberReconcileError(Exception):
    """Base exception for reconciliation failures with added context."""

    error_code = "member_reconcile_error"


class MemberReadError(MemberReconcileError):
    error_code = "member_read_error"


class MemberUpdateError(MemberReconcileError):
    error_code = "member_update_error"


class MemberReplacementRequiredError(MemberReconcileError):
    """Raised when an update would change a member's network or node id."""

    error_code = "member_replacement_required"

    def __init__(self, field_name: str, current: str, desired: str) -> None:
        super().__init__(
            f"{field_name} cannot change in place ({current!r} -> {desired!r}); "
            "delete and recreate the member instead"
        )
        self.field_name = field_name
        self.current = current
        self.desired = desired


class MemberReconciler:
    """Drives create/read/update/delete/exists for one member at a time.

    Every operation issues a single blocking call on the injected client and
    writes the outcome back onto the record it was given. Calls for the same
    (network id, node id) pair are serialized. A pair's lock is dropped from
    the registry once no call holds or waits on it.
    """

    def __init__(self, client: ZeroTierMemberClient) -> None:
        self._client = client
        self._locks: dict[tuple[str, str], _MemberLock] = {}
        self._locks_guard = threading.Lock()

    def create(self, record: MemberResourceData) -> None:
        stored = member_from_resource_data(record)
        with self._member_lock(stored.network_id, stored.node_id):
            created = self._client.create_member(stored)
        logger.info(
            "created member id=%s zt_network_id=%s node_id=%s",
            created.id,
            stored.network_id,
            stored.node_id,
        )
        record.id = created.id
        apply_member_tags(record, created)

    def read(self, record: MemberResourceData) -> None:
        network_id, node_id = resolve_member_identifiers(
            record.network_id, record.node_id, record.id
        )
        with self._member_lock(network_id, node_id):
            try:
                member = self._client.get_member(network_id, node_id)
            except ZeroTierClientError as exc:
                raise MemberReadError(f"unable to read member from API: {exc}") from exc

        if member is None:
            logger.info(
                "member absent zt_network_id=%s node_id=%s", network_id, node_id
            )
            record.id = ""
            return
        apply_member_to_resource_data(
            record,
            member,
            network_id=network_id,
            node_id=node_id,
            include_metadata=self._client.stores_member_metadata,
        )

    def update(
        self,
        record: MemberResourceData,
        *,
        prior: MemberResourceData | None = None,
    ) -> None:
        ensure_identifiers_unchanged(record, prior=prior)
        stored = member_from_resource_data(record)
        with self._member_lock(stored.network_id, stored.node_id):
            try:
                updated = self._client.update_member(stored)
            except ZeroTierClientError as exc:
                raise MemberUpdateError(
                    f"unable to update member using ZeroTier API: {exc}"
                ) from exc
        logger.info(
            "updated member id=%s zt_network_id=%s node_id=%s",
            record.id,
            stored.network_id,
            stored.node_id,
        )
        apply_member_tags(record, updated)

    def delete(self, record: MemberResourceData) -> None:
        member = member_from_resource_data(record)
        with self._member_lock(member.network_id, member.node_id):
            self._client.delete_member(member)
        logger.info(
            "deleted member zt_network_id=%s node_id=%s",
            member.network_id,
            member.node_id,
        )
        record.id = ""

    def exists(self, record: MemberResourceData) -> bool:
        network_id, node_id = resolve_member_identifiers(
            record.network_id, record.node_id, record.id
        )
        with self._member_lock(network_id, node_id):
            exists = self._client.check_member_exists(network_id, node_id)
        if not exists:
            record.id = ""
        return exists

    def import_member(
        self,
        external_id: str,
        *,
        description: str = DEFAULT_MEMBER_DESCRIPTION,
    ) -> MemberResourceData:
        """Adopt an existing controller member by its ``<network-id>-<node-id>`` id.

        ``description`` is kept when the controller does not store one.
        """
        split_external_id(external_id)
        record = MemberResourceData(id=external_id, description=description)
        self.read(record)
        return record

    @contextmanager
    def _member_lock(self, network_id: str, node_id: str) -> Iterator[None]:
        key = (network_id, node_id)
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _MemberLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]


class _MemberLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        # Calls holding or waiting on ``lock``.
        self.holders = 0


def ensure_identifiers_unchanged(
    record: MemberResourceData,
    *,
    prior: MemberResourceData | None = None,
) -> None:
    """Reject declared network/node ids that differ from the existing member's."""
    current: dict[str, str] = {}
    if prior is not None:
        current = {name: getattr(prior, name) for name in IMMUTABLE_MEMBER_FIELDS}
    elif record.id:
        try:
            network_id, node_id = split_external_id(record.id)
        except InvalidImportIdentifierError:
            return
        current = {"network_id": network_id, "node_id": node_id}

    for field_name, current_value in current.items():
        desired_value = getattr(record, field_name)
        if current_value and desired_value != current_value:
            raise MemberReplacementRequiredError(field_name, current_value, desired_value)
