"""Network/node identifier resolution for ZeroTier members."""

from __future__ import annotations

EXTERNAL_ID_SEPARATOR = "-"


class InvalidImportIdentifierError(ValueError):
    """Raised when a member id is not of the form <network-id>-<node-id>."""

    error_code = "invalid_import_identifier"

    def __init__(self, external_id: str) -> None:
        super().__init__(
            "member id must be formatted as <network-id>-<node-id>, "
            f"received {external_id!r}"
        )
        self.external_id = external_id


def resolve_member_identifiers(
    network_id: str,
    node_id: str,
    external_id: str,
) -> tuple[str, str]:
    """Return the (network id, node id) pair for a member.

    Declared identifiers win. When either is missing, as happens on import,
    both are recovered from the composite member id.
    """
    if network_id and node_id:
        return network_id, node_id
    return split_external_id(external_id)


def split_external_id(external_id: str) -> tuple[str, str]:
    parts = external_id.split(EXTERNAL_ID_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise InvalidImportIdentifierError(external_id)
    return parts[0], parts[1]


def member_external_id(network_id: str, node_id: str) -> str:
    return f"{network_id}{EXTERNAL_ID_SEPARATOR}{node_id}"
