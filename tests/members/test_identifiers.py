from __future__ import annotations

import pytest

from ztmember.identifiers import (
    InvalidImportIdentifierError,
    member_external_id,
    resolve_member_identifiers,
)


def test_declared_identifiers_take_precedence() -> None:
    assert resolve_member_identifiers(
        "8056c2e21c000001", "efcc1b0947", "ffffffffffffffff-0000000000"
    ) == ("8056c2e21c000001", "efcc1b0947")


def test_identifiers_recovered_from_import_id() -> None:
    assert resolve_member_identifiers("", "", "8056c2e21c000001-efcc1b0947") == (
        "8056c2e21c000001",
        "efcc1b0947",
    )


def test_partial_declared_identifiers_fall_back_to_import_id() -> None:
    assert resolve_member_identifiers(
        "8056c2e21c000001", "", "8056c2e21c000001-efcc1b0947"
    ) == ("8056c2e21c000001", "efcc1b0947")


@pytest.mark.parametrize(
    "external_id",
    ["", "8056c2e21c000001", "8056c2e21c000001-", "-efcc1b0947", "a-b-c"],
)
def test_malformed_import_id_is_rejected(external_id: str) -> None:
    with pytest.raises(InvalidImportIdentifierError, match="<network-id>-<node-id>"):
        resolve_member_identifiers("", "", external_id)


def test_member_external_id_joins_identifiers() -> None:
    assert member_external_id("8056c2e21c000001", "efcc1b0947") == "8056c2e21c000001-efcc1b0947"
