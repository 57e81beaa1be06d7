from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ztmember.models import MemberResourceData
from ztmember.state import MemberStateError, dump_member_state, load_member_state


def _write_state(tmp_path: Path, content: str) -> Path:
    state_file = tmp_path / "member.yaml"
    state_file.write_text(content, encoding="utf-8")
    return state_file


def test_load_member_state_reads_declared_fields(tmp_path: Path) -> None:
    state_file = _write_state(
        tmp_path,
        """
network_id: "8056c2e21c000001"
node_id: "efcc1b0947"
name: edge-router
authorized: false
offline_notify_delay: 30
ip_assignments: ["10.147.17.5", "fd00::5"]
capabilities: [1, 7]
tags:
  1000: 3
  "2000": 10
""",
    )

    record = load_member_state(state_file)

    assert record.network_id == "8056c2e21c000001"
    assert record.node_id == "efcc1b0947"
    assert record.name == "edge-router"
    assert record.description == "Managed by ztmember"
    assert record.authorized is False
    assert record.offline_notify_delay == 30
    assert record.ip_assignments == {"10.147.17.5", "fd00::5"}
    assert record.capabilities == {1, 7}
    assert record.tags == {"1000": 3, "2000": 10}
    assert record.id == ""


def test_load_member_state_uses_configured_default_description(tmp_path: Path) -> None:
    state_file = _write_state(tmp_path, "network_id: '8056c2e21c000001'\n")

    record = load_member_state(state_file, default_description="Managed by the lab")

    assert record.description == "Managed by the lab"


def test_load_member_state_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    record = load_member_state(_write_state(tmp_path, ""))

    assert record == MemberResourceData()


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- just\n- a list\n", "must contain a mapping"),
        ("nickname: router\n", "unknown member fields: nickname"),
        ("hidden: 'yes'\n", "hidden must be of type bool"),
        ("capabilities: [1, true]\n", "capabilities entries must be integers"),
        ("offline_notify_delay: -5\n", "must not be negative"),
        ("tags:\n  '1': one\n", "tags entries must be integers"),
        ("name: [unclosed\n", "not valid YAML"),
    ],
)
def test_load_member_state_rejects_invalid_content(
    tmp_path: Path, content: str, message: str
) -> None:
    with pytest.raises(MemberStateError, match=message):
        load_member_state(_write_state(tmp_path, content))


def test_load_member_state_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MemberStateError, match="failed to read member state file"):
        load_member_state(tmp_path / "missing.yaml")


def test_dump_member_state_writes_sorted_collections(tmp_path: Path) -> None:
    state_file = tmp_path / "member.yaml"
    record = MemberResourceData(
        network_id="8056c2e21c000001",
        node_id="efcc1b0947",
        ip_assignments={"10.147.17.6", "10.147.17.5"},
        capabilities={7, 1},
        tags={"1000": 3},
    )

    dump_member_state(record, state_file)

    written = yaml.safe_load(state_file.read_text(encoding="utf-8"))
    assert written["ip_assignments"] == ["10.147.17.5", "10.147.17.6"]
    assert written["capabilities"] == [1, 7]
    assert written["tags"] == {"1000": 3}
    assert "rfc4193_address" not in written
    assert load_member_state(state_file) == record
