"""YAML persistence for declared member configuration."""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from ztmember.config import DEFAULT_MEMBER_DESCRIPTION
from ztmember.models import COMPUTED_MEMBER_FIELDS, MemberResourceData

_STR_FIELDS = frozenset(
    {
        "network_id",
        "node_id",
        "id",
        "name",
        "description",
        "rfc4193_address",
        "zt6plane_address",
    }
)
_BOOL_FIELDS = frozenset(
    {"hidden", "authorized", "allow_ethernet_bridging", "no_auto_assign_ips"}
)
_STR_SET_FIELDS = frozenset({"ip_assignments", "ipv4_assignments", "ipv6_assignments"})
_KNOWN_FIELDS = frozenset(item.name for item in fields(MemberResourceData))


class MemberStateError(ValueError):
    """Raised when a member state file cannot be read as declared configuration."""

    error_code = "member_state_error"


def load_member_state(
    path: str | Path,
    *,
    default_description: str = DEFAULT_MEMBER_DESCRIPTION,
) -> MemberResourceData:
    source = Path(path)
    try:
        parsed = yaml.safe_load(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise MemberStateError(f"failed to read member state file: {source}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MemberStateError(f"member state file is not valid YAML: {source}: {exc}") from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise MemberStateError(f"member state file must contain a mapping: {source}")
    return member_state_from_mapping(parsed, default_description=default_description)


def dump_member_state(record: MemberResourceData, path: str | Path) -> None:
    Path(path).write_text(
        yaml.safe_dump(member_state_to_mapping(record), sort_keys=False),
        encoding="utf-8",
    )


def member_state_from_mapping(
    data: dict[str, Any],
    *,
    default_description: str = DEFAULT_MEMBER_DESCRIPTION,
) -> MemberResourceData:
    unknown = sorted(str(key) for key in data if key not in _KNOWN_FIELDS)
    if unknown:
        raise MemberStateError(f"unknown member fields: {', '.join(unknown)}")

    values: dict[str, Any] = {"description": default_description}
    for key, value in data.items():
        if value is None:
            continue
        if key in _STR_FIELDS:
            values[key] = _expect(key, value, str)
        elif key in _BOOL_FIELDS:
            values[key] = _expect(key, value, bool)
        elif key == "offline_notify_delay":
            delay = _expect_int(key, value)
            if delay < 0:
                raise MemberStateError("offline_notify_delay must not be negative")
            values[key] = delay
        elif key in _STR_SET_FIELDS:
            values[key] = {_expect(key, item, str) for item in _expect(key, value, list)}
        elif key == "capabilities":
            values[key] = {_expect_int(key, item) for item in _expect(key, value, list)}
        elif key == "tags":
            tags = _expect(key, value, dict)
            values[key] = {
                str(tag_key): _expect_int(key, tag_value) for tag_key, tag_value in tags.items()
            }
    return MemberResourceData(**values)


def member_state_to_mapping(record: MemberResourceData) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for item in fields(record):
        value = getattr(record, item.name)
        if item.name in COMPUTED_MEMBER_FIELDS and not value:
            continue
        if isinstance(value, set):
            value = sorted(value)
        elif isinstance(value, dict):
            value = dict(value)
        data[item.name] = value
    return data


def _expect(key: str, value: Any, expected: type) -> Any:
    if not isinstance(value, expected):
        raise MemberStateError(
            f"{key} must be of type {expected.__name__}, received {type(value).__name__}"
        )
    return value


def _expect_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MemberStateError(f"{key} entries must be integers, received {value!r}")
    return value
