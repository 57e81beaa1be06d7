"""CLI for reconciling a declared ZeroTier member against its controller."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence

from ztmember.clients import ZeroTierClientError, ZeroTierMemberClient, create_member_client
from ztmember.config import AppSettings, get_settings
from ztmember.identifiers import InvalidImportIdentifierError
from ztmember.mapping import InvalidTagKeyError
from ztmember.models import MemberResourceData
from ztmember.reconciler import MemberReconcileError, MemberReconciler
from ztmember.state import MemberStateError, dump_member_state, load_member_state

ClientFactory = Callable[[AppSettings], ZeroTierMemberClient]

EXIT_OK = 0
EXIT_ABSENT = 1
EXIT_ERROR = 2


def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: ClientFactory | None = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    factory = client_factory or create_member_client

    try:
        settings = AppSettings.from_env(args.config) if args.config else get_settings()
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
        reconciler = MemberReconciler(factory(settings))

        if args.command == "import":
            record = reconciler.import_member(
                args.member_id, description=settings.member_default_description
            )
            dump_member_state(record, args.state_file)
            if not record.id:
                print(f"member {args.member_id} not found")
                return EXIT_ABSENT
            _print_member("imported", record)
            return EXIT_OK

        record = load_member_state(
            args.state_file, default_description=settings.member_default_description
        )
        if args.command == "create":
            reconciler.create(record)
            # The new id must reach the state file even if the refresh fails.
            dump_member_state(record, args.state_file)
            reconciler.read(record)
            _print_member("created", record)
        elif args.command == "read":
            reconciler.read(record)
            if record.id:
                _print_member("read", record)
            else:
                print("member absent")
        elif args.command == "update":
            prior = load_member_state(args.prior_state_file) if args.prior_state_file else None
            reconciler.update(record, prior=prior)
            dump_member_state(record, args.state_file)
            reconciler.read(record)
            _print_member("updated", record)
        elif args.command == "delete":
            reconciler.delete(record)
            print(f"deleted member network_id={record.network_id} node_id={record.node_id}")
        elif args.command == "exists":
            exists = reconciler.exists(record)
            dump_member_state(record, args.state_file)
            print(f"exists={str(exists).lower()}")
            return EXIT_OK if exists else EXIT_ABSENT
        else:
            raise ValueError(f"unsupported command: {args.command}")

        dump_member_state(record, args.state_file)
        return EXIT_OK
    except (
        MemberReconcileError,
        ZeroTierClientError,
        MemberStateError,
        InvalidImportIdentifierError,
        InvalidTagKeyError,
        ValueError,
    ) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m ztmember.cli.member")
    parser.add_argument("--config", help="path to the YAML runtime config")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("create", "create the member on the controller"),
        ("read", "refresh the state file from the controller"),
        ("delete", "remove the member from its network"),
        ("exists", "check whether the controller knows the member"),
    ):
        command_parser = subparsers.add_parser(command, help=help_text)
        command_parser.add_argument("--state-file", required=True)

    update_parser = subparsers.add_parser(
        "update", help="push mutable member fields to the controller"
    )
    update_parser.add_argument("--state-file", required=True)
    update_parser.add_argument(
        "--prior-state-file",
        help="last known state; network_id/node_id changes against it are rejected",
    )

    import_parser = subparsers.add_parser(
        "import", help="adopt an existing member by its <network-id>-<node-id> id"
    )
    import_parser.add_argument("member_id")
    import_parser.add_argument("--state-file", required=True)

    return parser


def _print_member(action: str, record: MemberResourceData) -> None:
    print(
        f"{action} member id={record.id} authorized={str(record.authorized).lower()} "
        f"rfc4193={record.rfc4193_address} 6plane={record.zt6plane_address} "
        f"ips={','.join(sorted(record.ip_assignments))}"
    )


if __name__ == "__main__":
    raise SystemExit(main())
