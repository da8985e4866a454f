"""
Command line entry point for profile export and import.

Usage:
    python -m bookmark_profiles.runner init-db [--name NAME]
    python -m bookmark_profiles.runner export --categories currentBookmarks userSettings --name MyExport [--password PW] [--output DIR]
    python -m bookmark_profiles.runner import FILE [--password PW]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Sequence

from bookmark_profiles.config import AppConfig, get_settings
from bookmark_profiles.database.session import create_tables, get_session, init_engine, test_connection
from bookmark_profiles.profiles.store import ProfileStore
from bookmark_profiles.services.transfer_service import ProfileTransferService
from bookmark_profiles.transfer.categories import CATEGORY_TABLE, Category
from bookmark_profiles.transfer.exceptions import ProfileTransferError
from bookmark_profiles.transfer.merge import ImportState

logger = logging.getLogger("bookmark_profiles.runner")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export and import bookmark manager profiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Categories: " + ", ".join(tag.value for tag in CATEGORY_TABLE),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    init_db = commands.add_parser("init-db", help="Create tables and a default profile")
    init_db.add_argument("--name", default=None, help="Name of the default profile")

    export = commands.add_parser("export", help="Export the active profile")
    export.add_argument(
        "--categories",
        nargs="+",
        required=True,
        choices=[tag.value for tag in CATEGORY_TABLE],
        help="Categories to export, in order",
    )
    export.add_argument("--name", required=True, help="Artifact file name (without extension)")
    export.add_argument("--password", default="", help="Encrypt the artifact with this password")
    export.add_argument("--output", "-o", default=".", help="Directory to write the artifact to")

    import_ = commands.add_parser("import", help="Import an artifact")
    import_.add_argument("file", help="Artifact to import")
    import_.add_argument("--password", default="", help="Password of an encrypted artifact")

    return parser.parse_args(argv)


def _run_export(service: ProfileTransferService, args: argparse.Namespace) -> int:
    export_session = service.new_export_session()
    ignored: List[str] = []
    for tag in args.categories:
        if not export_session.selector.set_category(Category(tag), True):
            ignored.append(tag)
    if ignored:
        print(f"Ignored (locked by another selection): {', '.join(ignored)}")
    export_session.file_name = args.name
    export_session.password = args.password

    path = service.export_to_file(export_session, args.output)
    print(f"✓ Exported {', '.join(t.value for t in export_session.selector.selected())} to {path}")
    return 0


def _run_import(service: ProfileTransferService, args: argparse.Namespace) -> int:
    import_session = service.load_file(service.new_import_session(), args.file)
    if import_session.state is ImportState.AWAITING_PASSWORD:
        if not args.password:
            print("✗ The file is encrypted; pass --password")
            return 1
        service.submit_password(import_session, args.password)

    status = import_session.validation.status
    print(
        f"Validation: success={status.success}, error={status.error}, "
        f"criticalError={status.critical_error}"
    )
    for message in status.messages:
        print(f"  • {message}")

    report = service.apply(import_session)
    print(f"✓ Imported: {', '.join(tag.value for tag in report.applied)}")
    if report.created_profiles:
        print(f"  - New profiles: {', '.join(report.created_profiles)}")
    return 0


def main(argv: Sequence[str] | None = None, config: AppConfig | None = None) -> int:
    """
    CLI entry-point.

    Returns:
        0 on success, 1 when an export/import error was reported
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    config = config or get_settings()
    if args.command == "init-db" and not test_connection(config.database):
        print("✗ Database connection failed")
        return 1
    create_tables(init_engine(config.database))

    try:
        with get_session() as session:
            if args.command == "init-db":
                profile = ProfileStore(session, config.transfer.profile_id_length).ensure_active_profile(args.name)
                print(f"✓ Active profile: {profile.name} ({profile.user_id})")
                return 0

            store = ProfileStore(session, config.transfer.profile_id_length)
            store.ensure_active_profile()
            service = ProfileTransferService(config, session, store=store)
            if args.command == "export":
                return _run_export(service, args)
            return _run_import(service, args)
    except ProfileTransferError as e:
        print(f"✗ {e.user_message}")
        return 1
    except OSError as e:
        logger.error(f"File error: {e}")
        print(f"✗ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
