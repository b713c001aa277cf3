import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from uuid import UUID

from coursecore.adapters.sqlite.migrator import SQLiteMigrator
from coursecore.context import ServiceContext
from coursecore.domain.entities import Principal
from coursecore.domain.errors import CoreError
from coursecore.rules.loader import load_rules, resolve_rules_path

logger = logging.getLogger("coursecore.cli")

# Operator identity used for read-only reports
SYSTEM_PRINCIPAL = Principal(id=UUID(int=0), role="staff")


def _default_db_path() -> str:
    return str(Path(os.environ.get("COURSECORE_DATA_DIR", "./data")) / "coursecore.db")


def handle_migrate(args: argparse.Namespace) -> None:
    Path(args.db).parent.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(args.db)

    if args.status:
        current = migrator.status()
        for filename in current.applied:
            print(f"  [x] {filename}")
        for filename in current.pending:
            print(f"  [ ] {filename}")
        return

    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s).")
    for filename in applied:
        print(f"  {filename}")


def handle_stats(args: argparse.Namespace) -> None:
    rules_path = resolve_rules_path(args.rules)
    if not rules_path.exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)

    course_id = None
    if args.course:
        try:
            course_id = UUID(args.course)
        except ValueError:
            logger.error("Invalid course id: %s", args.course)
            sys.exit(1)

    ctx = ServiceContext.create(args.db, load_rules(rules_path))
    try:
        if course_id is not None:
            report = asdict(ctx.analytics.course_summary(SYSTEM_PRINCIPAL, course_id))
        else:
            report = asdict(ctx.analytics.platform_stats(SYSTEM_PRINCIPAL))
    except CoreError as e:
        logger.error("%s: %s", e.kind, e.message)
        sys.exit(1)
    print(json.dumps(report, indent=2, default=str))


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Course enrollment core CLI")
    parser.add_argument("--db", default=_default_db_path(), help="SQLite database path")
    parser.add_argument("--rules", help="Path to rules.yaml (default: $COURSECORE_RULES_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument(
        "--status", action="store_true", help="List applied and pending migrations only"
    )

    # stats
    stats_parser = subparsers.add_parser("stats", help="Print enrollment statistics")
    stats_parser.add_argument("--course", help="Course id for a single-course summary")

    args = parser.parse_args(argv)

    if args.command == "migrate":
        handle_migrate(args)
    elif args.command == "stats":
        handle_stats(args)


if __name__ == "__main__":
    main()
