"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

log = logging.getLogger("directus_migrate.cli")


def configure_logging(debug: bool, log_file: Optional[Path]) -> None:
    level = logging.DEBUG if debug else logging.INFO
    handlers: list[logging.Handler] = []
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )

    # httpx logs full request URLs at INFO, and the token is in the query string
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.DEBUG if debug else logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="directus-migrate",
        description="Migrate a Directus schema from a base instance to a target instance",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging (incl. HTTP wire logs; tokens may appear)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write logs to this file instead of stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    source_args = argparse.ArgumentParser(add_help=False)
    group = source_args.add_mutually_exclusive_group()
    group.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Read BASE_URL, BASE_TOKEN, TARGET_URL, TARGET_TOKEN, FORCE from this .env file (default: ./.env)",
    )
    group.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Read connection settings from a YAML file instead of the environment",
    )

    # migrate
    migrate_parser = subparsers.add_parser(
        "migrate", parents=[source_args], help="Snapshot base, diff against target, apply"
    )
    migrate_parser.add_argument(
        "--force",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Override FORCE: let the target compute a diff despite version mismatches",
    )

    # snapshot
    snapshot_parser = subparsers.add_parser(
        "snapshot", parents=[source_args], help="Export the base instance's schema snapshot as JSON"
    )
    snapshot_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write snapshot JSON to file (default: stdout)",
    )
    return parser


def _load_settings(args: argparse.Namespace):
    from directus_migrate.config import MigrationSettings

    if args.config is not None:
        return MigrationSettings.from_yaml(args.config)
    return MigrationSettings.from_env(args.env_file)


def _run_migrate(args: argparse.Namespace) -> None:
    """Run migrate command."""
    from directus_migrate.migration import migrate

    settings = _load_settings(args)
    force = settings.force if args.force is None else args.force
    log.debug("Settings (masked): %s", settings.mask())

    base = settings.base_connection()
    target = settings.target_connection()
    migrate(base.url, base.token, target.url, target.token, force)


def _run_snapshot(args: argparse.Namespace) -> None:
    """Run snapshot command. Only the base instance's settings are needed."""
    from directus_migrate.client import DirectusClient
    from directus_migrate.config import base_connection_from_env, base_connection_from_yaml

    if args.config is not None:
        base = base_connection_from_yaml(args.config)
    else:
        base = base_connection_from_env(args.env_file)
    with DirectusClient.from_connection(base) as client:
        snapshot = client.get_snapshot()

    output = json.dumps(snapshot, indent=2)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote snapshot of {base.url} to {args.output}")
    else:
        print(output)


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    from directus_migrate.errors import ConfigError, DirectusMigrateError

    args = build_parser().parse_args(argv)
    configure_logging(args.debug, args.log_file)

    commands = {"migrate": _run_migrate, "snapshot": _run_snapshot}
    try:
        commands[args.command](args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        raise SystemExit(1)
    except DirectusMigrateError as e:
        label = "Migration failed" if args.command == "migrate" else "Snapshot failed"
        print(f"{label}: {e}", file=sys.stderr)
        raise SystemExit(1)
    except KeyboardInterrupt:
        log.warning("Interrupted by user.")
        raise SystemExit(130)


if __name__ == "__main__":
    main()
