#!/usr/bin/env python3
"""
DNS Migrator - Command Line Interface

Main entry point for the DNS Migrator CLI.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from ..core.dns_manager import DNSManager, console
from ..core.exceptions import ConfigurationError, DNSMigratorError
from ..utils.validators import validate_record_value, validate_zone_name

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/config.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dns-migrator",
        description="DNS Migrator - Bulk migration of DNS record values",
    )

    parser.add_argument(
        "--config",
        "-c",
        default=DEFAULT_CONFIG_PATH,
        help=f"Configuration file path (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("test-connection", help="Check the provider credentials")
    commands.add_parser("scan", help="List every zone and record of the account")

    records = commands.add_parser("records", help="Show scanned DNS records")
    records.add_argument("--ip", help="Only show records with this content")
    records.add_argument("--type", "-t", help="Only show records of this type")

    migrate = commands.add_parser("migrate", help="Rewrite records to a new value")
    migrate.add_argument("--old", required=True, help="Current record content")
    migrate.add_argument("--new", required=True, help="New record content")
    migrate.add_argument(
        "--record-id",
        action="append",
        dest="record_ids",
        help="Record to migrate (repeatable, default: every record matching --old)",
    )
    migrate.add_argument(
        "--type",
        "-t",
        action="append",
        dest="record_types",
        help="Only migrate records of this type (repeatable)",
    )
    migrate.add_argument("--zone", "-z", help="Only migrate records of this zone")
    migrate.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be changed without making changes",
    )
    migrate.add_argument(
        "--yes", "-y", action="store_true", help="Do not ask for confirmation"
    )
    migrate.add_argument(
        "--activity-limit",
        type=int,
        default=20,
        help="Activity log entries to show after the run (default: 20)",
    )
    migrate.add_argument(
        "--clear-activity",
        action="store_true",
        help="Drop earlier activity entries so only this run is shown",
    )

    backup = commands.add_parser("backup", help="Create or restore record backups")
    backup_commands = backup.add_subparsers(dest="backup_command", required=True)
    backup_create = backup_commands.add_parser("create", help="Back up records")
    backup_create.add_argument("--name", "-n", help="Backup name")
    backup_create.add_argument("--output", "-o", help="File to write the backup to")
    backup_create.add_argument(
        "--record-id",
        action="append",
        dest="record_ids",
        help="Only back up this record (repeatable)",
    )
    backup_restore = backup_commands.add_parser(
        "restore", help="Write the contents of a backup file back to the provider"
    )
    backup_restore.add_argument("file", help="Backup file written by 'backup create'")
    backup_list = backup_commands.add_parser("list", help="Show backup files")
    backup_list.add_argument("files", nargs="+", help="Backup files to show")

    commands.add_parser("test-domains", help="Check DNS and HTTP for A/AAAA names")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.command == "migrate":
        for value in (args.old, args.new):
            if not validate_record_value(value):
                print(f"Error: '{value}' is not an IP address or host name")
                sys.exit(1)
        if args.old == args.new:
            print("Error: --old and --new must differ")
            sys.exit(1)
        if args.zone and not validate_zone_name(args.zone):
            print(f"Error: invalid zone name '{args.zone}'")
            sys.exit(1)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)
    config_logger(config, verbose=args.verbose)

    dns_manager = DNSManager(config)
    try:
        success = run_command(dns_manager, args)
    except (DNSMigratorError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        if args.verbose:
            console.print_exception()
        success = False
    finally:
        dns_manager.close()

    sys.exit(0 if success else 1)


def run_command(dns_manager: DNSManager, args) -> bool:
    if args.command == "test-connection":
        return dns_manager.test_connection()

    if args.command == "backup" and args.backup_command == "list":
        dns_manager.list_backups(args.files)
        return True

    dns_manager.scan()

    if args.command == "scan":
        summary = dns_manager.record_manager.get_zone_summary()
        for zone_name, zone in sorted(summary["zones"].items()):
            types = ", ".join(f"{t}: {n}" for t, n in sorted(zone["types"].items()))
            console.print(f"  {zone_name}: {zone['total']} records ({types})")
        return True

    if args.command == "records":
        dns_manager.show_records(content=args.ip, record_type=args.type)
        return True

    if args.command == "migrate":
        if args.clear_activity:
            dns_manager.clear_activity()
        return dns_manager.migrate(
            args.old,
            args.new,
            record_ids=args.record_ids,
            record_types=args.record_types,
            zone=args.zone,
            dry_run=args.dry_run,
            assume_yes=args.yes,
            activity_limit=args.activity_limit,
        )

    if args.command == "backup":
        if args.backup_command == "create":
            dns_manager.create_backup(args.name, args.output, args.record_ids)
            return True
        return dns_manager.restore_backup(args.file)

    if args.command == "test-domains":
        return dns_manager.test_domains()

    raise ValueError(f"Unknown command: {args.command}")


def load_config(config_path: str) -> Dict:
    """Load configuration from YAML file."""
    if not Path(config_path).exists():
        logger.warning(f"Config file {config_path} not found, using defaults")
        return get_default_config()

    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing config file {config_path}: {e}")

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    logger.info(f"Configuration loaded from {config_path}")
    return config


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        "dns_providers": {"mock": {}},
        "default_provider": "mock",
        "migration": {"verify_old_value": False},
        "logging": {"level": "INFO", "file": "dns_migrator.log"},
    }


def config_logger(config: Dict, verbose: bool = False):
    """Configure logging."""
    logging_config = config.get("logging", None)
    if logging_config:
        log_level = "DEBUG" if verbose else logging_config.get("level", "INFO")
        log_file = logging_config.get("file", "dns_migrator.log")

        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler(sys.stdout),
            ],
        )
        return

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


if __name__ == "__main__":
    main()
