#!/usr/bin/env python3
"""
DNS Migrator - Bulk migration of DNS record values

This module wires the DNS client, job store, migration engine and the record,
backup and domain helpers together, and renders their results on the console.
"""

import logging
from typing import Dict, Iterable, List, Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm
from rich.table import Table

from ..providers.base_provider import DNSProvider
from ..providers.dns_client import DNSClient
from .backup_manager import BackupManager
from .domain_tester import DomainTester
from .job_store import InMemoryJobStore, JobStore
from .migration_engine import MigrationEngine
from .models import ActivityType, Backup, DnsRecord, JobState, RecordState
from .record_manager import RecordManager

# Initialize rich console and logger
console = Console()
logger = logging.getLogger(__name__)

ACTIVITY_STYLES = {
    ActivityType.INFO: "blue",
    ActivityType.SUCCESS: "green",
    ActivityType.ERROR: "red",
    ActivityType.WARNING: "yellow",
}


class DNSManager:
    """Main DNS management class that orchestrates the entire process."""

    def __init__(
        self,
        config: Dict,
        provider: Optional[DNSProvider] = None,
        store: Optional[JobStore] = None,
    ):
        """Initialize the DNS manager with configuration."""
        self.config = config or {}
        migration_config = self.config.get("migration") or {}

        self.store = store or InMemoryJobStore()
        self.dns_client = DNSClient(self.config, provider=provider)
        self.record_manager = RecordManager(self.dns_client)
        self.engine = MigrationEngine(
            self.dns_client,
            self.store,
            verify_old_value=migration_config.get("verify_old_value", False),
        )
        self.backup_manager = BackupManager(self.dns_client, self.store)
        self.poll_interval = migration_config.get("poll_interval", 0.5)

    def test_connection(self) -> bool:
        """Check that the provider accepts the configured credentials."""
        try:
            result = self.dns_client.verify_credentials()
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            console.print(f"[red]Connection failed: {e}[/red]")
            return False

        console.print("[green]Connection successful[/green]")
        logger.info(f"Connection test succeeded: {result}")
        return True

    def scan(self) -> List[DnsRecord]:
        """Fetch every zone and record from the provider."""
        try:
            zones, records = self.dns_client.scan()
        except Exception as e:
            self.store.add_activity_log_entry(
                ActivityType.ERROR, f"DNS scan failed: {e}"
            )
            raise

        self.store.add_activity_log_entry(
            ActivityType.SUCCESS,
            f"Scanned {len(records)} DNS records from {len(zones)} zones",
        )
        console.print(
            f"[blue]Found {len(records)} DNS records in {len(zones)} zones[/blue]"
        )
        return records

    def show_records(
        self, content: Optional[str] = None, record_type: Optional[str] = None
    ) -> List[DnsRecord]:
        if content:
            records = self.dns_client.find_records_by_content(content)
        else:
            records = self.dns_client.list_records()
        if record_type:
            records = [r for r in records if r.type.upper() == record_type.upper()]

        self._display_records(records, title="DNS Records")
        return records

    def migrate(
        self,
        old_value: str,
        new_value: str,
        record_ids: Optional[Iterable[str]] = None,
        record_types: Optional[Iterable[str]] = None,
        zone: Optional[str] = None,
        dry_run: bool = False,
        assume_yes: bool = False,
        activity_limit: int = 20,
    ) -> bool:
        """Plan, confirm and run a migration, waiting for it to finish."""
        if record_ids:
            record_ids = list(record_ids)
            selected = [
                self.dns_client.get_record(record_id) for record_id in record_ids
            ]
            self._display_records([r for r in selected if r], title="Selected Records")
        else:
            plan = self.record_manager.plan_migration(
                old_value, new_value, record_types, zone
            )
            self._display_plan(plan)
            record_ids = [record.id for record in plan["updates"]]

        if not record_ids:
            console.print(
                f"[green]No records point at {old_value} - nothing to migrate[/green]"
            )
            return True

        if dry_run:
            console.print("[yellow]DRY RUN MODE - No changes will be applied[/yellow]")
            return True

        if not assume_yes and not Confirm.ask(
            f"Update {len(record_ids)} DNS records from {old_value} to {new_value}?",
            console=console,
        ):
            console.print("[yellow]Migration cancelled[/yellow]")
            return False

        job_id = self.engine.start_migration(old_value, new_value, record_ids)
        self._follow_job(job_id, len(record_ids))

        progress = self.engine.get_progress(job_id)
        self._display_record_statuses(job_id)
        self.show_activity(activity_limit)

        console.print(
            f"[blue]Migration {progress.status.value}: "
            f"{progress.completed_records} updated, "
            f"{progress.failed_records} failed[/blue]"
        )
        return progress.failed_records == 0 and progress.status == JobState.COMPLETED

    def _follow_job(self, job_id: str, total: int) -> None:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            console=console,
        ) as progress_bar:
            task = progress_bar.add_task("Migrating DNS records...", total=total)
            while True:
                finished = self.engine.wait(job_id, timeout=self.poll_interval)
                snapshot = self.engine.get_progress(job_id)
                progress_bar.update(
                    task,
                    completed=snapshot.completed_records + snapshot.failed_records,
                )
                if finished:
                    break

    def create_backup(
        self,
        name: Optional[str] = None,
        output_file: Optional[str] = None,
        record_ids: Optional[Iterable[str]] = None,
    ) -> Backup:
        backup = self.backup_manager.create_backup(name, record_ids)
        console.print(
            f"[green]Created backup {backup.name} with "
            f"{backup.record_count} records[/green]"
        )
        if output_file:
            self.backup_manager.export_backup(backup.id, output_file)
            console.print(f"[green]Backup saved to: {output_file}[/green]")
        return backup

    def restore_backup(self, backup_file: str) -> bool:
        backup = self.backup_manager.import_backup(backup_file)
        result = self.backup_manager.restore_backup(backup.id)

        table = Table(title=f"Restore of {backup.name}")
        table.add_column("Restored", style="green")
        table.add_column("Unchanged", style="cyan")
        table.add_column("Failed", style="red")
        table.add_row(
            str(result["restored"]), str(result["skipped"]), str(result["failed"])
        )
        console.print(table)
        return result["failed"] == 0

    def list_backups(self, backup_files: Iterable[str] = ()) -> List[Backup]:
        """Load backup files into the store and show every stored backup."""
        for backup_file in backup_files:
            self.backup_manager.import_backup(backup_file)

        backups = self.backup_manager.list_backups()
        table = Table(title="Backups")
        table.add_column("Name", style="cyan")
        table.add_column("Created", style="white")
        table.add_column("Records", style="magenta")
        for backup in backups:
            table.add_row(
                backup.name,
                backup.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                str(backup.record_count),
            )
        console.print(table)
        return backups

    def test_domains(self) -> bool:
        tester = DomainTester(self.dns_client, self.store)
        try:
            results = tester.test_domains()
        finally:
            tester.close()

        table = Table(title="Domain Health")
        table.add_column("Domain", style="cyan")
        table.add_column("IP", style="magenta")
        table.add_column("Status", style="white")
        table.add_column("Error", style="red")
        for result in results:
            table.add_row(
                result.domain,
                result.current_ip or "-",
                str(result.status) if result.status is not None else "-",
                result.error or "",
            )
        console.print(table)
        return all(result.status is not None for result in results)

    def show_activity(self, limit: int = 20) -> None:
        entries = self.store.get_activity_log(limit)
        if not entries:
            return

        table = Table(title="Activity Log")
        table.add_column("Time", style="cyan")
        table.add_column("Message", style="white")
        table.add_column("Details", style="magenta")
        for entry in entries:
            style = ACTIVITY_STYLES[entry.type]
            table.add_row(
                entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                f"[{style}]{entry.message}[/{style}]",
                entry.details or "",
            )
        console.print(table)

    def clear_activity(self) -> None:
        self.store.clear_activity_log()
        logger.info("Activity log cleared")

    def _display_records(self, records: List[DnsRecord], title: str) -> None:
        table = Table(title=title)
        table.add_column("Zone", style="cyan")
        table.add_column("Name", style="white")
        table.add_column("Type", style="magenta")
        table.add_column("Content", style="green")
        table.add_column("TTL", style="white")
        table.add_column("Proxied", style="white")
        table.add_column("ID", style="dim")
        for record in records:
            table.add_row(
                record.zone_name,
                record.name,
                record.type,
                record.content,
                "auto" if record.ttl == 1 else str(record.ttl),
                "yes" if record.proxied else "no",
                record.id,
            )
        console.print(table)
        console.print(f"\n[bold]Total records: {len(records)}[/bold]")

    def _display_plan(self, plan: Dict) -> None:
        table = Table(title="Migration Plan")
        table.add_column("Operation", style="cyan")
        table.add_column("Count", style="magenta")
        table.add_column("Details", style="white")

        if plan["updates"]:
            table.add_row(
                "Update",
                str(len(plan["updates"])),
                ", ".join(record.name for record in plan["updates"]),
            )
        if plan["locked"]:
            table.add_row(
                "Locked (skipped)",
                str(len(plan["locked"])),
                ", ".join(record.name for record in plan["locked"]),
            )

        console.print(table)
        console.print(
            f"\n[bold]{plan['old_value']} -> {plan['new_value']}: "
            f"{plan['total_changes']} records to update[/bold]"
        )

    def _display_record_statuses(self, job_id: str) -> None:
        table = Table(title="Record Results")
        table.add_column("Record", style="cyan")
        table.add_column("Status", style="white")
        table.add_column("Error", style="red")
        for status in self.store.get_record_statuses(job_id):
            record = self.dns_client.get_record(status.record_id)
            colour = "green" if status.status == RecordState.COMPLETED else "red"
            table.add_row(
                record.name if record else status.record_id,
                f"[{colour}]{status.status.value}[/{colour}]",
                status.error_message or "",
            )
        console.print(table)

    def close(self) -> None:
        self.dns_client.close()
