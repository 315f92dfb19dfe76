"""
Backup Manager - Point-in-time copies of DNS records

Backups hold the scanned record snapshots as a JSON document. They can be
written to and read from files, and restored by writing the saved contents
back through the DNS client.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .exceptions import BackupNotFound, InvalidRequest
from .job_store import JobStore
from .models import ActivityType, Backup, DnsRecord

logger = logging.getLogger(__name__)


class BackupManager:
    """Creates, stores and restores record backups."""

    def __init__(self, dns_client, store: JobStore):
        self.dns_client = dns_client
        self.store = store

    def create_backup(
        self, name: Optional[str] = None, record_ids: Optional[Iterable[str]] = None
    ) -> Backup:
        records = self.dns_client.list_records()
        if record_ids is not None:
            wanted = set(record_ids)
            records = [record for record in records if record.id in wanted]

        backup = self.store.create_backup(
            name=name or f"dns-backup-{date.today().isoformat()}",
            record_count=len(records),
            data=json.dumps([record.to_dict() for record in records]),
        )
        self.store.add_activity_log_entry(
            ActivityType.SUCCESS,
            f"Created backup with {len(records)} DNS records",
            backup.name,
        )
        logger.info(f"Created backup {backup.name} with {len(records)} records")
        return backup

    def list_backups(self) -> List[Backup]:
        return self.store.get_backups()

    def get_backup(self, backup_id: str) -> Backup:
        backup = self.store.get_backup(backup_id)
        if backup is None:
            raise BackupNotFound(backup_id)
        return backup

    def get_backup_records(self, backup_id: str) -> List[DnsRecord]:
        return [
            DnsRecord.from_dict(item)
            for item in json.loads(self.get_backup(backup_id).data)
        ]

    def export_backup(self, backup_id: str, path: str) -> Path:
        """Write a backup to a JSON file."""
        backup = self.get_backup(backup_id)
        document = {
            "name": backup.name,
            "created_at": backup.created_at.isoformat(),
            "record_count": backup.record_count,
            "records": json.loads(backup.data),
        }
        output = Path(path)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
        logger.info(f"Backup {backup.name} written to {output}")
        return output

    def import_backup(self, path: str) -> Backup:
        """Load a backup file written by export_backup into the store."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
            records = [DnsRecord.from_dict(item) for item in document["records"]]
        except FileNotFoundError:
            raise InvalidRequest(f"Backup file not found: {path}")
        except (ValueError, KeyError, TypeError) as e:
            raise InvalidRequest(f"Invalid backup file {path}: {e}")

        backup = self.store.create_backup(
            name=document.get("name") or Path(path).stem,
            record_count=len(records),
            data=json.dumps([record.to_dict() for record in records]),
        )
        logger.info(f"Imported backup {backup.name} with {len(records)} records")
        return backup

    def restore_backup(self, backup_id: str) -> Dict:
        """
        Write the saved content of every backed up record back to the provider.

        Records whose current content already matches are skipped. A failing
        record is counted and logged; the rest of the backup is still restored.
        """
        backup = self.get_backup(backup_id)
        restored, skipped, failed = 0, 0, 0

        for saved in self.get_backup_records(backup_id):
            current = self.dns_client.get_record(saved.id)
            if current is not None and current.content == saved.content:
                skipped += 1
                continue

            try:
                self.dns_client.update_record(
                    saved.zone_id, saved.id, saved.update_payload(saved.content)
                )
            except Exception as e:
                failed += 1
                logger.error(f"Failed to restore record {saved.name}: {e}")
                self.store.add_activity_log_entry(
                    ActivityType.ERROR, f"Failed to restore DNS record: {e}", saved.name
                )
                continue

            self.dns_client.set_cached_content(saved.id, saved.content)
            restored += 1

        entry_type = ActivityType.SUCCESS if failed == 0 else ActivityType.WARNING
        self.store.add_activity_log_entry(
            entry_type,
            f"Restored backup: {restored} restored, {skipped} unchanged, {failed} failed",
            backup.name,
        )
        logger.info(
            f"Restored backup {backup.name}: {restored} restored, "
            f"{skipped} unchanged, {failed} failed"
        )
        return {"restored": restored, "skipped": skipped, "failed": failed}
