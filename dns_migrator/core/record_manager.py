"""
Record Manager - Selection of records for a migration

This module finds the records that currently point at an old value, builds a
migration plan that can be shown before anything is changed, and summarises
the scanned zones.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .models import DnsRecord

logger = logging.getLogger(__name__)


class RecordManager:
    """Selects DNS records and plans migrations."""

    def __init__(self, dns_client):
        """Initialize record manager with DNS client."""
        self.dns_client = dns_client

    def find_matching_records(
        self,
        old_value: str,
        record_types: Optional[Iterable[str]] = None,
        zone: Optional[str] = None,
    ) -> List[DnsRecord]:
        """
        Find cached records whose content equals old_value.

        Args:
            old_value: Content to match exactly
            record_types: Only keep these record types (e.g. A, AAAA)
            zone: Only keep records of this zone name

        Returns:
            Matching records in listing order
        """
        types = {t.upper() for t in record_types} if record_types else None
        zone_name = self._normalize_name(zone) if zone else None

        matches = []
        for record in self.dns_client.find_records_by_content(old_value):
            if types and record.type.upper() not in types:
                continue
            if zone_name and self._normalize_name(record.zone_name) != zone_name:
                continue
            matches.append(record)

        logger.info(f"Found {len(matches)} records pointing at {old_value}")
        return matches

    def plan_migration(
        self,
        old_value: str,
        new_value: str,
        record_types: Optional[Iterable[str]] = None,
        zone: Optional[str] = None,
    ) -> Dict:
        """Split matching records into updatable and locked ones."""
        updates = []
        locked = []
        for record in self.find_matching_records(old_value, record_types, zone):
            if record.locked:
                locked.append(record)
                logger.warning(f"Record {record.name} is locked and will be skipped")
            else:
                updates.append(record)

        return {
            "old_value": old_value,
            "new_value": new_value,
            "updates": updates,
            "locked": locked,
            "total_changes": len(updates),
        }

    def get_zone_summary(self) -> Dict:
        """Get a summary of the scanned zones."""
        records = self.dns_client.list_records()

        zones = {}
        for record in records:
            zone = zones.setdefault(record.zone_name, {"total": 0, "types": {}})
            zone["total"] += 1
            zone["types"][record.type] = zone["types"].get(record.type, 0) + 1

        return {
            "total_records": len(records),
            "total_zones": len(zones),
            "zones": zones,
        }

    def _normalize_name(self, name: str) -> str:
        """Normalize a DNS name by removing trailing dot for consistent comparison."""
        return name.rstrip(".").lower() if name else name
