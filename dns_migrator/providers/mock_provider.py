"""
Mock DNS provider for testing and demonstration.

This module provides a mock DNS provider that stores zones and records in
memory for safe testing and demonstration purposes.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional

from .base_provider import DNSProvider
from ..core.models import DnsRecord, Zone

logger = logging.getLogger(__name__)


class MockDNSProvider(DNSProvider):
    """Mock DNS provider for testing and demonstration purposes."""

    name = "mock"

    def __init__(self, config: Dict = None):
        """Initialize mock provider."""
        config = config or {}
        self.credentials = config.get("credentials", True)
        self.zones: Dict[str, Zone] = {}
        self.records: Dict[str, DnsRecord] = {}
        self.failures: Dict[str, str] = {}
        self.update_calls: List[Dict] = []
        self._lock = threading.Lock()
        logger.info("Mock DNS provider initialized")

    def add_zone(self, zone: Zone) -> None:
        self.zones[zone.id] = zone

    def add_records(self, records: Iterable[DnsRecord]) -> None:
        for record in records:
            self.records[record.id] = DnsRecord.from_dict(record.to_dict())

    def fail_update(self, record_id: str, message: str = "Simulated provider error") -> None:
        """Make every update of record_id raise with message."""
        self.failures[record_id] = message

    def has_credentials(self) -> bool:
        return bool(self.credentials)

    def verify_credentials(self) -> Dict:
        if not self.has_credentials():
            raise RuntimeError("Mock: no credentials configured")
        return {"id": "mock-user", "email": "mock@example.com"}

    def list_zones(self) -> List[Zone]:
        logger.info(f"Mock: Retrieved {len(self.zones)} zones")
        return list(self.zones.values())

    def list_records(self, zone: Zone) -> List[DnsRecord]:
        records = [
            DnsRecord.from_dict(record.to_dict())
            for record in self.records.values()
            if record.zone_id == zone.id
        ]
        logger.info(f"Mock: Retrieved {len(records)} records for {zone.name}")
        return records

    def update_record(self, zone_id: str, record_id: str, data: Dict) -> Dict:
        """Update an existing DNS record."""
        with self._lock:
            self.update_calls.append(
                {"zone_id": zone_id, "record_id": record_id, "data": dict(data)}
            )
            if record_id in self.failures:
                raise RuntimeError(self.failures[record_id])

            existing: Optional[DnsRecord] = self.records.get(record_id)
            if existing is None or existing.zone_id != zone_id:
                raise ValueError(f"Record {record_id} not found for update")

            for key in ("type", "name", "content", "ttl", "proxied"):
                if key in data:
                    setattr(existing, key, data[key])

        logger.info(f"Mock: Updated record {existing.name} -> {existing.content}")
        return existing.to_dict()
