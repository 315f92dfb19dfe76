"""
DNS Client - Unified interface for DNS provider APIs

This module provides a common interface over the configured DNS provider and
keeps the last scanned listing of zones and records, which the migration
engine uses to build update calls.
"""

import logging
import threading
from typing import Dict, List, Optional, Tuple

from .base_provider import DNSProvider
from .cloudflare_provider import CloudflareProvider
from .mock_provider import MockDNSProvider
from ..core.exceptions import StartupFailure
from ..core.models import DnsRecord, Zone

logger = logging.getLogger(__name__)


class DNSClient:
    """Unified DNS client that supports multiple providers."""

    def __init__(self, config: Dict, provider: Optional[DNSProvider] = None):
        """Initialize DNS client with configuration."""
        self.config = config
        self.provider = provider or self._get_provider()
        self._lock = threading.RLock()
        self._zones: Dict[str, Zone] = {}
        self._records: Dict[str, DnsRecord] = {}

    def _get_provider(self) -> DNSProvider:
        """Get DNS provider based on configuration."""
        provider_name = self.config.get("default_provider", "cloudflare")
        provider_config = self.config.get("dns_providers", {}).get(provider_name) or {}

        if provider_name == "cloudflare":
            return CloudflareProvider(provider_config)
        elif provider_name == "mock":
            return MockDNSProvider(provider_config)
        else:
            logger.warning(f"Unknown provider '{provider_name}', using mock provider")
            return MockDNSProvider()

    def ensure_ready(self) -> None:
        """Raise StartupFailure when the provider cannot be called at all."""
        if not self.provider.has_credentials():
            raise StartupFailure(
                f"No API configuration found for provider '{self.provider.name}'"
            )

    def verify_credentials(self) -> Dict:
        self.ensure_ready()
        return self.provider.verify_credentials()

    def scan(self) -> Tuple[List[Zone], List[DnsRecord]]:
        """Fetch every zone and record and replace the cached listing."""
        self.ensure_ready()
        zones = self.provider.list_zones()

        records = []
        for zone in zones:
            try:
                records.extend(self.provider.list_records(zone))
            except Exception as e:
                logger.error(f"Failed to get DNS records for zone {zone.name}: {e}")

        with self._lock:
            self._zones = {zone.id: zone for zone in zones}
            self._records = {record.id: record for record in records}

        logger.info(f"Scanned {len(records)} DNS records from {len(zones)} zones")
        return zones, records

    def load_records(self, records: List[DnsRecord]) -> None:
        """Replace the cached listing without calling the provider."""
        with self._lock:
            self._records = {
                record.id: DnsRecord.from_dict(record.to_dict()) for record in records
            }

    def list_zones(self) -> List[Zone]:
        with self._lock:
            return list(self._zones.values())

    def list_records(self) -> List[DnsRecord]:
        """Get copies of all cached records."""
        with self._lock:
            return [DnsRecord.from_dict(r.to_dict()) for r in self._records.values()]

    def get_record(self, record_id: str) -> Optional[DnsRecord]:
        with self._lock:
            record = self._records.get(record_id)
            return DnsRecord.from_dict(record.to_dict()) if record else None

    def find_records_by_content(self, content: str) -> List[DnsRecord]:
        return [record for record in self.list_records() if record.content == content]

    def update_record(self, zone_id: str, record_id: str, data: Dict) -> Dict:
        """Update an existing DNS record."""
        return self.provider.update_record(zone_id, record_id, data)

    def set_cached_content(self, record_id: str, content: str) -> None:
        """Reflect a successful update in the cached listing."""
        with self._lock:
            record = self._records.get(record_id)
            if record is not None:
                record.content = content

    def close(self) -> None:
        self.provider.close()
