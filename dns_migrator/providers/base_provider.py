"""
Base DNS provider interface.

This module defines the abstract base class that all DNS providers must implement.
"""

from abc import ABC, abstractmethod
from typing import Dict, List

from ..core.models import DnsRecord, Zone


class DNSProvider(ABC):
    """Abstract base class for DNS providers."""

    name = "base"

    @abstractmethod
    def has_credentials(self) -> bool:
        """Whether the provider has what it needs to call the remote API."""
        pass

    @abstractmethod
    def verify_credentials(self) -> Dict:
        """Call the provider to check that the credentials are accepted."""
        pass

    @abstractmethod
    def list_zones(self) -> List[Zone]:
        """Get all zones visible to the account."""
        pass

    @abstractmethod
    def list_records(self, zone: Zone) -> List[DnsRecord]:
        """Get all DNS records for a zone."""
        pass

    @abstractmethod
    def update_record(self, zone_id: str, record_id: str, data: Dict) -> Dict:
        """Update an existing DNS record."""
        pass

    def close(self) -> None:
        """Release any network resources held by the provider."""
