"""
DNS Migrator - Bulk migration of DNS record values

Scan every zone of a DNS provider account, find the records that point at an
old address and rewrite them to a new one, with per-record progress, an
activity trail and point-in-time backups.
"""

__version__ = "1.0.0"
__author__ = "DNS Migrator Team"
__description__ = "Bulk migration of DNS record values across provider zones"

from .core.dns_manager import DNSManager
from .core.job_store import InMemoryJobStore, JobStore
from .core.migration_engine import MigrationEngine
from .providers.dns_client import DNSClient

__all__ = [
    "DNSManager",
    "DNSClient",
    "InMemoryJobStore",
    "JobStore",
    "MigrationEngine",
]
