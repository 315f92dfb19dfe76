"""
Core DNS migration functionality.

This package contains the migration engine, its job store and the record,
backup and domain helpers built around it.
"""

from .backup_manager import BackupManager
from .dns_manager import DNSManager
from .domain_tester import DomainTester
from .job_store import InMemoryJobStore, JobStore
from .migration_engine import MigrationEngine
from .progress import ProgressReader
from .record_manager import RecordManager

__all__ = [
    "BackupManager",
    "DNSManager",
    "DomainTester",
    "InMemoryJobStore",
    "JobStore",
    "MigrationEngine",
    "ProgressReader",
    "RecordManager",
]
