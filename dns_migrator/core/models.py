"""
Data models for DNS migrations.

This module defines the records shared between the directory client, the job
store and the migration engine.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

ACTIVITY_LOG_LIMIT = 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobState(str, Enum):
    """Lifecycle of a migration job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)

    def can_transition_to(self, target: "JobState") -> bool:
        return target in _JOB_TRANSITIONS[self]


class RecordState(str, Enum):
    """Lifecycle of a single record inside a migration job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RecordState.COMPLETED, RecordState.FAILED)

    def can_transition_to(self, target: "RecordState") -> bool:
        return target in _RECORD_TRANSITIONS[self]


# A job that cannot start goes straight from pending to failed.
_JOB_TRANSITIONS = {
    JobState.PENDING: {JobState.RUNNING, JobState.FAILED},
    JobState.RUNNING: {JobState.COMPLETED, JobState.FAILED},
    JobState.COMPLETED: set(),
    JobState.FAILED: set(),
}

_RECORD_TRANSITIONS = {
    RecordState.PENDING: {RecordState.PROCESSING},
    RecordState.PROCESSING: {RecordState.COMPLETED, RecordState.FAILED},
    RecordState.COMPLETED: set(),
    RecordState.FAILED: set(),
}


class ActivityType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Zone:
    id: str
    name: str
    status: str
    account_id: Optional[str] = None


@dataclass
class DnsRecord:
    """Last known copy of a record on the provider."""

    id: str
    zone_id: str
    zone_name: str
    name: str
    type: str
    content: str
    ttl: int
    proxied: bool = False
    locked: bool = False

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "DnsRecord":
        return cls(
            id=data["id"],
            zone_id=data["zone_id"],
            zone_name=data["zone_name"],
            name=data["name"],
            type=data["type"],
            content=data["content"],
            ttl=int(data["ttl"]),
            proxied=bool(data.get("proxied", False)),
            locked=bool(data.get("locked", False)),
        )

    def update_payload(self, content: str) -> Dict:
        """Body for a provider update call that only changes the content."""
        return {
            "type": self.type,
            "name": self.name,
            "content": content,
            "ttl": self.ttl,
            "proxied": self.proxied,
        }


@dataclass
class MigrationJob:
    id: str
    old_value: str
    new_value: str
    total_records: int
    completed_records: int = 0
    failed_records: int = 0
    status: JobState = JobState.PENDING
    created_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None


@dataclass
class RecordStatus:
    id: str
    job_id: str
    record_id: str
    status: RecordState = RecordState.PENDING
    error_message: Optional[str] = None
    updated_at: datetime = field(default_factory=utc_now)

    @staticmethod
    def make_id(job_id: str, record_id: str) -> str:
        return f"{job_id}-{record_id}"


@dataclass
class ActivityLogEntry:
    id: str
    timestamp: datetime
    type: ActivityType
    message: str
    details: Optional[str] = None


@dataclass
class Backup:
    id: str
    name: str
    record_count: int
    data: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class MigrationProgress:
    job_id: str
    total_records: int
    completed_records: int
    failed_records: int
    processing_records: int
    status: JobState
    progress_percentage: int


@dataclass
class DomainTestResult:
    domain: str
    status: Optional[int] = None
    current_ip: Optional[str] = None
    error: Optional[str] = None
