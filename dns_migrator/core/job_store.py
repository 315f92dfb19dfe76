"""
Job Store - Persistence boundary for migration state

This module defines the operations the migration engine needs to persist jobs,
per-record statuses, the activity log and backups, together with a thread-safe
in-memory implementation.
"""

import copy
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, List, Optional

from .exceptions import InvalidTransition, JobNotFound, RecordNotFound
from .models import (
    ACTIVITY_LOG_LIMIT,
    ActivityLogEntry,
    ActivityType,
    Backup,
    JobState,
    MigrationJob,
    RecordState,
    RecordStatus,
    utc_now,
)

logger = logging.getLogger(__name__)


class JobStore(ABC):
    """Abstract base class for migration state storage."""

    @abstractmethod
    def create_job(self, old_value: str, new_value: str, total_records: int) -> MigrationJob:
        """Create a pending job with zeroed counters."""
        pass

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[MigrationJob]:
        """Return a copy of the job, or None if it does not exist."""
        pass

    @abstractmethod
    def update_job_progress(self, job_id: str, completed: int, failed: int) -> None:
        """Overwrite the job counters."""
        pass

    @abstractmethod
    def update_job_status(self, job_id: str, status: JobState) -> None:
        """Move the job along its lifecycle."""
        pass

    @abstractmethod
    def save_record_statuses(self, statuses: Iterable[RecordStatus]) -> None:
        pass

    @abstractmethod
    def get_record_statuses(self, job_id: str) -> List[RecordStatus]:
        pass

    @abstractmethod
    def update_record_status(
        self, status_id: str, status: RecordState, error_message: Optional[str] = None
    ) -> None:
        pass

    @abstractmethod
    def record_outcome(
        self,
        job_id: str,
        record_id: str,
        status: RecordState,
        error_message: Optional[str] = None,
    ) -> MigrationJob:
        """Resolve one record and bump the matching job counter in a single write."""
        pass

    @abstractmethod
    def add_activity_log_entry(
        self, entry_type: ActivityType, message: str, details: Optional[str] = None
    ) -> ActivityLogEntry:
        pass

    @abstractmethod
    def get_activity_log(self, limit: int = 50) -> List[ActivityLogEntry]:
        """Return the newest entries first."""
        pass

    @abstractmethod
    def clear_activity_log(self) -> None:
        pass

    @abstractmethod
    def create_backup(self, name: str, record_count: int, data: str) -> Backup:
        pass

    @abstractmethod
    def get_backups(self) -> List[Backup]:
        """Return all backups, newest first."""
        pass

    @abstractmethod
    def get_backup(self, backup_id: str) -> Optional[Backup]:
        pass


class InMemoryJobStore(JobStore):
    """Job store kept in process memory.

    Every operation runs under a single re-entrant lock and hands out copies,
    so pollers can read while a migration worker is writing.
    """

    def __init__(self, activity_log_limit: int = ACTIVITY_LOG_LIMIT):
        self._lock = threading.RLock()
        self._jobs = {}
        self._record_statuses = {}
        self._backups = {}
        self._activity_log = deque(maxlen=activity_log_limit)

    # Jobs

    def create_job(self, old_value: str, new_value: str, total_records: int) -> MigrationJob:
        job = MigrationJob(
            id=str(uuid.uuid4()),
            old_value=old_value,
            new_value=new_value,
            total_records=total_records,
        )
        with self._lock:
            self._jobs[job.id] = job
            logger.debug(f"Created migration job {job.id} for {total_records} records")
            return copy.copy(job)

    def get_job(self, job_id: str) -> Optional[MigrationJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return copy.copy(job) if job else None

    def update_job_progress(self, job_id: str, completed: int, failed: int) -> None:
        with self._lock:
            job = self._get_job(job_id)
            if job.status.is_terminal:
                raise InvalidTransition(
                    f"Job {job_id} is {job.status.value}; counters are frozen"
                )
            if completed < job.completed_records or failed < job.failed_records:
                raise InvalidTransition(f"Job {job_id} counters cannot decrease")
            if completed + failed > job.total_records:
                raise InvalidTransition(
                    f"Job {job_id} counters exceed {job.total_records} records"
                )
            job.completed_records = completed
            job.failed_records = failed

    def update_job_status(self, job_id: str, status: JobState) -> None:
        status = JobState(status)
        with self._lock:
            job = self._get_job(job_id)
            if not job.status.can_transition_to(status):
                raise InvalidTransition(
                    f"Job {job_id} cannot move from {job.status.value} to {status.value}"
                )
            job.status = status
            if status.is_terminal:
                job.completed_at = utc_now()
            logger.debug(f"Job {job_id} is now {status.value}")

    def _get_job(self, job_id: str) -> MigrationJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    # Record statuses

    def save_record_statuses(self, statuses: Iterable[RecordStatus]) -> None:
        with self._lock:
            for status in statuses:
                self._record_statuses[status.id] = copy.copy(status)

    def get_record_statuses(self, job_id: str) -> List[RecordStatus]:
        with self._lock:
            return [
                copy.copy(status)
                for status in self._record_statuses.values()
                if status.job_id == job_id
            ]

    def update_record_status(
        self, status_id: str, status: RecordState, error_message: Optional[str] = None
    ) -> None:
        with self._lock:
            self._transition_record(status_id, RecordState(status), error_message)

    def record_outcome(
        self,
        job_id: str,
        record_id: str,
        status: RecordState,
        error_message: Optional[str] = None,
    ) -> MigrationJob:
        status = RecordState(status)
        if not status.is_terminal:
            raise InvalidTransition(f"{status.value} is not a record outcome")

        with self._lock:
            job = self._get_job(job_id)
            if job.status.is_terminal:
                raise InvalidTransition(
                    f"Job {job_id} is {job.status.value}; counters are frozen"
                )
            self._transition_record(
                RecordStatus.make_id(job_id, record_id), status, error_message
            )
            if status == RecordState.COMPLETED:
                job.completed_records += 1
            else:
                job.failed_records += 1
            return copy.copy(job)

    def _transition_record(
        self, status_id: str, status: RecordState, error_message: Optional[str]
    ) -> None:
        record_status = self._record_statuses.get(status_id)
        if record_status is None:
            raise RecordNotFound(status_id)
        if not record_status.status.can_transition_to(status):
            raise InvalidTransition(
                f"Record {status_id} cannot move from "
                f"{record_status.status.value} to {status.value}"
            )
        record_status.status = status
        if status == RecordState.FAILED:
            record_status.error_message = error_message or "Unknown error"
        else:
            record_status.error_message = None
        record_status.updated_at = utc_now()

    # Activity log

    def add_activity_log_entry(
        self, entry_type: ActivityType, message: str, details: Optional[str] = None
    ) -> ActivityLogEntry:
        entry = ActivityLogEntry(
            id=str(uuid.uuid4()),
            timestamp=utc_now(),
            type=ActivityType(entry_type),
            message=message,
            details=details,
        )
        with self._lock:
            self._activity_log.appendleft(entry)
        return copy.copy(entry)

    def get_activity_log(self, limit: int = 50) -> List[ActivityLogEntry]:
        with self._lock:
            return [
                copy.copy(entry) for entry in list(self._activity_log)[:max(limit, 0)]
            ]

    def clear_activity_log(self) -> None:
        with self._lock:
            self._activity_log.clear()

    # Backups

    def create_backup(self, name: str, record_count: int, data: str) -> Backup:
        backup = Backup(
            id=str(uuid.uuid4()), name=name, record_count=record_count, data=data
        )
        with self._lock:
            self._backups[backup.id] = backup
            return copy.copy(backup)

    def get_backups(self) -> List[Backup]:
        with self._lock:
            return [copy.copy(backup) for backup in reversed(list(self._backups.values()))]

    def get_backup(self, backup_id: str) -> Optional[Backup]:
        with self._lock:
            backup = self._backups.get(backup_id)
            return copy.copy(backup) if backup else None
