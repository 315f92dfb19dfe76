"""
Migration Engine - Bulk rewrite of DNS record contents

This module drives a batch of records from an old value to a new value. Jobs
are submitted without blocking the caller; a worker thread then processes the
records one by one in the submitted order, recording every state change in
the job store so progress can be polled at any time.

A record that cannot be updated is marked failed and the batch carries on.
A job only ends in the failed state when it could not start at all.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Optional

from ..providers.dns_client import DNSClient
from .exceptions import InvalidRequest, RecordNotFound
from .job_store import JobStore
from .models import (
    ActivityType,
    DnsRecord,
    JobState,
    MigrationProgress,
    RecordState,
    RecordStatus,
)
from .progress import ProgressReader

logger = logging.getLogger(__name__)


class MigrationEngine:
    """Creates migration jobs and runs them in the background."""

    def __init__(
        self, dns_client: DNSClient, store: JobStore, verify_old_value: bool = False
    ):
        self.dns_client = dns_client
        self.store = store
        self.verify_old_value = verify_old_value
        self.progress_reader = ProgressReader(store)
        self._workers: Dict[str, threading.Thread] = {}
        self._record_locks: Dict[str, list] = {}
        self._guard = threading.Lock()

    def start_migration(
        self, old_value: str, new_value: str, record_ids: Iterable[str]
    ) -> str:
        """
        Create a migration job and start processing it in the background.

        Args:
            old_value: Value the records are moving away from
            new_value: Value written into every record
            record_ids: Ids of the records to rewrite, in processing order

        Returns:
            The id of the new job
        """
        # Duplicates would collide on the per-record status id.
        record_ids = list(dict.fromkeys(record_ids or []))
        if not record_ids:
            raise InvalidRequest("At least one record id is required")
        if not old_value or not new_value:
            raise InvalidRequest("Both an old and a new value are required")

        job = self.store.create_job(old_value, new_value, len(record_ids))
        self.store.save_record_statuses(
            RecordStatus(
                id=RecordStatus.make_id(job.id, record_id),
                job_id=job.id,
                record_id=record_id,
            )
            for record_id in record_ids
        )
        self.store.add_activity_log_entry(
            ActivityType.INFO,
            f"Starting migration for {len(record_ids)} DNS records",
            f"{old_value} → {new_value}",
        )
        logger.info(
            f"Starting migration job {job.id}: {len(record_ids)} records, "
            f"{old_value} -> {new_value}"
        )

        worker = threading.Thread(
            target=self._process_migration,
            args=(job.id, record_ids, old_value, new_value),
            name=f"migration-{job.id}",
            daemon=True,
        )
        with self._guard:
            self._workers[job.id] = worker
        worker.start()
        return job.id

    def get_progress(self, job_id: str) -> MigrationProgress:
        return self.progress_reader.get_progress(job_id)

    def wait(self, job_id: str, timeout: Optional[float] = None) -> bool:
        """Block until the job's worker exits. Returns False on timeout."""
        with self._guard:
            worker = self._workers.get(job_id)
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def _process_migration(self, job_id, record_ids, old_value, new_value):
        try:
            self.dns_client.ensure_ready()
            self.store.update_job_status(job_id, JobState.RUNNING)

            for record_id in record_ids:
                self._process_record(job_id, record_id, old_value, new_value)

            self.store.update_job_status(job_id, JobState.COMPLETED)
        except Exception as e:
            self._fail_job(job_id, e)
        else:
            job = self.store.get_job(job_id)
            self.store.add_activity_log_entry(
                ActivityType.SUCCESS,
                f"Migration completed: {job.completed_records} success, "
                f"{job.failed_records} failed",
            )
            logger.info(
                f"Migration job {job_id} completed: {job.completed_records} "
                f"success, {job.failed_records} failed"
            )
        finally:
            # Every store write is done; wait() treats a missing worker as finished.
            with self._guard:
                self._workers.pop(job_id, None)

    def _process_record(self, job_id, record_id, old_value, new_value):
        self.store.update_record_status(
            RecordStatus.make_id(job_id, record_id), RecordState.PROCESSING
        )

        try:
            with self._record_lock(record_id):
                record = self._migrate_record(record_id, old_value, new_value)
        except Exception as e:
            error = str(e) or "Unknown error"
            logger.error(f"Failed to update DNS record {record_id}: {error}")
            self.store.record_outcome(job_id, record_id, RecordState.FAILED, error)
            self.store.add_activity_log_entry(
                ActivityType.ERROR, f"Failed to update DNS record: {error}", record_id
            )
        else:
            self.store.record_outcome(job_id, record_id, RecordState.COMPLETED)
            self.store.add_activity_log_entry(
                ActivityType.SUCCESS,
                f"Updated DNS record for {record.name}",
                f"{old_value} → {new_value}",
            )
            logger.info(f"Updated record {record.name}: {old_value} -> {new_value}")

    def _migrate_record(self, record_id, old_value, new_value) -> DnsRecord:
        record = self.dns_client.get_record(record_id)
        if record is None:
            raise RecordNotFound(record_id)

        if record.content != old_value:
            if self.verify_old_value:
                raise InvalidRequest(
                    f"Record content '{record.content}' does not match '{old_value}'"
                )
            logger.warning(
                f"Record {record.name} holds '{record.content}', not '{old_value}'; "
                "updating anyway"
            )

        self.dns_client.update_record(
            record.zone_id, record.id, record.update_payload(new_value)
        )
        self.dns_client.set_cached_content(record.id, new_value)
        return record

    @contextmanager
    def _record_lock(self, record_id):
        # Serialises jobs that touch the same record. Entries live only while
        # some job holds or waits for the lock.
        with self._guard:
            entry = self._record_locks.setdefault(record_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._record_locks[record_id]

    def _fail_job(self, job_id, error):
        message = str(error) or "Unknown error"
        logger.error(f"Migration job {job_id} failed: {message}")
        job = self.store.get_job(job_id)
        if job is not None and not job.status.is_terminal:
            self.store.update_job_status(job_id, JobState.FAILED)
        self.store.add_activity_log_entry(
            ActivityType.ERROR, f"Migration failed: {message}"
        )
