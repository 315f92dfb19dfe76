"""
Progress reporting for migration jobs.
"""

from .exceptions import JobNotFound
from .job_store import JobStore
from .models import MigrationJob, MigrationProgress


def progress_percentage(resolved: int, total: int) -> int:
    """Percentage of resolved records, rounded half up."""
    if total <= 0:
        return 0
    return (200 * resolved + total) // (2 * total)


def build_progress(job: MigrationJob) -> MigrationProgress:
    completed = job.completed_records or 0
    failed = job.failed_records or 0
    return MigrationProgress(
        job_id=job.id,
        total_records=job.total_records,
        completed_records=completed,
        failed_records=failed,
        processing_records=job.total_records - completed - failed,
        status=job.status,
        progress_percentage=progress_percentage(completed + failed, job.total_records),
    )


class ProgressReader:
    """Read-only view over job counters, safe to poll while a job runs."""

    def __init__(self, store: JobStore):
        self.store = store

    def get_progress(self, job_id: str) -> MigrationProgress:
        job = self.store.get_job(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return build_progress(job)
