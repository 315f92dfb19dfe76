#!/usr/bin/env python3
"""
Test suite for the in-memory job store
"""

import threading
import unittest

from dns_migrator.core.exceptions import InvalidTransition, JobNotFound, RecordNotFound
from dns_migrator.core.job_store import InMemoryJobStore
from dns_migrator.core.models import ActivityType, JobState, RecordState, RecordStatus


class TestJobs(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryJobStore()
        self.job = self.store.create_job("203.0.113.10", "198.51.100.20", 3)

    def test_create_job(self):
        job = self.store.get_job(self.job.id)

        self.assertEqual(job.status, JobState.PENDING)
        self.assertEqual(job.total_records, 3)
        self.assertEqual(job.completed_records, 0)
        self.assertEqual(job.failed_records, 0)
        self.assertIsNotNone(job.created_at)
        self.assertIsNone(job.completed_at)

    def test_get_unknown_job(self):
        self.assertIsNone(self.store.get_job("missing"))
        with self.assertRaises(JobNotFound):
            self.store.update_job_status("missing", JobState.RUNNING)

    def test_returned_job_is_a_copy(self):
        job = self.store.get_job(self.job.id)
        job.completed_records = 99

        self.assertEqual(self.store.get_job(self.job.id).completed_records, 0)

    def test_status_lifecycle(self):
        self.store.update_job_status(self.job.id, JobState.RUNNING)
        self.assertIsNone(self.store.get_job(self.job.id).completed_at)

        self.store.update_job_status(self.job.id, JobState.COMPLETED)
        job = self.store.get_job(self.job.id)
        self.assertEqual(job.status, JobState.COMPLETED)
        self.assertIsNotNone(job.completed_at)

    def test_pending_job_can_fail_directly(self):
        self.store.update_job_status(self.job.id, JobState.FAILED)

        self.assertIsNotNone(self.store.get_job(self.job.id).completed_at)

    def test_invalid_status_transitions(self):
        with self.assertRaises(InvalidTransition):
            self.store.update_job_status(self.job.id, JobState.COMPLETED)

        self.store.update_job_status(self.job.id, JobState.FAILED)
        for target in (JobState.PENDING, JobState.RUNNING, JobState.COMPLETED):
            with self.subTest(target=target):
                with self.assertRaises(InvalidTransition):
                    self.store.update_job_status(self.job.id, target)

    def test_progress_must_not_decrease(self):
        self.store.update_job_status(self.job.id, JobState.RUNNING)
        self.store.update_job_progress(self.job.id, 2, 0)

        with self.assertRaises(InvalidTransition):
            self.store.update_job_progress(self.job.id, 1, 0)

    def test_progress_bounded_by_total(self):
        self.store.update_job_status(self.job.id, JobState.RUNNING)

        with self.assertRaises(InvalidTransition):
            self.store.update_job_progress(self.job.id, 2, 2)


class TestRecordStatuses(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryJobStore()
        self.job = self.store.create_job("203.0.113.10", "198.51.100.20", 2)
        self.store.update_job_status(self.job.id, JobState.RUNNING)
        self.store.save_record_statuses(
            RecordStatus(
                id=RecordStatus.make_id(self.job.id, record_id),
                job_id=self.job.id,
                record_id=record_id,
            )
            for record_id in ("rec-1", "rec-2")
        )

    def status_id(self, record_id):
        return RecordStatus.make_id(self.job.id, record_id)

    def test_composite_id(self):
        self.assertEqual(RecordStatus.make_id("job", "rec"), "job-rec")

    def test_statuses_filtered_by_job(self):
        other = self.store.create_job("a", "b", 1)
        self.store.save_record_statuses(
            [RecordStatus(id=RecordStatus.make_id(other.id, "x"), job_id=other.id, record_id="x")]
        )

        records = [s.record_id for s in self.store.get_record_statuses(self.job.id)]
        self.assertEqual(records, ["rec-1", "rec-2"])

    def test_record_outcome_updates_status_and_counter_together(self):
        self.store.update_record_status(self.status_id("rec-1"), RecordState.PROCESSING)
        job = self.store.record_outcome(self.job.id, "rec-1", RecordState.COMPLETED)

        self.assertEqual(job.completed_records, 1)
        status = self.store.get_record_statuses(self.job.id)[0]
        self.assertEqual(status.status, RecordState.COMPLETED)
        self.assertIsNone(status.error_message)

        self.store.update_record_status(self.status_id("rec-2"), RecordState.PROCESSING)
        job = self.store.record_outcome(
            self.job.id, "rec-2", RecordState.FAILED, "Cloudflare API error: 403 Forbidden"
        )
        self.assertEqual(job.failed_records, 1)
        status = self.store.get_record_statuses(self.job.id)[1]
        self.assertEqual(status.error_message, "Cloudflare API error: 403 Forbidden")

    def test_failed_status_always_has_message(self):
        self.store.update_record_status(self.status_id("rec-1"), RecordState.PROCESSING)
        self.store.update_record_status(self.status_id("rec-1"), RecordState.FAILED)

        status = self.store.get_record_statuses(self.job.id)[0]
        self.assertEqual(status.error_message, "Unknown error")

    def test_record_cannot_skip_processing(self):
        with self.assertRaises(InvalidTransition):
            self.store.record_outcome(self.job.id, "rec-1", RecordState.COMPLETED)
        self.assertEqual(self.store.get_job(self.job.id).completed_records, 0)

    def test_record_cannot_revert(self):
        self.store.update_record_status(self.status_id("rec-1"), RecordState.PROCESSING)
        self.store.record_outcome(self.job.id, "rec-1", RecordState.COMPLETED)

        for target in (RecordState.PENDING, RecordState.PROCESSING, RecordState.FAILED):
            with self.subTest(target=target):
                with self.assertRaises(InvalidTransition):
                    self.store.update_record_status(self.status_id("rec-1"), target)

    def test_outcome_must_be_terminal(self):
        with self.assertRaises(InvalidTransition):
            self.store.record_outcome(self.job.id, "rec-1", RecordState.PROCESSING)

    def test_unknown_record_status(self):
        with self.assertRaises(RecordNotFound):
            self.store.update_record_status("missing", RecordState.PROCESSING)


class TestActivityLog(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryJobStore()

    def test_newest_first(self):
        self.store.add_activity_log_entry(ActivityType.INFO, "first")
        self.store.add_activity_log_entry(ActivityType.SUCCESS, "second", "details")

        log = self.store.get_activity_log()
        self.assertEqual([entry.message for entry in log], ["second", "first"])
        self.assertEqual(log[0].details, "details")
        self.assertIsNone(log[1].details)

    def test_eviction_keeps_most_recent_hundred(self):
        for i in range(101):
            self.store.add_activity_log_entry(ActivityType.INFO, f"entry {i}")

        log = self.store.get_activity_log(150)
        self.assertEqual(len(log), 100)
        self.assertEqual(log[0].message, "entry 100")
        self.assertEqual(log[-1].message, "entry 1")

    def test_default_limit(self):
        for i in range(60):
            self.store.add_activity_log_entry(ActivityType.INFO, f"entry {i}")

        self.assertEqual(len(self.store.get_activity_log()), 50)

    def test_negative_limit_returns_nothing(self):
        for i in range(3):
            self.store.add_activity_log_entry(ActivityType.INFO, f"entry {i}")

        self.assertEqual(self.store.get_activity_log(-1), [])
        self.assertEqual(self.store.get_activity_log(0), [])

    def test_clear(self):
        self.store.add_activity_log_entry(ActivityType.ERROR, "boom")
        self.store.clear_activity_log()

        self.assertEqual(self.store.get_activity_log(), [])

    def test_concurrent_writers(self):
        def write(prefix):
            for i in range(50):
                self.store.add_activity_log_entry(ActivityType.INFO, f"{prefix}-{i}")

        threads = [threading.Thread(target=write, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(self.store.get_activity_log(500)), 100)


class TestBackups(unittest.TestCase):
    def test_backups_newest_first(self):
        store = InMemoryJobStore()
        first = store.create_backup("first", 1, "[]")
        second = store.create_backup("second", 2, "[]")

        self.assertEqual([b.id for b in store.get_backups()], [second.id, first.id])
        self.assertEqual(store.get_backup(first.id).name, "first")
        self.assertIsNone(store.get_backup("missing"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
