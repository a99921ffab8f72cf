"""
Store Tests for the Job Engine.

Both JobStore implementations are checked against the same contract:
- save is an upsert by job_id
- find_by_id raises JobNotFoundError for unknown IDs
- find_all returns jobs in creation order
- returned jobs are snapshots
"""

import sqlite3

import pytest

from src.engine import (
    InMemoryJobStore,
    Job,
    JobNotFoundError,
    JobStatus,
    JobStatusSummary,
    SqliteJobStore,
    StoreError,
)


@pytest.fixture(params=["memory", "sqlite_file", "sqlite_memory"])
def any_store(request, temp_db_path):
    """Each store implementation in turn."""
    if request.param == "memory":
        yield InMemoryJobStore()
    elif request.param == "sqlite_file":
        yield SqliteJobStore(temp_db_path)
    else:
        store = SqliteJobStore(":memory:")
        yield store
        store.close()


class TestStoreContract:
    """Shared JobStore behavior."""

    def test_empty_store(self, any_store):
        assert any_store.find_all() == []

    def test_save_and_find_by_id(self, any_store):
        job = Job.create("build")
        any_store.save(job)

        found = any_store.find_by_id(job.job_id)

        assert found == job
        assert found.status is JobStatus.PENDING

    def test_find_by_id_unknown_raises(self, any_store):
        with pytest.raises(JobNotFoundError) as exc_info:
            any_store.find_by_id("does-not-exist")
        assert exc_info.value.job_id == "does-not-exist"

    def test_save_is_upsert(self, any_store):
        job = Job.create("build")
        any_store.save(job)

        job.transition_to(JobStatus.RUNNING)
        job.record_attempt()
        job.last_error = "first attempt failed"
        any_store.save(job)

        stored = any_store.find_all()
        assert len(stored) == 1
        assert stored[0].status is JobStatus.RUNNING
        assert stored[0].attempts == 1
        assert stored[0].last_error == "first attempt failed"

    def test_find_all_in_creation_order(self, any_store):
        jobs = [Job.create(f"task-{i}") for i in range(5)]
        for job in jobs:
            any_store.save(job)

        # Updating an older job must not move it
        jobs[0].transition_to(JobStatus.RUNNING)
        any_store.save(jobs[0])

        assert [j.job_id for j in any_store.find_all()] == [j.job_id for j in jobs]

    def test_returned_jobs_are_snapshots(self, any_store):
        job = Job.create("build")
        any_store.save(job)

        snapshot = any_store.find_by_id(job.job_id)
        snapshot.transition_to(JobStatus.RUNNING)

        assert any_store.find_by_id(job.job_id).status is JobStatus.PENDING

    def test_saved_job_is_copied(self, any_store):
        job = Job.create("build")
        any_store.save(job)

        job.transition_to(JobStatus.RUNNING)

        assert any_store.find_by_id(job.job_id).status is JobStatus.PENDING


class TestInMemoryJobStore:

    def test_len(self):
        store = InMemoryJobStore()
        store.save(Job.create("a"))
        store.save(Job.create("b"))
        assert len(store) == 2


class TestSqliteJobStore:
    """SQLite-specific behavior."""

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "jobs.db"
        SqliteJobStore(db_path)
        assert db_path.exists()

    def test_data_survives_reopen(self, temp_db_path):
        job = Job.create("build")
        SqliteJobStore(temp_db_path).save(job)

        reopened = SqliteJobStore(temp_db_path)
        assert reopened.find_by_id(job.job_id) == job

    def test_unknown_status_is_skipped_by_summary(self, temp_db_path):
        store = SqliteJobStore(temp_db_path)
        store.save(Job.create("build"))

        conn = sqlite3.connect(temp_db_path)
        conn.execute(
            "INSERT INTO jobs (job_id, task, status, attempts, created_at, updated_at) "
            "VALUES ('legacy', 'old', 'archived', 0, '2026-01-01T00:00:00Z', '2026-01-01T00:00:00Z')"
        )
        conn.commit()
        conn.close()

        jobs = store.find_all()
        assert len(jobs) == 2

        summary = JobStatusSummary.from_jobs(jobs)
        assert summary.pending == 1
        assert summary.total == 1

    def test_sqlite_error_is_wrapped(self, temp_db_path):
        store = SqliteJobStore(temp_db_path)

        conn = sqlite3.connect(temp_db_path)
        conn.execute("DROP TABLE jobs")
        conn.commit()
        conn.close()

        with pytest.raises(StoreError):
            store.find_all()

    def test_unopenable_path_raises_store_error(self, tmp_path):
        # A directory cannot be opened as a database file
        db_dir = tmp_path / "jobs.db"
        db_dir.mkdir()

        with pytest.raises(StoreError):
            SqliteJobStore(db_dir)
