"""
Key-value persistence for tracked jobs and the stored resume.

Values are plain JSON under fixed keys; the backend only has to offer
get/set/delete by key, so the SQL table can be swapped for anything else.
"""
import json
import random
import string
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from .models import KVEntry
from .schemas import ALL_STATUSES, Job, StoredResume

JOBS_KEY = "job-tracker-jobs"
RESUME_KEY = "job-tracker-resume"

_ID_ALPHABET = string.digits + string.ascii_lowercase


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


class SqlKeyValueStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        entry = self.db.get(KVEntry, key)
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        entry = self.db.get(KVEntry, key)
        if entry:
            entry.value = value
        else:
            self.db.add(KVEntry(key=key, value=value))
        self.db.commit()

    def delete(self, key: str) -> None:
        entry = self.db.get(KVEntry, key)
        if entry:
            self.db.delete(entry)
            self.db.commit()


class MemoryKeyValueStore:
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def generate_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=7))
    return f"job-{int(time.time() * 1000)}-{suffix}"


# ----- Jobs -----

def get_jobs(store: KeyValueStore) -> List[Job]:
    data = store.get(JOBS_KEY)
    return [Job.model_validate(j) for j in json.loads(data)] if data else []


def save_jobs(store: KeyValueStore, jobs: List[Job]) -> None:
    store.set(JOBS_KEY, json.dumps([j.model_dump() for j in jobs]))


def add_job(store: KeyValueStore, job: Job) -> List[Job]:
    """Insert newest-first."""
    jobs = get_jobs(store)
    jobs.insert(0, job)
    save_jobs(store, jobs)
    return jobs


def update_job(store: KeyValueStore, updated: Job) -> List[Job]:
    """Replace the job with the same id and stamp updatedAt; unknown ids are a no-op."""
    jobs = get_jobs(store)
    for i, j in enumerate(jobs):
        if j.id == updated.id:
            jobs[i] = updated.model_copy(update={"updatedAt": now_iso()})
            save_jobs(store, jobs)
            break
    return jobs


def delete_job(store: KeyValueStore, job_id: str) -> List[Job]:
    jobs = [j for j in get_jobs(store) if j.id != job_id]
    save_jobs(store, jobs)
    return jobs


def find_job(store: KeyValueStore, job_id: str) -> Optional[Job]:
    return next((j for j in get_jobs(store) if j.id == job_id), None)


def filter_jobs(jobs: List[Job], status: Optional[str] = None, search: str = "") -> List[Job]:
    """Status match (None/"all" keeps everything) and title/company substring search."""
    needle = (search or "").lower()
    return [
        j for j in jobs
        if (not status or status == "all" or j.status == status)
        and (not needle or needle in j.title.lower() or needle in j.company.lower())
    ]


def status_counts(jobs: List[Job]) -> Dict[str, int]:
    return {s: sum(1 for j in jobs if j.status == s) for s in ALL_STATUSES}


# ----- Resume -----

def get_stored_resume(store: KeyValueStore) -> Optional[StoredResume]:
    data = store.get(RESUME_KEY)
    return StoredResume.model_validate_json(data) if data else None


def save_resume(store: KeyValueStore, resume: StoredResume) -> None:
    store.set(RESUME_KEY, resume.model_dump_json())


def delete_resume(store: KeyValueStore) -> None:
    store.delete(RESUME_KEY)
