from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..schemas import ALL_STATUSES, Job, JobIn, JobStats
from .. import storage

router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_store(db: Session = Depends(get_db)) -> storage.KeyValueStore:
    return storage.SqlKeyValueStore(db)


def _require_job(store: storage.KeyValueStore, job_id: str) -> Job:
    job = storage.find_job(store, job_id)
    if not job:
        raise NotFoundError("job not found")
    return job


@router.get("", response_model=List[Job])
def list_jobs(status: Optional[str] = None, search: str = "", store=Depends(get_store)):
    """Tracked jobs, newest first, optionally filtered by status and title/company search"""
    if status and status != "all" and status not in ALL_STATUSES:
        raise ValidationError(f"Unknown status '{status}'")
    return storage.filter_jobs(storage.get_jobs(store), status, search)


@router.get("/stats", response_model=JobStats)
def job_stats(store=Depends(get_store)):
    jobs = storage.get_jobs(store)
    return JobStats(total=len(jobs), counts=storage.status_counts(jobs))


@router.get("/{job_id}", response_model=Job)
def get_job(job_id: str, store=Depends(get_store)):
    return _require_job(store, job_id)


@router.post("", response_model=Job)
def create_job(body: JobIn, store=Depends(get_store)):
    ts = storage.now_iso()
    job = Job(id=storage.generate_id(), createdAt=ts, updatedAt=ts, **body.model_dump())
    storage.add_job(store, job)
    return job


@router.put("/{job_id}", response_model=Job)
def update_job(job_id: str, body: JobIn, store=Depends(get_store)):
    existing = _require_job(store, job_id)
    updated = Job(id=job_id, createdAt=existing.createdAt, updatedAt=existing.updatedAt, **body.model_dump())
    jobs = storage.update_job(store, updated)
    return next(j for j in jobs if j.id == job_id)


@router.delete("/{job_id}")
def delete_job(job_id: str, store=Depends(get_store)):
    _require_job(store, job_id)
    remaining = storage.delete_job(store, job_id)
    return {"ok": True, "remaining": len(remaining)}
