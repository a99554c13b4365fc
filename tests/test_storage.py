import re

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jobtracker import storage
from jobtracker.db import Base
from jobtracker.schemas import ALL_STATUSES, Job, StoredResume


def make_job(job_id, title="Engineer", company="Acme", status="saved"):
    return Job(
        id=job_id, url=f"https://jobs.example.com/{job_id}", title=title, company=company,
        status=status, createdAt="2024-01-01T00:00:00Z", updatedAt="2024-01-01T00:00:00Z",
    )


@pytest.fixture
def memory_store():
    return storage.MemoryKeyValueStore()


@pytest.fixture
def sql_store(tmp_path):
    import jobtracker.models  # noqa: F401

    engine = create_engine(f"sqlite:///{tmp_path / 'kv.db'}")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    yield storage.SqlKeyValueStore(session)
    session.close()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


def test_kv_get_set_delete(store):
    assert store.get("k") is None
    store.set("k", "1")
    store.set("k", "2")
    assert store.get("k") == "2"
    store.delete("k")
    assert store.get("k") is None
    store.delete("k")


def test_jobs_empty_by_default(store):
    assert storage.get_jobs(store) == []


def test_add_job_is_newest_first(store):
    storage.add_job(store, make_job("a"))
    jobs = storage.add_job(store, make_job("b"))
    assert [j.id for j in jobs] == ["b", "a"]
    assert [j.id for j in storage.get_jobs(store)] == ["b", "a"]


def test_update_job_replaces_and_stamps(store):
    storage.add_job(store, make_job("a"))
    storage.add_job(store, make_job("b"))

    changed = make_job("a", status="applied")
    jobs = storage.update_job(store, changed)

    updated = storage.find_job(store, "a")
    assert updated.status == "applied"
    assert updated.updatedAt != "2024-01-01T00:00:00Z"
    assert updated.createdAt == "2024-01-01T00:00:00Z"
    assert [j.id for j in jobs] == ["b", "a"]


def test_update_unknown_job_is_noop(store):
    storage.add_job(store, make_job("a"))
    jobs = storage.update_job(store, make_job("zzz", status="offer"))
    assert [j.id for j in jobs] == ["a"]
    assert storage.find_job(store, "zzz") is None


def test_delete_job(store):
    storage.add_job(store, make_job("a"))
    storage.add_job(store, make_job("b"))
    assert [j.id for j in storage.delete_job(store, "a")] == ["b"]
    assert [j.id for j in storage.delete_job(store, "missing")] == ["b"]


def test_jobs_are_plain_json(memory_store):
    storage.add_job(memory_store, make_job("a"))
    raw = memory_store.get(storage.JOBS_KEY)
    assert raw.startswith("[{") and '"id": "a"' in raw


def test_generate_id_format():
    ids = {storage.generate_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(re.fullmatch(r"job-\d{13}-[0-9a-z]{7}", i) for i in ids)


def test_filter_jobs():
    jobs = [
        make_job("1", title="Backend Engineer", company="Acme", status="applied"),
        make_job("2", title="Data Scientist", company="Globex", status="saved"),
        make_job("3", title="SRE", company="Acme Robotics", status="saved"),
    ]
    assert [j.id for j in storage.filter_jobs(jobs)] == ["1", "2", "3"]
    assert [j.id for j in storage.filter_jobs(jobs, "all")] == ["1", "2", "3"]
    assert [j.id for j in storage.filter_jobs(jobs, "saved")] == ["2", "3"]
    assert [j.id for j in storage.filter_jobs(jobs, search="ACME")] == ["1", "3"]
    assert [j.id for j in storage.filter_jobs(jobs, "saved", "acme")] == ["3"]
    assert [j.id for j in storage.filter_jobs(jobs, search="scient")] == ["2"]
    assert storage.filter_jobs(jobs, "offer") == []


def test_status_counts():
    jobs = [make_job("1", status="applied"), make_job("2"), make_job("3")]
    counts = storage.status_counts(jobs)
    assert set(counts) == set(ALL_STATUSES)
    assert counts["saved"] == 2 and counts["applied"] == 1 and counts["offer"] == 0


def test_stored_resume_roundtrip(store):
    assert storage.get_stored_resume(store) is None
    first = StoredResume(fileName="a.pdf", text="old", uploadedAt="2024-01-01T00:00:00Z")
    second = StoredResume(fileName="b.pdf", text="new", uploadedAt="2024-02-01T00:00:00Z")
    storage.save_resume(store, first)
    storage.save_resume(store, second)
    assert storage.get_stored_resume(store) == second
    storage.delete_resume(store)
    assert storage.get_stored_resume(store) is None
