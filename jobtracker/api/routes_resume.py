from typing import Optional
from fastapi import APIRouter, Depends
from ..errors import ValidationError
from ..schemas import StoredResume
from .. import storage
from .routes_jobs import get_store

router = APIRouter(prefix="/resume", tags=["resume"])


@router.get("", response_model=Optional[StoredResume])
def get_resume(store=Depends(get_store)):
    return storage.get_stored_resume(store)


@router.put("", response_model=StoredResume)
def put_resume(body: StoredResume, store=Depends(get_store)):
    """Replace the stored resume (only one is kept)"""
    if not body.text.strip():
        raise ValidationError("Resume text is required")
    storage.save_resume(store, body)
    return body


@router.delete("")
def delete_resume(store=Depends(get_store)):
    storage.delete_resume(store)
    return {"ok": True}
