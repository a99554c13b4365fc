"""
AI-assisted endpoints: posting extraction, resume PDF parsing and resume tailoring.
Each request is a single pass through its pipeline; failures are reported
to the caller as {"error": "..."} with no retry.
"""
import logging
from typing import Optional
from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response

from .. import ai_services
from ..errors import ConfigurationError, TrackerError, ValidationError
from ..ingest import fetch_page_text
from ..render import content_disposition, render_tailored_resume
from ..resume_parser import extract_pdf_text, is_pdf_filename
from ..schemas import ExtractRequest, JobPosting, ParsedResume, TailorRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ai"])


def _ai_service():
    service = ai_services.get_ai_service()
    if not service.api_key:
        raise ConfigurationError("Groq API key not configured. Add GROQ_API_KEY to .env")
    return service


def _internal_error(e: Exception, fallback: str) -> TrackerError:
    """Wrap an unexpected exception, keeping its text for the caller"""
    logger.exception(f"{fallback}: {e}")
    return TrackerError(str(e) or fallback)


@router.post("/extract", response_model=JobPosting)
async def extract_job(body: ExtractRequest):
    """Fetch a posting URL and extract structured job fields"""
    if not body.url:
        raise ValidationError("URL is required")
    service = _ai_service()
    try:
        text = await fetch_page_text(body.url)
        return await service.extract_job_posting(text, body.url)
    except TrackerError as e:
        logger.error(f"Extraction error for {body.url}: {e}")
        raise
    except Exception as e:
        raise _internal_error(e, "Failed to extract job details") from e


@router.post("/parse-resume", response_model=ParsedResume)
async def parse_resume(file: Optional[UploadFile] = File(None)):
    """Extract plain text from an uploaded PDF resume"""
    if file is None or not file.filename:
        raise ValidationError("No file provided")
    if not is_pdf_filename(file.filename):
        raise ValidationError("File must be a PDF")
    try:
        data = await file.read()
        text = extract_pdf_text(data)
    except TrackerError:
        raise
    except Exception as e:
        raise _internal_error(e, "Failed to parse PDF") from e
    return ParsedResume(text=text, fileName=file.filename)


@router.post("/tailor-resume")
async def tailor_resume(body: TailorRequest):
    """Tailor resume text to a job and return it as a .docx download"""
    if not body.resumeText:
        raise ValidationError("Resume text is required")
    if body.job is None or not body.job.title:
        raise ValidationError("Job details are required")
    service = _ai_service()
    job = body.job
    try:
        tailored = await service.tailor_resume(body.resumeText, job)
        doc = render_tailored_resume(tailored, job.title, job.company)
    except TrackerError as e:
        logger.error(f"Tailor resume error for {job.company} / {job.title}: {e}")
        raise
    except Exception as e:
        raise _internal_error(e, "Failed to tailor resume") from e

    return Response(
        content=doc.content,
        media_type=doc.media_type,
        headers={"Content-Disposition": content_disposition(doc.filename)},
    )
