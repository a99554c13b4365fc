from pydantic import BaseModel, ConfigDict, field_validator
from typing import Dict, List, Optional, Literal, get_args

JobStatus = Literal["saved", "applied", "interviewing", "offer", "rejected", "withdrawn"]
ALL_STATUSES: List[str] = list(get_args(JobStatus))


# ----- Pipeline records -----
# LLM replies often carry null for absent values; those collapse to the
# empty value of the field instead of failing validation.

class JobPosting(BaseModel):
    """Structured fields extracted from a job posting page"""
    model_config = ConfigDict(frozen=True)

    title: str
    company: str
    location: str = ""
    description: str = ""
    requirements: List[str] = []
    salary: Optional[str] = None

    @field_validator("location", "description", mode="before")
    @classmethod
    def none_as_empty_str(cls, v):
        return "" if v is None else v

    @field_validator("requirements", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return [] if v is None else v

    @field_validator("salary", mode="before")
    @classmethod
    def number_as_str(cls, v):
        # models sometimes answer a bare figure
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class JobFields(BaseModel):
    """The slice of a job record the tailor needs"""
    model_config = ConfigDict(frozen=True)

    title: str = ""
    company: str = ""
    description: str = ""
    requirements: List[str] = []

    @field_validator("title", "company", "description", mode="before")
    @classmethod
    def none_as_empty_str(cls, v):
        return "" if v is None else v

    @field_validator("requirements", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return [] if v is None else v


class ExperienceEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    company: str
    duration: str = ""
    bullets: List[str] = []

    @field_validator("duration", mode="before")
    @classmethod
    def none_as_empty_str(cls, v):
        return "" if v is None else v

    @field_validator("bullets", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return [] if v is None else v


class TailoredContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    skills: List[str]
    experience: List[ExperienceEntry]
    education: str = ""

    @field_validator("education", mode="before")
    @classmethod
    def none_as_empty_str(cls, v):
        return "" if v is None else v


class ParsedResume(BaseModel):
    text: str
    fileName: str


# ----- Tracker records -----

class JobIn(BaseModel):
    url: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    description: str = ""
    requirements: List[str] = []
    salary: Optional[str] = None
    status: JobStatus = "saved"
    notes: str = ""


class Job(JobIn):
    id: str
    createdAt: str
    updatedAt: str


class StoredResume(BaseModel):
    fileName: str
    text: str
    uploadedAt: str


class JobStats(BaseModel):
    total: int
    counts: Dict[str, int]


# ----- Request bodies -----
# Fields are optional so that missing input is reported as a 400, not a 422.

class ExtractRequest(BaseModel):
    url: Optional[str] = None


class TailorRequest(BaseModel):
    resumeText: Optional[str] = None
    job: Optional[JobFields] = None
