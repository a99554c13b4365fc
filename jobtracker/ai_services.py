"""
AI Services Module for the job tracker
Handles all LLM interactions: job posting extraction and resume tailoring.

Talks to any OpenAI-compatible Chat Completions endpoint over httpx; Groq is
the default vendor.
"""
import os
import re
import json
from typing import Optional, Type, TypeVar
import httpx
from pydantic import BaseModel, ValidationError as SchemaError
import logging

from .errors import ModelRequestError, ModelOutputParseError
from .schemas import JobPosting, JobFields, TailoredContent

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"

EXTRACTION_TEMPERATURE = 0.1
TAILORING_TEMPERATURE = 0.3

EXTRACTION_SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts structured job posting information. "
    "Always respond with valid JSON only."
)
TAILORING_SYSTEM_PROMPT = "You are an expert resume writer. Output only valid JSON."

_FENCE_RX = re.compile(r"```(?:json)?\n?")

M = TypeVar("M", bound=BaseModel)


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences (```json / ```) wrapped around a reply."""
    return _FENCE_RX.sub("", content).strip()


def parse_model_json(content: Optional[str], model_cls: Type[M]) -> M:
    """Parse an LLM reply into `model_cls`.

    The reply is fence-stripped and decoded as JSON, then validated against
    the schema, so a reply with the wrong shape fails here instead of
    somewhere downstream. An empty reply counts as `{}`.
    """
    cleaned = strip_code_fences(content or "") or "{}"
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ModelOutputParseError("Failed to parse LLM response as JSON") from e

    if not isinstance(data, dict):
        raise ModelOutputParseError(
            f"Expected a JSON object from the LLM, got {type(data).__name__}"
        )
    try:
        return model_cls.model_validate(data)
    except SchemaError as e:
        fields = ", ".join(sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()}))
        raise ModelOutputParseError(
            f"LLM response did not match the expected {model_cls.__name__} format (fields: {fields})"
        ) from e


def build_extraction_prompt(text: str, url: str) -> str:
    return f"""Extract job posting details from the following text. Return a JSON object with these fields:
- title: job title
- company: company name
- location: job location (remote, city, etc.)
- description: a 2-3 sentence summary of the role
- requirements: array of key requirements/qualifications (max 8 items)
- salary: salary range if mentioned, otherwise null

Text from {url}:
{text}

Respond with only valid JSON, no markdown formatting."""


def build_tailoring_prompt(resume_text: str, job: JobFields) -> str:
    return f"""You are a professional resume writer. Tailor this resume for the job posting below.

ORIGINAL RESUME:
{resume_text}

JOB POSTING:
Title: {job.title}
Company: {job.company}
Description: {job.description}
Requirements: {', '.join(job.requirements)}

Return a JSON object with:
- summary: A 2-3 sentence professional summary tailored to this role (highlight relevant experience)
- skills: Array of 8-12 relevant skills (prioritize skills mentioned in requirements)
- experience: Array of work experiences, each with:
  - title: job title
  - company: company name
  - duration: time period
  - bullets: Array of 3-4 achievement bullets, reworded to emphasize relevance to the target role
- education: Education section as a single string

Keep all factual information accurate - only reword and emphasize, don't fabricate.
Respond with only valid JSON, no markdown."""


class AIService:
    """LLM client for posting extraction and resume tailoring"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or os.getenv("GROQ_API_KEY")
        self.model = model or os.getenv("DEFAULT_AI_MODEL", DEFAULT_MODEL)
        self.base_url = os.getenv("GROQ_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
        self.timeout = float(os.getenv("LLM_TIMEOUT", "60"))

    async def extract_job_posting(self, text: str, url: str) -> JobPosting:
        """Turn page text from `url` into a JobPosting."""
        prompt = build_extraction_prompt(text, url)
        content = await self._call_llm(
            prompt, system=EXTRACTION_SYSTEM_PROMPT, temperature=EXTRACTION_TEMPERATURE
        )
        return parse_model_json(content, JobPosting)

    async def tailor_resume(self, resume_text: str, job: JobFields) -> TailoredContent:
        """Reword resume content to emphasize relevance to `job`."""
        prompt = build_tailoring_prompt(resume_text, job)
        content = await self._call_llm(
            prompt, system=TAILORING_SYSTEM_PROMPT, temperature=TAILORING_TEMPERATURE
        )
        return parse_model_json(content, TailoredContent)

    async def _call_llm(self, prompt: str, system: str, temperature: float, max_tokens: int = 4000) -> str:
        """Single Chat Completions call; no retries."""
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        logger.info(f"Calling {self.model} (temperature={temperature}, prompt={len(prompt)} chars)")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise ModelRequestError(f"LLM request failed: {e}") from e

        if response.status_code != 200:
            raise ModelRequestError(f"LLM API call failed: {response.status_code} {response.text}")

        try:
            result = response.json()
        except ValueError as e:
            raise ModelRequestError("LLM API returned an unreadable response") from e
        if not isinstance(result, dict):
            raise ModelRequestError("LLM API returned an unreadable response")
        choices = result.get("choices") or [{}]
        return (choices[0].get("message") or {}).get("content") or ""


def get_ai_service(user_api_key: Optional[str] = None, model: Optional[str] = None) -> AIService:
    """Get AI service instance with the given API key or the configured default"""
    return AIService(api_key=user_api_key, model=model)
