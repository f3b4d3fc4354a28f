"""ML scoring service client: fetches skill-matched candidate jobs."""

import logging
import math
import time
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Optional

import requests

from jobsforce.config import MlServiceConfig
from jobsforce.errors import UpstreamMalformed, UpstreamTimeout, UpstreamUnavailable
from jobsforce.jobs.models import CandidateJob
from jobsforce.models.job_listing import DEFAULT_JOB_TYPE, JOB_TYPES
from jobsforce.utils.http_client import create_session
from jobsforce.utils.text_processing import parse_skill_list, slugify

logger = logging.getLogger("jobsforce.jobs.ml_client")

DEFAULT_SOURCE = "ml-service"
MATCH_ENDPOINT = "/job-match"

# Epoch values above this are taken to be milliseconds
_EPOCH_MS_THRESHOLD = 100_000_000_000


def coerce_match_score(value) -> float:
    """Parse a score into [0, 1]; anything unparseable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(score):
        return 0.0
    return max(0.0, min(1.0, score))


def parse_timestamp(value, default: Optional[datetime] = None) -> datetime:
    """Parse ISO-8601 strings or epoch numbers into an aware UTC datetime."""
    fallback = default or datetime.now(timezone.utc)
    parsed: Optional[datetime] = None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > _EPOCH_MS_THRESHOLD else value
        try:
            parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            parsed = None
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None

    if parsed is None:
        return fallback
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_job_type(value) -> str:
    """Map a job type onto the canonical spelling; unknown values pass through."""
    if not value:
        return DEFAULT_JOB_TYPE
    text = str(value).strip()
    for job_type in JOB_TYPES:
        if text.lower() == job_type.lower():
            return job_type
    return text


def generate_source_id(source: str, title: str) -> str:
    """Fallback identity for upstream entries that carry no id of their own."""
    millis = int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:5]
    return f"{source}-{slugify(title)}-{millis}-{suffix}"


def _text(item: dict, key: str, default: str) -> str:
    value = item.get(key)
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def parse_candidate(item: dict, requested_skills: Sequence[str]) -> CandidateJob:
    """Normalize a single ML-service job into a CandidateJob."""
    now = datetime.now(timezone.utc)

    title = _text(item, "title", "Unknown Position")
    source = _text(item, "source", DEFAULT_SOURCE)

    source_id = _text(item, "sourceId", "") or _text(item, "_id", "")
    if not source_id:
        source_id = generate_source_id(source, title)

    skills = parse_skill_list(item.get("skills"))
    if skills is None:
        skills = list(requested_skills)

    return CandidateJob(
        title=title,
        company=_text(item, "company", "Unknown Company"),
        location=_text(item, "location", "Remote"),
        description=_text(item, "description", ""),
        source=source,
        source_id=source_id,
        skills=skills,
        job_type=normalize_job_type(item.get("type")),
        salary=_text(item, "salary", ""),
        url=_text(item, "url", ""),
        posted_at=parse_timestamp(item.get("postedAt"), now),
        scraped_at=parse_timestamp(item.get("scrapedAt"), now),
        match_score=coerce_match_score(item.get("matchScore")),
    )


class MlScoreClient:
    """Thin adapter over ``POST {url}/job-match``."""

    def __init__(self, config: MlServiceConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.endpoint = config.url.rstrip("/") + MATCH_ENDPOINT
        self.session = session or create_session(
            max_retries=config.max_retries,
            backoff_factor=config.backoff_factor,
        )

    def fetch_candidates(self, skills: Sequence[str], limit: int) -> list[CandidateJob]:
        """Fetch up to ``limit`` scored candidates for the first N skills.

        Raises UpstreamTimeout / UpstreamUnavailable on transport failures and
        UpstreamMalformed when the body has no jobs list.
        """
        limited_skills = list(skills)[: self.config.max_skills]
        payload = {"skills": limited_skills, "limit": int(limit)}

        logger.info(
            "Requesting %d jobs from ML service for %d skills", payload["limit"], len(limited_skills)
        )
        try:
            response = self.session.post(self.endpoint, json=payload, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            logger.warning("ML service timed out after %.0fs: %s", self.config.timeout, e)
            raise UpstreamTimeout(f"ML service timed out after {self.config.timeout}s") from e
        except requests.RequestException as e:
            logger.warning("ML service request failed: %s", e)
            raise UpstreamUnavailable(f"ML service request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamMalformed("ML service returned a non-JSON body") from e

        jobs = body.get("jobs") if isinstance(body, dict) else None
        if not isinstance(jobs, list):
            raise UpstreamMalformed("ML service response has no jobs collection")

        candidates = []
        for item in jobs:
            if not isinstance(item, dict):
                logger.warning("Skipping non-object job entry from ML service: %r", item)
                continue
            candidates.append(parse_candidate(item, limited_skills))

        logger.info("Received %d candidates from ML service", len(candidates))
        return candidates
