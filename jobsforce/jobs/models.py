"""Candidate job data model."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from jobsforce.models.job_listing import DEFAULT_JOB_TYPE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CandidateJob:
    """A normalized job returned by the ML service, not yet reconciled."""

    title: str
    company: str
    location: str
    description: str
    source: str
    source_id: str
    skills: list[str] = field(default_factory=list)
    job_type: str = DEFAULT_JOB_TYPE
    salary: str = ""
    url: str = ""
    posted_at: datetime = field(default_factory=_utcnow)
    scraped_at: datetime = field(default_factory=_utcnow)
    match_score: float = 0.0

    @property
    def identity(self) -> tuple[str, str]:
        """The dedup key shared with stored listings."""
        return self.source, self.source_id

    def to_dict(self) -> dict:
        """Same shape as ``JobListing.to_dict`` minus the store-assigned fields."""
        return {
            "id": None,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "description": self.description,
            "skills": list(self.skills),
            "type": self.job_type,
            "salary": self.salary,
            "url": self.url,
            "source": self.source,
            "sourceId": self.source_id,
            "postedAt": self.posted_at.isoformat(),
            "scrapedAt": self.scraped_at.isoformat(),
            "matchScore": self.match_score,
            "createdAt": None,
        }
