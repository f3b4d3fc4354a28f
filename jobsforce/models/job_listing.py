"""Job listing model: the deduplicated store of jobs pulled from the ML service."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Index, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

JOB_TYPES = ("Full-time", "Part-time", "Contract", "Freelance", "Internship")
DEFAULT_JOB_TYPE = "Full-time"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    # SQLite hands back naive datetimes; everything we write is UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class JobListing(Base):
    __tablename__ = "job_listings"
    __table_args__ = (
        UniqueConstraint("source", "source_id", name="uq_listing_source"),
        Index("ix_listing_title_company", "title", "company"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    skills: Mapped[list] = mapped_column(JSON, default=list)
    job_type: Mapped[str] = mapped_column("type", String(20), default=DEFAULT_JOB_TYPE)
    salary: Mapped[str | None] = mapped_column(String(255), nullable=True)
    url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    source: Mapped[str] = mapped_column(String(100), nullable=False)
    source_id: Mapped[str] = mapped_column(String(255), nullable=False)

    posted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    match_score: Mapped[float] = mapped_column(Float, default=0.0, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def to_dict(self) -> dict:
        """Serialize with the external (camelCase) field names."""
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "description": self.description,
            "skills": list(self.skills or []),
            "type": self.job_type,
            "salary": self.salary,
            "url": self.url,
            "source": self.source,
            "sourceId": self.source_id,
            "postedAt": _isoformat(self.posted_at),
            "scrapedAt": _isoformat(self.scraped_at),
            "matchScore": self.match_score,
            "createdAt": _isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<JobListing {self.source}/{self.source_id} {self.title!r} @ {self.company!r}>"
