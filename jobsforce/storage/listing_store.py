"""SQLAlchemy-backed listing store with (source, source_id) deduplication."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from jobsforce.errors import DuplicateKeyConflict, ValidationError
from jobsforce.jobs.filters import ListingFilter
from jobsforce.jobs.models import CandidateJob
from jobsforce.models import JOB_TYPES, JobListing

logger = logging.getLogger("jobsforce.storage")

REQUIRED_TEXT_FIELDS = ("title", "company", "location", "description", "source", "source_id")


def validate_candidate(candidate: CandidateJob) -> None:
    """Raise ValidationError if the candidate cannot be stored as a listing."""
    problems = []
    for name in REQUIRED_TEXT_FIELDS:
        value = getattr(candidate, name, None)
        if not isinstance(value, str) or not value.strip():
            problems.append(f"{name} is required")
    if candidate.job_type not in JOB_TYPES:
        problems.append(f"type {candidate.job_type!r} is not one of {', '.join(JOB_TYPES)}")
    if not 0.0 <= candidate.match_score <= 1.0:
        problems.append(f"matchScore {candidate.match_score} is outside [0, 1]")
    if problems:
        raise ValidationError(problems)


def _filter_clauses(listing_filter: Optional[ListingFilter]) -> list:
    """SQL equivalent of ``ListingFilter.matches``."""
    if listing_filter is None:
        return []

    clauses = []
    if listing_filter.min_match_score > 0:
        clauses.append(JobListing.match_score >= listing_filter.min_match_score)
    if listing_filter.location:
        clauses.append(
            func.lower(JobListing.location).contains(listing_filter.location.lower(), autoescape=True)
        )
    if listing_filter.search_term:
        term = listing_filter.search_term.lower()
        clauses.append(or_(
            func.lower(JobListing.title).contains(term, autoescape=True),
            func.lower(JobListing.company).contains(term, autoescape=True),
            func.lower(JobListing.description).contains(term, autoescape=True),
        ))
    return clauses


class ListingStore:
    """Persistent job listings. Every call uses its own short-lived session."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def count(self, listing_filter: Optional[ListingFilter] = None) -> int:
        with self.session_factory() as db:
            return db.query(func.count(JobListing.id)).filter(
                *_filter_clauses(listing_filter)
            ).scalar() or 0

    def get(self, listing_id: int) -> Optional[JobListing]:
        with self.session_factory() as db:
            return db.get(JobListing, listing_id)

    def find_match(self, candidate: CandidateJob) -> Optional[JobListing]:
        """Existing listing for this candidate, if any.

        Exact (source, source_id) wins. Otherwise fall back to a listing with
        the same title and company that has a non-empty url, which catches a
        posting re-sent under a freshly generated source id.
        """
        with self.session_factory() as db:
            listing = db.query(JobListing).filter(
                JobListing.source == candidate.source,
                JobListing.source_id == candidate.source_id,
            ).first()
            if listing is not None:
                return listing

            return db.query(JobListing).filter(
                JobListing.title == candidate.title,
                JobListing.company == candidate.company,
                JobListing.url.isnot(None),
                JobListing.url != "",
            ).order_by(JobListing.id).first()

    def insert(self, candidate: CandidateJob) -> JobListing:
        """Insert a new listing. Raises ValidationError or DuplicateKeyConflict."""
        validate_candidate(candidate)

        listing = JobListing(
            title=candidate.title,
            company=candidate.company,
            location=candidate.location,
            description=candidate.description,
            skills=list(candidate.skills),
            job_type=candidate.job_type,
            salary=candidate.salary,
            url=candidate.url,
            source=candidate.source,
            source_id=candidate.source_id,
            posted_at=candidate.posted_at,
            scraped_at=candidate.scraped_at,
            match_score=candidate.match_score,
        )
        with self.session_factory() as db:
            db.add(listing)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateKeyConflict(candidate.source, candidate.source_id) from e
        return listing

    def refresh(self, listing_id: int, candidate: CandidateJob) -> Optional[JobListing]:
        """Overwrite only match score, skills and scrape time; posting metadata is immutable."""
        with self.session_factory() as db:
            listing = db.get(JobListing, listing_id)
            if listing is None:
                return None
            listing.match_score = candidate.match_score
            listing.skills = list(candidate.skills)
            listing.scraped_at = datetime.now(timezone.utc)
            db.commit()
            return listing

    def query(
        self,
        listing_filter: Optional[ListingFilter] = None,
        page: int = 1,
        limit: int = 100,
    ) -> tuple[list[JobListing], int]:
        """One page of filtered listings, best match first, plus the filtered total."""
        clauses = _filter_clauses(listing_filter)
        with self.session_factory() as db:
            base = db.query(JobListing).filter(*clauses)
            total = base.count()
            rows = base.order_by(
                JobListing.match_score.desc(),
                JobListing.created_at.desc(),
                JobListing.id.desc(),
            ).offset((page - 1) * limit).limit(limit).all()
        return rows, total

    def browse(
        self,
        search: Optional[str] = None,
        location: Optional[str] = None,
        skills: Optional[list[str]] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[JobListing], int]:
        """Plain listing browser, newest posting first."""
        clauses = _filter_clauses(ListingFilter(location=location, search_term=search))
        if skills:
            # Matches the JSON-encoded element, e.g. '"Python"' inside '["Python", "SQL"]'
            skills_text = cast(JobListing.skills, String)
            clauses.append(or_(*(skills_text.contains(f'"{skill}"', autoescape=True) for skill in skills)))

        with self.session_factory() as db:
            base = db.query(JobListing).filter(*clauses)
            total = base.count()
            rows = base.order_by(
                JobListing.posted_at.desc(), JobListing.id.desc()
            ).offset((page - 1) * limit).limit(limit).all()
        return rows, total

    def get_stats(self) -> dict:
        """Store statistics for the CLI and diagnostics."""
        with self.session_factory() as db:
            total = db.query(func.count(JobListing.id)).scalar() or 0
            newest_scrape = db.query(func.max(JobListing.scraped_at)).scalar()
            avg_score = db.query(func.avg(JobListing.match_score)).scalar()
            rows = db.query(JobListing.source, func.count(JobListing.id)).group_by(JobListing.source).all()

        return {
            "total_listings": total,
            "by_source": {source: count for source, count in rows},
            "newest_scrape": newest_scrape.isoformat() if newest_scrape else None,
            "average_match_score": round(avg_score, 3) if avg_score is not None else None,
        }
