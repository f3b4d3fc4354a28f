"""Recommendation query engine: store-first answers with live ML-service fallback."""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from jobsforce.config import RecommendationConfig
from jobsforce.errors import UpstreamError
from jobsforce.jobs.filters import ListingFilter
from jobsforce.pipeline import sync_jobs

logger = logging.getLogger("jobsforce.recommendations")

NO_SKILLS_MESSAGE = "Add skills to your profile to get job recommendations"
FAILURE_MESSAGE = "Failed to get job recommendations"


@dataclass
class RecommendationQuery:
    page: int = 1
    limit: int = 100
    min_match_score: float = 0.0
    location: Optional[str] = None
    search_term: Optional[str] = None
    refresh: bool = False

    def __post_init__(self):
        self.page = max(1, int(self.page))
        self.limit = max(1, int(self.limit))
        self.min_match_score = float(self.min_match_score or 0.0)

    @property
    def listing_filter(self) -> ListingFilter:
        return ListingFilter(
            min_match_score=self.min_match_score,
            location=self.location or None,
            search_term=self.search_term or None,
        )


@dataclass
class RecommendationResult:
    success: bool
    jobs: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    pages: int = 0
    message: Optional[str] = None
    # "store", "fresh" or None; diagnostics only, not part of the response body
    origin: Optional[str] = None

    def to_dict(self) -> dict:
        body = {
            "success": self.success,
            "jobs": [job.to_dict() for job in self.jobs],
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
        }
        if self.message:
            body["message"] = self.message
        return body


def _pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


class RecommendationEngine:
    def __init__(self, store, score_client, reconciler, writer, config: RecommendationConfig):
        self.store = store
        self.score_client = score_client
        self.reconciler = reconciler
        self.writer = writer
        self.config = config

    def recommend(self, user, query: RecommendationQuery) -> RecommendationResult:
        skills = list(getattr(user, "skills", None) or [])
        if not skills:
            return RecommendationResult(success=True, page=1, message=NO_SKILLS_MESSAGE)

        user_label = getattr(user, "id", "?")
        logger.info(
            "[user:%s] Recommendations page=%d limit=%d refresh=%s",
            user_label, query.page, query.limit, query.refresh,
        )

        if query.refresh or self._store_count() < self.config.low_data_threshold:
            sync_limit = max(query.limit * self.config.sync_limit_multiplier, self.config.min_sync_limit)
            result = sync_jobs(self.score_client, self.reconciler, skills, sync_limit)
            if not result["success"]:
                logger.warning("[user:%s] Pre-query sync failed: %s", user_label, result.get("error"))

        listing_filter = query.listing_filter

        if query.refresh:
            fresh = self._fetch_fresh(skills, query)
            if fresh:
                return self._from_fresh(fresh, listing_filter, query.page, query.limit)

        try:
            jobs, total = self.store.query(listing_filter, page=query.page, limit=query.limit)
        except SQLAlchemyError as e:
            logger.error("[user:%s] Store query failed: %s", user_label, e)
            fresh = self._fetch_fresh(skills, query)
            if fresh:
                return self._from_fresh(fresh, listing_filter, 1, query.limit)
            return RecommendationResult(success=False, page=query.page, message=FAILURE_MESSAGE)

        if len(jobs) < query.limit / 2:
            logger.info(
                "[user:%s] Only %d stored jobs match filters, fetching from ML service",
                user_label, len(jobs),
            )
            fresh = self._fetch_fresh(skills, query)
            if fresh:
                return self._from_fresh(fresh, listing_filter, 1, query.limit)

        return RecommendationResult(
            success=True,
            jobs=jobs,
            total=total,
            page=query.page,
            pages=_pages(total, query.limit),
            origin="store",
        )

    def _store_count(self) -> int:
        try:
            return self.store.count()
        except SQLAlchemyError as e:
            logger.error("Could not count stored listings: %s", e)
            return 0

    def _fetch_fresh(self, skills: list[str], query: RecommendationQuery) -> list:
        """Fetch ``fetch_multiplier × limit`` candidates and queue them for persistence."""
        try:
            candidates = self.score_client.fetch_candidates(
                skills, query.limit * self.config.fetch_multiplier
            )
        except UpstreamError as e:
            logger.error("Error fetching fresh jobs from ML service: %s", e)
            return []

        if candidates:
            self.writer.submit(candidates)
        return candidates

    def _from_fresh(self, candidates: list, listing_filter: ListingFilter, page: int, limit: int) -> RecommendationResult:
        matched = listing_filter.apply(candidates)
        matched.sort(key=lambda job: job.match_score, reverse=True)
        skip = (page - 1) * limit
        return RecommendationResult(
            success=True,
            jobs=matched[skip:skip + limit],
            total=len(matched),
            page=page,
            pages=_pages(len(matched), limit),
            origin="fresh",
        )
