"""Listing filters shared by the store query and in-memory candidate filtering."""

from dataclasses import dataclass
from typing import Optional

from jobsforce.utils.text_processing import contains_ci


@dataclass
class ListingFilter:
    """minMatchScore / location / searchTerm as accepted by the recommendation query.

    Text filters are case-insensitive literal substrings, never regexes.
    """

    min_match_score: float = 0.0
    location: Optional[str] = None
    search_term: Optional[str] = None

    def matches(self, job) -> bool:
        """Apply the filter to anything with listing attributes (candidate or stored row)."""
        if self.min_match_score > 0 and (job.match_score or 0.0) < self.min_match_score:
            return False
        if self.location and not contains_ci(job.location, self.location):
            return False
        if self.search_term and not (
            contains_ci(job.title, self.search_term)
            or contains_ci(job.company, self.search_term)
            or contains_ci(job.description, self.search_term)
        ):
            return False
        return True

    def apply(self, jobs: list) -> list:
        return [job for job in jobs if self.matches(job)]
