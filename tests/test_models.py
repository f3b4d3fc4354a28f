"""Tests for data models."""

from datetime import datetime, timezone

from jobsforce.jobs.models import CandidateJob
from jobsforce.models import JOB_TYPES, JobListing


class TestCandidateJob:
    def test_identity(self):
        job = CandidateJob(
            title="Dev", company="Acme", location="Remote", description="",
            source="ml-service", source_id="abc",
        )
        assert job.identity == ("ml-service", "abc")

    def test_defaults(self):
        job = CandidateJob(
            title="Dev", company="Acme", location="Remote", description="",
            source="ml-service", source_id="abc",
        )
        assert job.job_type == "Full-time"
        assert job.match_score == 0.0
        assert job.skills == []
        assert job.posted_at.tzinfo is not None

    def test_to_dict_matches_listing_shape(self):
        job = CandidateJob(
            title="Dev", company="Acme", location="Remote", description="",
            source="ml-service", source_id="abc", match_score=0.7,
        )
        listing = JobListing(
            title="Dev", company="Acme", location="Remote", description="",
            source="ml-service", source_id="abc", match_score=0.7,
        )
        candidate_dict = job.to_dict()
        assert set(candidate_dict) == set(listing.to_dict())
        assert candidate_dict["id"] is None
        assert candidate_dict["sourceId"] == "abc"


class TestJobListing:
    def test_to_dict_naive_datetime_treated_as_utc(self):
        listing = JobListing(
            title="Dev", company="Acme", location="Remote", description="",
            source="ml-service", source_id="abc",
            posted_at=datetime(2024, 5, 1, 9, 0),
        )
        assert listing.to_dict()["postedAt"] == "2024-05-01T09:00:00+00:00"

    def test_to_dict_aware_datetime(self):
        listing = JobListing(
            title="Dev", company="Acme", location="Remote", description="",
            source="ml-service", source_id="abc",
            posted_at=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        )
        assert listing.to_dict()["postedAt"] == "2024-05-01T09:00:00+00:00"

    def test_job_types(self):
        assert set(JOB_TYPES) == {"Full-time", "Part-time", "Contract", "Freelance", "Internship"}
