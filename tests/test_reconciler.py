"""Tests for reconciling candidate batches into the listing store."""

import uuid

from sqlalchemy import func

from jobsforce.jobs.models import CandidateJob
from jobsforce.models import JobListing
from jobsforce.reconciler import Outcome


def make_candidate(**kwargs) -> CandidateJob:
    defaults = dict(
        title="Software Engineer",
        company="Acme Inc",
        location="Remote",
        description="Python services",
        source="ml-service",
        source_id=uuid.uuid4().hex,
        skills=["Python"],
        url="",
        match_score=0.5,
    )
    defaults.update(kwargs)
    return CandidateJob(**defaults)


class TestReconcile:
    def test_two_new_one_existing(self, store, reconciler):
        store.insert(make_candidate(source_id="X", title="Existing"))
        before = store.count()

        result = reconciler.reconcile([
            make_candidate(source_id="X", title="Existing", match_score=0.8),
            make_candidate(source_id="Y", title="New One"),
            make_candidate(source_id="Z", title="New Two"),
        ])

        assert result.to_dict() == {"added": 2, "updated": 1, "errors": 0, "total": 3}
        assert store.count() == before + 2

    def test_outcomes_follow_input_order(self, store, reconciler):
        store.insert(make_candidate(source_id="X"))
        result = reconciler.reconcile([
            make_candidate(source_id="Y", title="A"),
            make_candidate(source_id="X"),
        ])
        assert [item.outcome for item in result.items] == [Outcome.ADDED, Outcome.UPDATED]
        assert all(item.listing_id is not None for item in result.items)

    def test_update_preserves_identity(self, store, reconciler):
        original = store.insert(make_candidate(
            source_id="X", title="Backend Engineer", company="Acme", location="Berlin",
            description="Original text", match_score=0.1, skills=["Python"],
        ))
        before = store.get(original.id)

        reconciler.reconcile([make_candidate(
            source_id="X", title="Renamed", company="Other", location="Paris",
            description="Rewritten", match_score=0.95, skills=["Go", "Rust"],
        )])
        after = store.get(original.id)

        assert (after.title, after.company, after.location, after.description) == (
            "Backend Engineer", "Acme", "Berlin", "Original text",
        )
        assert after.posted_at == before.posted_at
        assert after.match_score == 0.95
        assert after.skills == ["Go", "Rust"]
        assert after.scraped_at >= before.scraped_at

    def test_dedup_invariant_over_repeated_runs(self, session_factory, store, reconciler):
        keys = ["a", "b", "c", "d"]
        reconciler.reconcile([make_candidate(source_id=k, title=f"Job {k}") for k in keys[:3]])
        reconciler.reconcile([make_candidate(source_id=k, title=f"Job {k}") for k in keys[1:]])
        reconciler.reconcile([make_candidate(source_id=k, title=f"Job {k}") for k in keys + keys])

        assert store.count() == len(keys)
        with session_factory() as db:
            dupes = db.query(JobListing.source, JobListing.source_id).group_by(
                JobListing.source, JobListing.source_id
            ).having(func.count(JobListing.id) > 1).all()
        assert dupes == []

    def test_duplicates_within_one_batch(self, store, reconciler):
        result = reconciler.reconcile([make_candidate(source_id="X"), make_candidate(source_id="X")])
        assert (result.added, result.updated) == (1, 1)
        assert store.count() == 1

    def test_fallback_match_counts_as_update(self, store, reconciler):
        store.insert(make_candidate(source_id="first", url="https://acme.test/1"))
        result = reconciler.reconcile([make_candidate(source_id="regenerated-id")])
        assert result.updated == 1
        assert store.count() == 1


class TestPerItemFailures:
    def test_insert_race_counted_as_conflict(self, store, reconciler, monkeypatch):
        store.insert(make_candidate(source_id="X"))
        # Simulate another worker inserting X between our lookup and insert
        monkeypatch.setattr(store, "find_match", lambda candidate: None)

        result = reconciler.reconcile([
            make_candidate(source_id="X"),
            make_candidate(source_id="Y", title="Still processed"),
        ])

        assert result.items[0].outcome is Outcome.CONFLICT
        assert result.items[0].error is not None
        assert result.to_dict() == {"added": 1, "updated": 0, "errors": 1, "total": 2}
        assert store.count() == 2

    def test_invalid_candidate_skipped(self, store, reconciler):
        result = reconciler.reconcile([
            make_candidate(job_type="Seasonal"),
            make_candidate(title="Valid"),
        ])
        assert result.items[0].outcome is Outcome.INVALID
        assert (result.added, result.errors) == (1, 1)
        assert store.count() == 1

    def test_empty_batch(self, reconciler):
        assert reconciler.reconcile([]).to_dict() == {"added": 0, "updated": 0, "errors": 0, "total": 0}
