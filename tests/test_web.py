"""Tests for the HTTP routes."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from jobsforce.errors import UpstreamUnavailable
from jobsforce.jobs.models import CandidateJob
from jobsforce.web.app import create_app


def make_candidate(**kwargs) -> CandidateJob:
    defaults = dict(
        title="Software Engineer",
        company="Acme Inc",
        location="Remote",
        description="Python APIs",
        source="ml-service",
        source_id=uuid.uuid4().hex,
        skills=["Python"],
        match_score=0.5,
    )
    defaults.update(kwargs)
    return CandidateJob(**defaults)


@pytest.fixture
def client(services):
    # No context manager: the lifespan (scheduler + writer thread) stays off
    return TestClient(create_app(services=services))


@pytest.fixture
def user(services):
    return services.users.create("dev@example.com", name="Dev", skills=["Python", "SQL"])


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "JobsForce API is running"}


class TestRecommendationsRoute:
    def test_returns_page_from_store(self, client, services, user):
        for i in range(25):
            services.store.insert(make_candidate(title=f"Job {i}", match_score=i / 25))

        response = client.get(
            f"/api/users/{user.id}/recommendations", params={"page": 2, "limit": 10}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert (body["total"], body["page"], body["pages"]) == (25, 2, 3)
        assert len(body["jobs"]) == 10
        assert "matchScore" in body["jobs"][0]

    def test_query_params_parsed(self, client, services, user, fake_client):
        for i in range(25):
            services.store.insert(make_candidate(
                title=f"Job {i}", location="Berlin" if i % 5 == 0 else "Remote", match_score=0.8,
            ))

        response = client.get(f"/api/users/{user.id}/recommendations", params={
            "limit": 4, "location": "berlin", "minMatchScore": "0.5",
        })

        body = response.json()
        assert body["total"] == 5
        assert all(job["location"] == "Berlin" for job in body["jobs"])
        assert fake_client.calls == []

    def test_user_without_skills(self, client, services):
        user = services.users.create("new@example.com")
        body = client.get(f"/api/users/{user.id}/recommendations").json()
        assert body["jobs"] == []
        assert body["message"] == "Add skills to your profile to get job recommendations"

    def test_unknown_user(self, client):
        assert client.get("/api/users/999/recommendations").status_code == 404

    def test_bad_page(self, client, user):
        response = client.get(f"/api/users/{user.id}/recommendations", params={"page": "two"})
        assert response.status_code == 400

    def test_total_failure_is_500(self, client, services, user, fake_client, monkeypatch):
        def boom(*args, **kwargs):
            raise SQLAlchemyError("database is locked")

        monkeypatch.setattr(services.store, "query", boom)
        fake_client.error = UpstreamUnavailable("connection refused")

        response = client.get(f"/api/users/{user.id}/recommendations")

        assert response.status_code == 500
        assert response.json()["success"] is False


class TestSyncRoute:
    def test_manual_sync(self, client, services, user, fake_client):
        fake_client.response = [make_candidate(), make_candidate(title="Other")]

        response = client.post(f"/api/users/{user.id}/sync-jobs")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["result"]["added"] == 2
        assert body["message"] == "Job sync completed: Added 2 jobs, updated 0 jobs"
        assert fake_client.calls == [(["Python", "SQL"], 200)]

    def test_user_without_skills(self, client, services, fake_client):
        user = services.users.create("new@example.com")
        response = client.post(f"/api/users/{user.id}/sync-jobs")
        assert response.status_code == 400
        assert fake_client.calls == []


class TestSkillsRoute:
    def test_update_from_list(self, client, services, user):
        response = client.put(f"/api/users/{user.id}/skills", json={"skills": [" Go ", "Rust"]})

        assert response.status_code == 200
        assert response.json()["user"]["skills"] == ["Go", "Rust"]
        assert services.users.get(user.id).skills == ["Go", "Rust"]

    def test_update_from_string(self, client, user):
        response = client.put(f"/api/users/{user.id}/skills", json={"skills": "Python, Docker"})
        assert response.json()["user"]["skills"] == ["Python", "Docker"]

    def test_rejects_non_list(self, client, user):
        response = client.put(f"/api/users/{user.id}/skills", json={"skills": 42})
        assert response.status_code == 400
        assert response.json()["error"] == "Please provide an array of skills"


class TestJobsRoutes:
    def test_browse_newest_first(self, client, services):
        now = datetime.now(timezone.utc)
        services.store.insert(make_candidate(title="Old", posted_at=now - timedelta(days=2)))
        services.store.insert(make_candidate(title="New", posted_at=now))

        body = client.get("/api/jobs").json()

        assert body["success"] is True
        assert body["total"] == 2
        assert body["pagination"] == {"page": 1, "limit": 10, "pages": 1}
        assert [job["title"] for job in body["data"]] == ["New", "Old"]

    def test_browse_filters(self, client, services):
        services.store.insert(make_candidate(title="Go Dev", skills=["Go"], location="Berlin", description="Go services"))
        services.store.insert(make_candidate(title="Py Dev", skills=["Python"], location="Remote"))

        body = client.get("/api/jobs", params={"skills": "Go, Rust"}).json()
        assert [job["title"] for job in body["data"]] == ["Go Dev"]

        body = client.get("/api/jobs", params={"search": "py"}).json()
        assert [job["title"] for job in body["data"]] == ["Py Dev"]

    def test_get_job(self, client, services):
        listing = services.store.insert(make_candidate(source_id="abc"))

        body = client.get(f"/api/jobs/{listing.id}").json()
        assert body["data"]["sourceId"] == "abc"

        assert client.get("/api/jobs/9999").status_code == 404


def test_scheduler_diagnostics(client):
    body = client.get("/api/scheduler").json()
    assert body["running"] is False
    assert body["next_sync"] is None
    assert body["writer"]["running"] is False
