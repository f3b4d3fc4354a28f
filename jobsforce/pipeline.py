"""Sync pipeline: one fetch-then-reconcile cycle against the ML service."""

import logging
import time
from collections.abc import Sequence

from jobsforce.errors import UpstreamError
from jobsforce.reconciler import Reconciler

logger = logging.getLogger("jobsforce.pipeline")


def _failure(error: str) -> dict:
    return {"success": False, "error": error, "added": 0, "updated": 0, "errors": 0, "total": 0}


def sync_jobs(score_client, reconciler: Reconciler, skills: Sequence[str], limit: int) -> dict:
    """Fetch scored candidates for ``skills`` and merge them into the store.

    Never raises for upstream problems: the returned dict carries
    ``success`` plus added/updated/errors/total counts, or ``error``.
    """
    if not skills:
        logger.info("No skills provided for job sync")
        return _failure("No skills provided")

    start = time.time()
    logger.info("Syncing up to %d jobs for %d skills", limit, len(skills))

    try:
        candidates = score_client.fetch_candidates(skills, limit)
    except UpstreamError as e:
        logger.error("Job sync failed talking to ML service: %s", e)
        return _failure(str(e))

    if not candidates:
        logger.info("No jobs returned from ML service")
        return _failure("No jobs returned from ML service")

    result = reconciler.reconcile(candidates)
    logger.info(
        "Sync complete in %.2fs: %d added, %d updated, %d errors",
        time.time() - start, result.added, result.updated, result.errors,
    )
    return {"success": True, **result.to_dict()}


def sync_now(services, skills: Sequence[str], limit: int) -> dict:
    """Manual trigger: one reconciliation cycle on demand."""
    return sync_jobs(services.score_client, services.reconciler, skills, limit)
