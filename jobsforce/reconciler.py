"""Reconciler: merges candidate batches into the listing store without duplicates."""

import enum
import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from jobsforce.errors import DuplicateKeyConflict, ValidationError
from jobsforce.jobs.models import CandidateJob
from jobsforce.storage.listing_store import ListingStore

logger = logging.getLogger("jobsforce.reconciler")


class Outcome(enum.Enum):
    ADDED = "added"
    UPDATED = "updated"
    CONFLICT = "conflict"
    INVALID = "invalid"
    FAILED = "failed"

    @property
    def is_error(self) -> bool:
        return self not in (Outcome.ADDED, Outcome.UPDATED)


@dataclass
class ItemOutcome:
    candidate: CandidateJob
    outcome: Outcome
    listing_id: Optional[int] = None
    error: Optional[Exception] = None


@dataclass
class ReconcileResult:
    items: list[ItemOutcome] = field(default_factory=list)

    def _tally(self, *outcomes: Outcome) -> int:
        return sum(1 for item in self.items if item.outcome in outcomes)

    @property
    def added(self) -> int:
        return self._tally(Outcome.ADDED)

    @property
    def updated(self) -> int:
        return self._tally(Outcome.UPDATED)

    @property
    def errors(self) -> int:
        return sum(1 for item in self.items if item.outcome.is_error)

    @property
    def total(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        return {
            "added": self.added,
            "updated": self.updated,
            "errors": self.errors,
            "total": self.total,
        }


class Reconciler:
    def __init__(self, store: ListingStore):
        self.store = store

    def reconcile(self, candidates: list[CandidateJob]) -> ReconcileResult:
        """Merge candidates in input order. Per-item failures are counted, never raised."""
        result = ReconcileResult()
        for candidate in candidates:
            result.items.append(self._reconcile_one(candidate))

        logger.info(
            "Reconciled %d candidates: %d added, %d updated, %d errors",
            result.total, result.added, result.updated, result.errors,
        )
        return result

    def _reconcile_one(self, candidate: CandidateJob) -> ItemOutcome:
        try:
            existing = self.store.find_match(candidate)
            if existing is not None:
                listing = self.store.refresh(existing.id, candidate)
                if listing is not None:
                    return ItemOutcome(candidate, Outcome.UPDATED, listing_id=listing.id)
            listing = self.store.insert(candidate)
            return ItemOutcome(candidate, Outcome.ADDED, listing_id=listing.id)

        except DuplicateKeyConflict as e:
            # Another sync inserted the same key between our lookup and insert
            logger.warning("Duplicate key on insert of %r: %s", candidate.title, e)
            return ItemOutcome(candidate, Outcome.CONFLICT, error=e)
        except ValidationError as e:
            logger.warning("Skipping invalid job %r: %s", candidate.title, e)
            return ItemOutcome(candidate, Outcome.INVALID, error=e)
        except SQLAlchemyError as e:
            logger.error("Error saving job %r: %s", candidate.title, e)
            return ItemOutcome(candidate, Outcome.FAILED, error=e)
