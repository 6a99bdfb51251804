"""In-memory state for the two interactive workflows: deferred picks and pending deletions.

One instance is shared by every request in the process. Each method takes the
lock, copies out or mutates, and releases it; callers never do store I/O while
holding it. Nothing here is persisted: a restart drops every dialogue in flight.
"""

import threading
import time
from collections.abc import Callable, Iterable

from smsbook.domain import DeferredContact, PendingDeletion

# Seconds before a deferred contact or pending deletion expires.
WORKFLOW_TTL = 300.0


def deletion_token(submitter: str, ordinal: int) -> str:
    """Key of a pending deletion: the submitter plus the 1-based search position."""
    return f"{submitter}:{ordinal}"


class WorkflowState:
    """TTL-bounded maps of deferred contacts (per submitter) and pending deletions (per token)."""

    def __init__(
        self,
        *,
        ttl: float = WORKFLOW_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._deferred: dict[str, list[DeferredContact]] = {}
        self._deletions: dict[str, PendingDeletion] = {}

    # --- deferred contacts ---

    def defer(
        self, submitter: str, name: str, numbers: Iterable[tuple[str, str | None]]
    ) -> DeferredContact:
        """Append a card awaiting a pick to the submitter's list."""
        deferred = DeferredContact(
            name=name, numbers=tuple(numbers), created_at=self._clock()
        )
        with self._lock:
            self._evict_deferred()
            self._deferred.setdefault(submitter, []).append(deferred)
        return deferred

    def deferred_for(self, submitter: str) -> tuple[DeferredContact, ...]:
        """Return the submitter's unexpired deferred contacts in arrival order."""
        with self._lock:
            self._evict_deferred()
            return tuple(self._deferred.get(submitter, ()))

    def clear_deferred(self, submitter: str) -> None:
        with self._lock:
            self._deferred.pop(submitter, None)

    def _evict_deferred(self) -> None:
        now = self._clock()
        for submitter in list(self._deferred):
            alive = [
                d for d in self._deferred[submitter] if now - d.created_at <= self._ttl
            ]
            if alive:
                self._deferred[submitter] = alive
            else:
                del self._deferred[submitter]

    # --- pending deletions ---

    def record_deletions(self, submitter: str, contact_ids: Iterable[str]) -> None:
        """Store contact_ids under tokens submitter:1, submitter:2, ...

        The submitter's tokens from any earlier search are dropped first, so only
        the latest results can be confirmed.
        """
        now = self._clock()
        with self._lock:
            self._evict_deletions()
            self._drop_deletions(submitter)
            for ordinal, contact_id in enumerate(contact_ids, start=1):
                self._deletions[deletion_token(submitter, ordinal)] = PendingDeletion(
                    contact_id=contact_id, created_at=now
                )

    def lookup_deletions(self, submitter: str, ordinals: Iterable[int]) -> dict[int, str]:
        """Return ordinal -> contact_id for the ordinals that still have a live token."""
        with self._lock:
            self._evict_deletions()
            found = {}
            for ordinal in ordinals:
                pending = self._deletions.get(deletion_token(submitter, ordinal))
                if pending is not None:
                    found[ordinal] = pending.contact_id
            return found

    def clear_deletions(self, submitter: str) -> None:
        with self._lock:
            self._drop_deletions(submitter)

    def forget_deleted(self, contact_ids: Iterable[str]) -> None:
        """Drop every token, for any submitter, that points at one of contact_ids."""
        gone = set(contact_ids)
        with self._lock:
            for token in [t for t, p in self._deletions.items() if p.contact_id in gone]:
                del self._deletions[token]

    def pending_deletion(self, token: str) -> PendingDeletion | None:
        with self._lock:
            self._evict_deletions()
            return self._deletions.get(token)

    def _drop_deletions(self, submitter: str) -> None:
        prefix = f"{submitter}:"
        for token in [t for t in self._deletions if t.startswith(prefix)]:
            del self._deletions[token]

    def _evict_deletions(self) -> None:
        now = self._clock()
        for token in [
            t for t, p in self._deletions.items() if now - p.created_at > self._ttl
        ]:
            del self._deletions[token]
