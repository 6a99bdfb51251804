"""Result types for import, pick, and confirm."""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum

from smsbook.domain import Contact


class ImportResult(Enum):
    """What importing one card did to the submitter's contacts."""

    ADDED = "added"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    DEFERRED = "deferred"


@dataclass
class ImportStats:
    """Tally of one card batch: outcome counts plus distinct failure messages."""

    added: int = 0
    updated: int = 0
    unchanged: int = 0
    deferred: int = 0
    failed: int = 0
    errors: Counter = field(default_factory=Counter)

    def add_result(self, result: ImportResult) -> None:
        if result is ImportResult.ADDED:
            self.added += 1
        elif result is ImportResult.UPDATED:
            self.updated += 1
        elif result is ImportResult.UNCHANGED:
            self.unchanged += 1
        elif result is ImportResult.DEFERRED:
            self.deferred += 1

    def add_error(self, message: str) -> None:
        self.errors[message] += 1
        self.failed += 1


# --- pick ---


@dataclass(frozen=True)
class Picked:
    """A pick token that resolved and was stored."""

    name: str
    number: str


@dataclass(frozen=True)
class TokenError:
    """A pick or confirm token that was rejected. The batch carries on."""

    token: str
    reason: str


@dataclass(frozen=True)
class PickOutcome:
    """Per-token results of one pick message."""

    picked: tuple[Picked, ...] = ()
    failed: tuple[TokenError, ...] = ()


@dataclass(frozen=True)
class NothingPending:
    """The submitter had no deferred contacts (none made, or all expired)."""


# --- delete / confirm ---


@dataclass(frozen=True)
class DeletionCandidates:
    """Contacts matching a delete search, in the order their ordinals refer to."""

    query: str
    contacts: tuple[Contact, ...]


@dataclass(frozen=True)
class Deleted:
    """Contacts removed by a confirm, plus the tokens that were rejected."""

    contacts: tuple[Contact, ...]
    errors: tuple[TokenError, ...] = ()


@dataclass(frozen=True)
class NoValidSelections:
    """No confirm token resolved; nothing was touched in the store."""

    errors: tuple[TokenError, ...] = ()
