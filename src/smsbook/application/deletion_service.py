"""Delete and confirm: two-step removal of contacts found by name.

Ordinals handed out by delete are only meaningful against the latest search
the sender ran: a new search replaces every earlier token of that sender.
"""

import logging
from collections.abc import Callable

from smsbook.application.dto import (
    DeletionCandidates,
    Deleted,
    NoValidSelections,
    TokenError,
)
from smsbook.application.ports import ContactStore
from smsbook.application.workflow_state import WorkflowState
from smsbook.domain import Contact, PhoneNumber, ValidationError

logger = logging.getLogger(__name__)


class DeletionService:
    """Records search results as pending deletions and applies confirmations atomically."""

    def __init__(self, store: ContactStore, workflow: WorkflowState) -> None:
        self._store = store
        self._workflow = workflow

    def search(self, submitter: str, name: str) -> DeletionCandidates:
        """Find contacts by name and remember them under submitter:1, submitter:2, ..."""
        contacts = self._store.find_contacts(submitter, name)
        self._workflow.record_deletions(submitter, [c.id for c in contacts])
        return DeletionCandidates(query=name, contacts=tuple(contacts))

    def confirm(self, submitter: str, selections: str) -> Deleted | NoValidSelections:
        """Delete the contacts behind the given ordinals in one transaction.

        Rejected tokens are reported alongside the deletions. If the
        transaction fails nothing is deleted and the StoreError propagates.
        """
        parsed = [
            (token, _ordinal(token)) for token in (t.strip() for t in selections.split(","))
        ]
        found = self._workflow.lookup_deletions(
            submitter, [o for _, o in parsed if o is not None]
        )

        # Errors keep the order the tokens were typed in.
        errors: list[TokenError] = []
        seen: set[int] = set()
        ids: list[str] = []
        for token, ordinal in parsed:
            if ordinal is None:
                errors.append(TokenError(token, f"Invalid number: {token}"))
                continue
            if ordinal in seen:
                continue
            seen.add(ordinal)
            contact_id = found.get(ordinal)
            if contact_id is None:
                errors.append(TokenError(token, f"Invalid selection: {ordinal}"))
            elif contact_id not in ids:
                ids.append(contact_id)

        if not ids:
            return NoValidSelections(errors=tuple(errors))

        contacts = []
        for contact_id in ids:
            contact = self._store.find_contact_by_id(contact_id)
            if contact is not None:
                contacts.append(contact)

        with self._store.transaction() as tx:
            for contact_id in ids:
                tx.delete_contact(contact_id)

        self._workflow.forget_deleted(ids)
        logger.info("Deleted %d contacts for %s", len(ids), submitter)
        return Deleted(contacts=tuple(contacts), errors=tuple(errors))


def _ordinal(token: str) -> int | None:
    if token.isascii() and token.isdigit() and int(token) > 0:
        return int(token)
    return None


def contact_line(contact: Contact, canonicalize: Callable[[str], PhoneNumber]) -> str:
    """Name with the area code of the number, e.g. "Bob (555)"."""
    try:
        area_code = canonicalize(contact.contact_user_number).area_code
    except ValidationError:
        area_code = "???"
    return f"{contact.contact_name} ({area_code})"


def format_candidates(
    candidates: DeletionCandidates, canonicalize: Callable[[str], PhoneNumber]
) -> str:
    if not candidates.contacts:
        return f'No contacts found matching "{candidates.query}".'
    listing = "\n".join(
        f"{i}. {contact_line(c, canonicalize)}"
        for i, c in enumerate(candidates.contacts, start=1)
    )
    return (
        f'Found these contacts matching "{candidates.query}":\n{listing}\n\n'
        'To delete contacts, reply "confirm NUM1, NUM2, ...", '
        "where NUM1, NUM2, etc. are numbers from the list above."
    )


def format_confirm_reply(
    outcome: Deleted | NoValidSelections, canonicalize: Callable[[str], PhoneNumber]
) -> str:
    if isinstance(outcome, NoValidSelections):
        if not outcome.errors:
            return "No valid selections provided."
        return "Errors:\n" + "\n".join(e.reason for e in outcome.errors)
    count = len(outcome.contacts)
    reply = f"Deleted {count} contact{'' if count == 1 else 's'}:"
    for contact in outcome.contacts:
        reply += f"\n• {contact_line(contact, canonicalize)}"
    if outcome.errors:
        reply += "\n\nErrors:\n" + "\n".join(e.reason for e in outcome.errors)
    return reply
