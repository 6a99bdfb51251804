"""Contact card import with deduplication against the submitter's existing contacts."""

import logging
from collections.abc import Callable, Iterable

from smsbook.application.dto import ImportResult, ImportStats
from smsbook.application.ports import ContactStore
from smsbook.application.workflow_state import WorkflowState
from smsbook.domain import (
    ContactCard,
    DecodeError,
    PhoneNumber,
    PrerequisiteError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Internal error"


class ImportService:
    """Decides, per card, whether to add, update, skip, or defer a contact."""

    def __init__(
        self,
        store: ContactStore,
        workflow: WorkflowState,
        canonicalize: Callable[[str], PhoneNumber],
    ) -> None:
        self._store = store
        self._workflow = workflow
        self._canonicalize = canonicalize

    def import_card(self, submitter: str, card: ContactCard) -> ImportResult:
        """Import one card for submitter.

        Raises PrerequisiteError if the submitter has not set a name yet,
        ValidationError if the card has no name or no usable number, and
        StoreError if the store fails.
        """
        if self._store.find_user(submitter) is None:
            raise PrerequisiteError(
                "Please set your name first using the 'name' command before adding contacts"
            )

        fn = card.first("FN")
        name = fn.value if fn is not None else None
        if not name:
            raise ValidationError("No name provided")

        numbers = self._card_numbers(card)
        if not numbers:
            raise ValidationError("No valid phone numbers provided")

        existing = self._store.contacts_for_dedup(submitter)
        new_numbers: list[tuple[str, str | None]] = []
        updated = False
        for number, description in numbers:
            if number in existing:
                if existing[number] != name:
                    self._store.update_contact_name(submitter, number, name)
                    existing[number] = name
                    updated = True
            elif all(number != n for n, _ in new_numbers):
                new_numbers.append((number, description))

        if not new_numbers:
            return ImportResult.UPDATED if updated else ImportResult.UNCHANGED

        if len(new_numbers) > 1:
            self._workflow.defer(submitter, name, new_numbers)
            logger.info(
                "Deferred %s with %d numbers for %s", name, len(new_numbers), submitter
            )
            return ImportResult.DEFERRED

        number, _ = new_numbers[0]
        self.add_contact(submitter, name, number)
        return ImportResult.ADDED

    def import_batch(
        self, submitter: str, cards: Iterable[ContactCard | DecodeError]
    ) -> ImportStats:
        """Import every card, counting outcomes. One bad card does not stop the rest."""
        stats = ImportStats()
        for card in cards:
            if isinstance(card, DecodeError):
                stats.add_error(str(card))
                continue
            try:
                stats.add_result(self.import_card(submitter, card))
            except (ValidationError, PrerequisiteError) as e:
                stats.add_error(str(e))
            except StoreError:
                logger.exception("Store failure importing a card for %s", submitter)
                stats.add_error(GENERIC_FAILURE)
        logger.info(
            "Import for %s: %d added, %d updated, %d unchanged, %d deferred, %d failed",
            submitter,
            stats.added,
            stats.updated,
            stats.unchanged,
            stats.deferred,
            stats.failed,
        )
        return stats

    def add_contact(self, submitter: str, name: str, number: str) -> None:
        """Insert a contact atomically, creating the target user first if needed."""
        with self._store.transaction() as tx:
            tx.insert_user(number, name)
            tx.insert_contact(submitter, name, number)
        logger.info("Added contact %s (%s) for %s", name, number, submitter)

    def _card_numbers(self, card: ContactCard) -> list[tuple[str, str | None]]:
        numbers = []
        for prop in card.all("TEL"):
            if not prop.value:
                continue
            try:
                canonical = self._canonicalize(prop.value)
            except ValidationError:
                continue
            numbers.append((str(canonical), prop.param("TYPE")))
        return numbers


def format_import_report(stats: ImportStats, deferred) -> str:
    """Render a batch summary, followed by the pending pick list when anything was deferred."""
    report = (
        f"Processed contacts: {stats.added} added, {stats.updated} updated, "
        f"{stats.unchanged} unchanged, {stats.deferred} deferred, {stats.failed} failed"
    )
    if stats.errors:
        report += "\nErrors encountered:"
        for error, count in stats.errors.items():
            report += f"\n- {count} × {error}"
    if stats.deferred and deferred:
        report += (
            "\n\nThe following contacts have multiple numbers. "
            'Reply with "pick NA, MB, ..." '
            "where N and M are from the list of contacts below "
            "and A and B are the letters for the desired phone numbers for each.\n"
        )
        for i, contact in enumerate(deferred, start=1):
            report += f"\n{i}. {contact.name}"
            for j, (number, description) in enumerate(contact.numbers):
                letter = chr(ord("a") + j)
                report += f"\n   {letter}. {number} ({description or 'no description'})"
    return report
