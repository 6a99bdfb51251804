"""Pick: resolve a sender's choices among the numbers of deferred contacts."""

import logging

from smsbook.application.dto import NothingPending, PickOutcome, Picked, TokenError
from smsbook.application.import_service import ImportService
from smsbook.application.workflow_state import WorkflowState
from smsbook.domain import DeferredContact, NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)


class SelectionService:
    """Turns "pick 1a, 2b" into stored contacts, one token at a time."""

    def __init__(self, workflow: WorkflowState, importer: ImportService) -> None:
        self._workflow = workflow
        self._importer = importer

    def pick(self, submitter: str, selections: str) -> PickOutcome | NothingPending:
        """Apply every token in selections, then clear the submitter's deferred list.

        Bad tokens and failed inserts are collected, never fatal. The list is
        cleared even when some tokens failed: a pick always consumes the batch.
        """
        deferred = self._workflow.deferred_for(submitter)
        if not deferred:
            return NothingPending()

        picked: list[Picked] = []
        failed: list[TokenError] = []
        for token in (t.strip() for t in selections.split(",")):
            try:
                result = _resolve(token, deferred)
            except (ValidationError, NotFoundError) as e:
                failed.append(TokenError(token=token, reason=str(e)))
                continue
            try:
                self._importer.add_contact(submitter, result.name, result.number)
            except StoreError:
                logger.exception(
                    "Failed to add picked contact %s (%s) for %s",
                    result.name,
                    result.number,
                    submitter,
                )
                failed.append(
                    TokenError(
                        token=token,
                        reason=f"Failed to add {result.name} ({result.number})",
                    )
                )
                continue
            picked.append(result)

        self._workflow.clear_deferred(submitter)
        return PickOutcome(picked=tuple(picked), failed=tuple(failed))


def _resolve(token: str, deferred: tuple[DeferredContact, ...]) -> Picked:
    """Map a token like "2b" to the second number of the second deferred contact."""
    if len(token) < 2:
        raise ValidationError(f"Invalid selection format: {token}")
    ordinal_text, letter = token[:-1], token[-1]
    if not _is_positive_int(ordinal_text):
        raise ValidationError(f"Invalid contact number: {ordinal_text}")
    if not ("a" <= letter <= "z"):
        raise ValidationError(f"Invalid letter selection: {letter}")
    ordinal = int(ordinal_text)
    if ordinal > len(deferred):
        raise NotFoundError(f"Contact number {ordinal} not found")
    contact = deferred[ordinal - 1]
    index = ord(letter) - ord("a")
    if index >= len(contact.numbers):
        raise NotFoundError(f"Number {letter} not found for contact {ordinal}")
    number, _ = contact.numbers[index]
    return Picked(name=contact.name, number=number)


def format_pick_reply(outcome: PickOutcome | NothingPending) -> str:
    if isinstance(outcome, NothingPending):
        return "No pending contacts to pick from."
    parts = []
    if outcome.picked:
        count = len(outcome.picked)
        lines = "".join(f"• {p.name} ({p.number})\n" for p in outcome.picked)
        parts.append(
            f"Successfully added {count} contact{'' if count == 1 else 's'}:\n{lines}"
        )
    if outcome.failed:
        lines = "".join(f"• {e.reason}\n" for e in outcome.failed)
        parts.append(f"Failed to process:\n{lines}")
    return "\n".join(parts).rstrip("\n")


def _is_positive_int(text: str) -> bool:
    return text.isascii() and text.isdigit() and int(text) > 0
