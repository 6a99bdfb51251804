"""Entry point of the core: one inbound message in, one reply text out."""

import logging
from collections.abc import Callable, Iterable

from smsbook.application.deletion_service import (
    DeletionService,
    contact_line,
    format_candidates,
    format_confirm_reply,
)
from smsbook.application.import_service import ImportService, format_import_report
from smsbook.application.ports import ContactStore
from smsbook.application.selection_service import SelectionService, format_pick_reply
from smsbook.application.workflow_state import WorkflowState
from smsbook.domain import (
    Command,
    ContactCard,
    DecodeError,
    PhoneNumber,
    StoreError,
    UnrecognizedCommand,
    ValidationError,
    all_commands,
)
from smsbook.domain.entities import NAME_MAX_LENGTH

logger = logging.getLogger(__name__)

INTERNAL_ERROR_REPLY = "Internal Server Error!"

ONBOARDING_PROMPT = "Greetings! This is smsbook, your contact book over text.\nTo participate:\n"


class Dispatcher:
    """Routes a sender's message to the matching handler and returns the reply.

    Handlers only build text. Store failures are logged and answered with a
    generic error so the sender never sees store details.
    """

    def __init__(
        self,
        store: ContactStore,
        canonicalize: Callable[[str], PhoneNumber],
        *,
        workflow: WorkflowState | None = None,
    ) -> None:
        self._store = store
        self._canonicalize = canonicalize
        self.workflow = workflow if workflow is not None else WorkflowState()
        self.importer = ImportService(store, self.workflow, canonicalize)
        self.selection = SelectionService(self.workflow, self.importer)
        self.deletion = DeletionService(store, self.workflow)
        self._handlers: dict[Command, Callable[[str, list[str]], str]] = {
            Command.H: self._help,
            Command.NAME: self._name,
            Command.STOP: self._stop,
            Command.INFO: self._info,
            Command.CONTACTS: self._contacts,
            Command.DELETE: self._delete,
            Command.CONFIRM: self._confirm,
            Command.PICK: self._pick,
        }

    def handle_text(self, sender: str, body: str) -> str:
        """Interpret a plain text command from sender."""
        logger.debug("Received from %s: %s", sender, body)
        try:
            return self._handle_text(sender, body or "")
        except StoreError:
            logger.exception("Store failure handling message from %s", sender)
            return INTERNAL_ERROR_REPLY

    def handle_card_batch(
        self, sender: str, cards: Iterable[ContactCard | DecodeError]
    ) -> str:
        """Import decoded contact cards shared by sender and summarize the outcome."""
        logger.debug("Received contact cards from %s", sender)
        stats = self.importer.import_batch(sender, cards)
        return format_import_report(stats, self.workflow.deferred_for(sender))

    def _handle_text(self, sender: str, body: str) -> str:
        words = body.split()
        command_word, args = (words[0], words[1:]) if words else (None, [])

        if self._store.find_user(sender) is None:
            return self._onboard(sender, command_word, args)

        if command_word is None:
            return Command.H.hint()
        try:
            command = Command.parse(command_word)
        except UnrecognizedCommand:
            return (
                f'We didn\'t recognize that command word: "{command_word}".\n'
                f"{Command.H.hint()}"
            )
        return self._handlers[command](sender, args)

    def _onboard(self, sender: str, command_word: str | None, args: list[str]) -> str:
        if command_word != Command.NAME.value:
            return ONBOARDING_PROMPT + Command.NAME.hint()
        try:
            name = _validate_name(args)
        except ValidationError as e:
            return str(e)
        self._store.upsert_user_name(sender, name)
        logger.info("New user %s (%s)", sender, name)
        return f"Hello, {name}! {Command.H.hint()}"

    # --- command handlers ---

    def _help(self, sender: str, args: list[str]) -> str:
        listing = "\n".join(f"- {c}" for c in all_commands())
        return f"Available commands:\n{listing}\n\n{Command.INFO.hint()}"

    def _name(self, sender: str, args: list[str]) -> str:
        try:
            name = _validate_name(args)
        except ValidationError as e:
            return str(e)
        self._store.upsert_user_name(sender, name)
        return f'Your name has been updated to "{name}"'

    def _stop(self, sender: str, args: list[str]) -> str:
        self._store.delete_user(sender)
        self.workflow.clear_deferred(sender)
        self.workflow.clear_deletions(sender)
        logger.info("User %s unsubscribed", sender)
        return "You've been unsubscribed. Goodbye!"

    def _info(self, sender: str, args: list[str]) -> str:
        if not args:
            return Command.INFO.hint()
        try:
            return Command.parse(args[0]).details()
        except UnrecognizedCommand:
            return f'Command "{args[0]}" not recognized'

    def _contacts(self, sender: str, args: list[str]) -> str:
        contacts = self._store.list_contacts(sender)
        if not contacts:
            return "You don't have any contacts."
        listing = "\n".join(
            f"{i}. {contact_line(c, self._canonicalize)}"
            for i, c in enumerate(contacts, start=1)
        )
        return f"Your contacts:\n{listing}"

    def _delete(self, sender: str, args: list[str]) -> str:
        name = " ".join(args)
        if not name:
            return Command.DELETE.hint()
        return format_candidates(self.deletion.search(sender, name), self._canonicalize)

    def _confirm(self, sender: str, args: list[str]) -> str:
        selections = " ".join(args)
        if not selections:
            return Command.CONFIRM.hint()
        return format_confirm_reply(
            self.deletion.confirm(sender, selections), self._canonicalize
        )

    def _pick(self, sender: str, args: list[str]) -> str:
        selections = " ".join(args)
        if not selections:
            return Command.PICK.hint()
        return format_pick_reply(self.selection.pick(sender, selections))


def _validate_name(words: list[str]) -> str:
    name = " ".join(words)
    if not name:
        raise ValidationError(Command.NAME.usage())
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"That name is {len(name)} characters long.\n"
            f"Please shorten it to {NAME_MAX_LENGTH} characters or less."
        )
    return name
