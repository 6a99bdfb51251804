"""Command grammar: the command words a sender can use, and their help text."""

from enum import Enum

from smsbook.domain.errors import UnrecognizedCommand


class Command(Enum):
    """Recognized command words. Declaration order is the help-listing order."""

    # "help" is intercepted by carriers, so help is a single letter.
    H = "h"
    NAME = "name"
    STOP = "stop"
    INFO = "info"
    CONTACTS = "contacts"
    DELETE = "delete"
    CONFIRM = "confirm"
    PICK = "pick"

    @classmethod
    def parse(cls, word: str) -> "Command":
        """Exact, case-sensitive match of a command word."""
        try:
            return cls(word)
        except ValueError:
            raise UnrecognizedCommand(word) from None

    def usage(self) -> str:
        return f'Reply "{_USAGE[self]}"'

    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def example(self) -> str:
        example = _EXAMPLES.get(self)
        return f'\nExample: "{example}"' if example else ""

    def hint(self) -> str:
        return f"{self.usage()} to {self.description()}."

    def details(self) -> str:
        """Long form shown by the info command."""
        return f"{self.usage()}, to {self.description()}.{self.example()}"

    def __str__(self) -> str:
        return f"{self.value}: {self.description()}"


def all_commands() -> tuple[Command, ...]:
    return tuple(Command)


_USAGE = {
    Command.H: "h",
    Command.NAME: "name NAME",
    Command.STOP: "stop",
    Command.INFO: "info COMMAND",
    Command.CONTACTS: "contacts",
    Command.DELETE: "delete NAME",
    Command.CONFIRM: "confirm NUM1, NUM2, ...",
    Command.PICK: "pick NA, MB, ...",
}

_DESCRIPTIONS = {
    Command.H: "see the list of available commands",
    Command.NAME: "set your name",
    Command.STOP: "unsubscribe and delete your contacts",
    Command.INFO: "learn more about a command",
    Command.CONTACTS: "list your contacts",
    Command.DELETE: "find contacts to delete by name",
    Command.CONFIRM: "confirm deletion of contacts found with delete",
    Command.PICK: "choose numbers for imported contacts that have several",
}

_EXAMPLES = {
    Command.NAME: "name Alice Smith",
    Command.INFO: "info delete",
    Command.DELETE: "delete bob",
    Command.CONFIRM: "confirm 1, 3",
    Command.PICK: "pick 1a, 2b",
}
