"""Error kinds raised by the core and its adapters."""


class SmsBookError(Exception):
    """Base for all smsbook errors."""


class ValidationError(SmsBookError):
    """Malformed user input. Always answered with a corrective reply."""


class PrerequisiteError(SmsBookError):
    """The action needs prior setup (e.g. importing before naming yourself)."""


class NotFoundError(SmsBookError):
    """A referenced token, ordinal, or contact is absent or expired."""


class StoreError(SmsBookError):
    """The persistence layer failed. Logged in full, never shown to the sender."""


class DecodeError(SmsBookError):
    """A contact card could not be decoded."""


class UnrecognizedCommand(ValidationError):
    """The leading word of a message is not a command."""

    def __init__(self, word: str) -> None:
        super().__init__(f"Unrecognized command word: {word!r}")
        self.word = word


class InvalidPhoneNumber(ValidationError):
    """A raw string could not be canonicalized to a phone number."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Invalid phone number: {raw!r}")
        self.raw = raw
