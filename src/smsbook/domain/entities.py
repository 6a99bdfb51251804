"""Domain entities: User, Contact, PhoneNumber, decoded cards, and workflow records."""

from dataclasses import dataclass, field

# Max length for a user's display name.
NAME_MAX_LENGTH = 20


@dataclass(frozen=True)
class PhoneNumber:
    """
    Canonical phone number. e164 is the stored and compared form;
    area_code is the short segment shown to disambiguate contacts.
    """

    e164: str
    area_code: str

    def __str__(self) -> str:
        return self.e164


@dataclass(frozen=True)
class User:
    """A phone number known to the service, with the name it goes by."""

    number: str
    name: str


@dataclass(frozen=True)
class Contact:
    """
    One entry in one user's address book: submitter -> target number.
    contact_name is the name the submitter saved for the target.
    """

    id: str
    submitter_number: str
    contact_name: str
    contact_user_number: str


@dataclass(frozen=True)
class CardProperty:
    """One decoded vCard content line (e.g. FN, TEL) with its parameters."""

    name: str
    value: str | None = None
    params: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def param(self, key: str) -> str | None:
        """First value of a parameter, matched case-insensitively."""
        for name, values in self.params.items():
            if name.upper() == key.upper() and values:
                return values[0]
        return None


@dataclass(frozen=True)
class ContactCard:
    """A decoded contact card: the ordered content lines of one vCard."""

    properties: tuple[CardProperty, ...] = ()

    def first(self, name: str) -> CardProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def all(self, name: str) -> list[CardProperty]:
        return [prop for prop in self.properties if prop.name == name]


@dataclass(frozen=True)
class DeferredContact:
    """
    A card with several new numbers, waiting for the submitter to pick.
    numbers holds (canonical number, optional description) in card order.
    """

    name: str
    numbers: tuple[tuple[str, str | None], ...]
    created_at: float


@dataclass(frozen=True)
class PendingDeletion:
    """A delete search result waiting for confirmation."""

    contact_id: str
    created_at: float
