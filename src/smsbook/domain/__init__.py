"""Domain layer: entities, command grammar, and error kinds. No dependencies on outer layers."""

from smsbook.domain.commands import Command, all_commands
from smsbook.domain.entities import (
    CardProperty,
    Contact,
    ContactCard,
    DeferredContact,
    PendingDeletion,
    PhoneNumber,
    User,
)
from smsbook.domain.errors import (
    DecodeError,
    InvalidPhoneNumber,
    NotFoundError,
    PrerequisiteError,
    SmsBookError,
    StoreError,
    UnrecognizedCommand,
    ValidationError,
)

__all__ = [
    "CardProperty",
    "Command",
    "Contact",
    "ContactCard",
    "DecodeError",
    "DeferredContact",
    "InvalidPhoneNumber",
    "NotFoundError",
    "PendingDeletion",
    "PhoneNumber",
    "PrerequisiteError",
    "SmsBookError",
    "StoreError",
    "UnrecognizedCommand",
    "User",
    "ValidationError",
    "all_commands",
]
