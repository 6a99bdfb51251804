"""Application ports (interfaces). Implemented by infrastructure adapters."""

from contextlib import AbstractContextManager
from typing import Protocol

from smsbook.domain import Contact, User


class ContactStore(Protocol):
    """Reads and writes users and their contacts. Owns no business rules.

    Adapter failures surface as StoreError. Writes that must be atomic
    together run inside transaction().
    """

    def transaction(self) -> AbstractContextManager["ContactStore"]:
        """Yield a store bound to one transaction. Commit on exit, roll back on error."""
        ...

    def find_user(self, number: str) -> User | None:
        """Return the user with the given number, or None."""
        ...

    def upsert_user_name(self, number: str, name: str) -> None:
        """Create the user, or set the name of an existing one."""
        ...

    def insert_user(self, number: str, name: str) -> None:
        """Create the user if absent. An existing user is left untouched."""
        ...

    def delete_user(self, number: str) -> None:
        """Delete the user and every contact they own."""
        ...

    def list_contacts(self, submitter: str) -> list[Contact]:
        """Return the submitter's contacts ordered by name."""
        ...

    def find_contacts(self, submitter: str, name_substring: str) -> list[Contact]:
        """Return the submitter's contacts whose name contains the text (case-insensitive), ordered by name."""
        ...

    def find_contact_by_id(self, contact_id: str) -> Contact | None:
        """Return the contact with the given id, or None."""
        ...

    def contacts_for_dedup(self, submitter: str) -> dict[str, str]:
        """Return contact_user_number -> contact_name for all of the submitter's contacts."""
        ...

    def insert_contact(self, submitter: str, name: str, number: str) -> str:
        """Store a new contact and return its id."""
        ...

    def update_contact_name(self, submitter: str, number: str, name: str) -> None:
        """Rename the submitter's contact for the given number."""
        ...

    def delete_contact(self, contact_id: str) -> None:
        """Delete one contact by id."""
        ...
