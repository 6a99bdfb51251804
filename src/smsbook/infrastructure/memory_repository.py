"""In-memory implementation of ContactStore (no DB)."""

import copy
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace

from smsbook.domain import Contact, StoreError, User


class InMemoryContactStore:
    """Stores users and contacts in dicts.
    Transactions snapshot both dicts and restore them if the block raises.
    A transaction holds the store lock until it ends, so a rollback never
    discards another thread's writes.
    """

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._contacts: dict[str, Contact] = {}  # contact id -> contact
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self):
        with self._lock:
            snapshot = (copy.copy(self._users), copy.copy(self._contacts))
            try:
                yield self
            except BaseException:
                self._users, self._contacts = snapshot
                raise

    def find_user(self, number: str) -> User | None:
        with self._lock:
            return self._users.get(number)

    def upsert_user_name(self, number: str, name: str) -> None:
        with self._lock:
            self._users[number] = User(number=number, name=name)

    def insert_user(self, number: str, name: str) -> None:
        with self._lock:
            if number not in self._users:
                self._users[number] = User(number=number, name=name)

    def delete_user(self, number: str) -> None:
        with self._lock:
            self._users.pop(number, None)
            self._contacts = {
                cid: c for cid, c in self._contacts.items() if c.submitter_number != number
            }

    def list_contacts(self, submitter: str) -> list[Contact]:
        with self._lock:
            return _by_name(
                c for c in self._contacts.values() if c.submitter_number == submitter
            )

    def find_contacts(self, submitter: str, name_substring: str) -> list[Contact]:
        needle = name_substring.lower()
        with self._lock:
            return _by_name(
                c
                for c in self._contacts.values()
                if c.submitter_number == submitter and needle in c.contact_name.lower()
            )

    def find_contact_by_id(self, contact_id: str) -> Contact | None:
        with self._lock:
            return self._contacts.get(contact_id)

    def contacts_for_dedup(self, submitter: str) -> dict[str, str]:
        with self._lock:
            return {
                c.contact_user_number: c.contact_name
                for c in self._contacts.values()
                if c.submitter_number == submitter
            }

    def insert_contact(self, submitter: str, name: str, number: str) -> str:
        with self._lock:
            if submitter not in self._users or number not in self._users:
                raise StoreError("FOREIGN KEY constraint failed")
            if number in self.contacts_for_dedup(submitter):
                raise StoreError(
                    "UNIQUE constraint failed: contacts.submitter_number, "
                    "contacts.contact_user_number"
                )
            contact_id = str(uuid.uuid4())
            self._contacts[contact_id] = Contact(
                id=contact_id,
                submitter_number=submitter,
                contact_name=name,
                contact_user_number=number,
            )
            return contact_id

    def update_contact_name(self, submitter: str, number: str, name: str) -> None:
        with self._lock:
            for cid, c in list(self._contacts.items()):
                if c.submitter_number == submitter and c.contact_user_number == number:
                    self._contacts[cid] = replace(c, contact_name=name)

    def delete_contact(self, contact_id: str) -> None:
        with self._lock:
            self._contacts.pop(contact_id, None)


def _by_name(contacts) -> list[Contact]:
    return sorted(contacts, key=lambda c: c.contact_name)
