"""Neo4j implementation of ContactStore.
Graph: (:User {number, name})-[:OWNS]->(:Contact {id, submitter_number, contact_name, contact_user_number})-[:REFERS_TO]->(:User).
A contact's target is always a User node, created on demand with the contact's name.
Deleting a user detach-deletes the contacts it owns; contacts that point at it from other users keep their number.
"""

import logging
import uuid
from contextlib import contextmanager

from neo4j.exceptions import DriverError, Neo4jError

from smsbook.domain import Contact, StoreError, User

logger = logging.getLogger(__name__)

_CONSTRAINT_QUERIES = (
    """
    CREATE CONSTRAINT user_number_unique IF NOT EXISTS
    FOR (u:User) REQUIRE u.number IS UNIQUE
    """,
    """
    CREATE CONSTRAINT contact_id_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE c.id IS UNIQUE
    """,
    """
    CREATE CONSTRAINT contact_pair_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE (c.submitter_number, c.contact_user_number) IS UNIQUE
    """,
)

_FIND_USER_QUERY = """
MATCH (u:User {number: $number})
RETURN u.number AS number, u.name AS name
"""

_UPSERT_USER_NAME_QUERY = """
MERGE (u:User {number: $number})
SET u.name = $name
"""

_INSERT_USER_QUERY = """
MERGE (u:User {number: $number})
ON CREATE SET u.name = $name
"""

_DELETE_USER_QUERY = """
MATCH (u:User {number: $number})
OPTIONAL MATCH (u)-[:OWNS]->(c:Contact)
DETACH DELETE c, u
"""

_LIST_CONTACTS_QUERY = """
MATCH (:User {number: $submitter})-[:OWNS]->(c:Contact)
RETURN c
ORDER BY c.contact_name
"""

_FIND_CONTACTS_QUERY = """
MATCH (:User {number: $submitter})-[:OWNS]->(c:Contact)
WHERE toLower(c.contact_name) CONTAINS toLower($needle)
RETURN c
ORDER BY c.contact_name
"""

_FIND_CONTACT_BY_ID_QUERY = """
MATCH (c:Contact {id: $id})
RETURN c
"""

_DEDUP_QUERY = """
MATCH (:User {number: $submitter})-[:OWNS]->(c:Contact)
RETURN c.contact_user_number AS number, c.contact_name AS name
"""

_INSERT_CONTACT_QUERY = """
MATCH (owner:User {number: $submitter})
MATCH (target:User {number: $number})
CREATE (owner)-[:OWNS]->(c:Contact {
    id: $id,
    submitter_number: $submitter,
    contact_name: $name,
    contact_user_number: $number
})-[:REFERS_TO]->(target)
RETURN c.id AS id
"""

_UPDATE_CONTACT_NAME_QUERY = """
MATCH (:User {number: $submitter})-[:OWNS]->(c:Contact {contact_user_number: $number})
SET c.contact_name = $name
"""

_DELETE_CONTACT_QUERY = """
MATCH (c:Contact {id: $id})
DETACH DELETE c
"""


def ensure_store_constraints(driver) -> None:
    """Create uniqueness constraints on users and contacts if missing. Call at startup."""
    with driver.session() as session:
        for query in _CONSTRAINT_QUERIES:
            session.run(query)


class Neo4jContactStore:
    """Stores users and contacts in Neo4j.
    Outside transaction() every call runs in its own auto-commit session.
    Driver and server errors are re-raised as StoreError.
    """

    def __init__(self, driver: object, *, tx: object | None = None) -> None:
        self._driver = driver
        self._tx = tx

    @contextmanager
    def transaction(self):
        if self._tx is not None:
            # Already inside a transaction; join it.
            yield self
            return
        try:
            with self._driver.session() as session:
                with session.begin_transaction() as tx:
                    yield Neo4jContactStore(self._driver, tx=tx)
                    tx.commit()
        except (DriverError, Neo4jError) as e:
            raise StoreError(f"Transaction failed: {e}") from e

    def _run(self, query: str, **params) -> list:
        try:
            if self._tx is not None:
                return list(self._tx.run(query, **params))
            with self._driver.session() as session:
                return list(session.run(query, **params))
        except (DriverError, Neo4jError) as e:
            raise StoreError(str(e)) from e

    def find_user(self, number: str) -> User | None:
        records = self._run(_FIND_USER_QUERY, number=number)
        if not records:
            return None
        record = records[0]
        return User(number=record["number"], name=record["name"] or "")

    def upsert_user_name(self, number: str, name: str) -> None:
        self._run(_UPSERT_USER_NAME_QUERY, number=number, name=name)

    def insert_user(self, number: str, name: str) -> None:
        self._run(_INSERT_USER_QUERY, number=number, name=name)

    def delete_user(self, number: str) -> None:
        self._run(_DELETE_USER_QUERY, number=number)

    def list_contacts(self, submitter: str) -> list[Contact]:
        return [
            _record_to_contact(r)
            for r in self._run(_LIST_CONTACTS_QUERY, submitter=submitter)
        ]

    def find_contacts(self, submitter: str, name_substring: str) -> list[Contact]:
        return [
            _record_to_contact(r)
            for r in self._run(
                _FIND_CONTACTS_QUERY, submitter=submitter, needle=name_substring
            )
        ]

    def find_contact_by_id(self, contact_id: str) -> Contact | None:
        records = self._run(_FIND_CONTACT_BY_ID_QUERY, id=contact_id)
        return _record_to_contact(records[0]) if records else None

    def contacts_for_dedup(self, submitter: str) -> dict[str, str]:
        return {
            r["number"]: r["name"]
            for r in self._run(_DEDUP_QUERY, submitter=submitter)
        }

    def insert_contact(self, submitter: str, name: str, number: str) -> str:
        contact_id = str(uuid.uuid4())
        records = self._run(
            _INSERT_CONTACT_QUERY,
            id=contact_id,
            submitter=submitter,
            name=name,
            number=number,
        )
        if not records:
            raise StoreError(
                f"insert_contact: no User node for {submitter!r} or {number!r}"
            )
        return records[0]["id"]

    def update_contact_name(self, submitter: str, number: str, name: str) -> None:
        self._run(_UPDATE_CONTACT_NAME_QUERY, submitter=submitter, number=number, name=name)

    def delete_contact(self, contact_id: str) -> None:
        self._run(_DELETE_CONTACT_QUERY, id=contact_id)


def _record_to_contact(record) -> Contact:
    c = record["c"]
    return Contact(
        id=c["id"],
        submitter_number=c["submitter_number"],
        contact_name=c.get("contact_name") or "",
        contact_user_number=c["contact_user_number"],
    )
