"""
smsbook core: clean-architecture layout.

- domain: entities (User, Contact, ContactCard, ...), command grammar, errors. No outer dependencies.
- application: Dispatcher, import engine, pick/confirm workflows, ports (ContactStore), DTOs.
- infrastructure: adapters (InMemoryContactStore, Neo4jContactStore), phone canonicalization, vCard decoding.
"""

from smsbook.application import (
    ContactStore,
    Dispatcher,
    ImportResult,
    ImportService,
    WorkflowState,
)
from smsbook.domain import Command, Contact, ContactCard, User
from smsbook.infrastructure import (
    InMemoryContactStore,
    Neo4jContactStore,
    canonicalize,
    decode_vcards,
)

__all__ = [
    "Command",
    "Contact",
    "ContactCard",
    "ContactStore",
    "Dispatcher",
    "ImportResult",
    "ImportService",
    "InMemoryContactStore",
    "Neo4jContactStore",
    "User",
    "WorkflowState",
    "canonicalize",
    "decode_vcards",
]
