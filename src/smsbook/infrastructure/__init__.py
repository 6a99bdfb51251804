"""Infrastructure layer: concrete implementations of application ports and collaborators."""

from smsbook.infrastructure.memory_repository import InMemoryContactStore
from smsbook.infrastructure.persistence.neo4j_repository import (
    Neo4jContactStore,
    ensure_store_constraints,
)
from smsbook.infrastructure.phone import DEFAULT_REGION, canonicalize, make_canonicalizer
from smsbook.infrastructure.vcard import decode_vcards

__all__ = [
    "DEFAULT_REGION",
    "InMemoryContactStore",
    "Neo4jContactStore",
    "canonicalize",
    "decode_vcards",
    "ensure_store_constraints",
    "make_canonicalizer",
]
