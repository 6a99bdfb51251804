"""Application layer: dispatcher, import engine, workflows, ports, and DTOs. Depends only on domain."""

from smsbook.application.deletion_service import DeletionService
from smsbook.application.dispatcher import Dispatcher
from smsbook.application.dto import (
    Deleted,
    DeletionCandidates,
    ImportResult,
    ImportStats,
    NothingPending,
    NoValidSelections,
    Picked,
    PickOutcome,
    TokenError,
)
from smsbook.application.import_service import ImportService
from smsbook.application.ports import ContactStore
from smsbook.application.selection_service import SelectionService
from smsbook.application.workflow_state import WORKFLOW_TTL, WorkflowState, deletion_token

__all__ = [
    "ContactStore",
    "Deleted",
    "DeletionCandidates",
    "DeletionService",
    "Dispatcher",
    "ImportResult",
    "ImportService",
    "ImportStats",
    "NoValidSelections",
    "NothingPending",
    "PickOutcome",
    "Picked",
    "SelectionService",
    "TokenError",
    "WORKFLOW_TTL",
    "WorkflowState",
    "deletion_token",
]
