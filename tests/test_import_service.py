"""Unit tests for ImportService. In-memory store, hand-built cards, fake clock."""

import pytest

from smsbook.application import ImportResult, ImportService, WorkflowState
from smsbook.application.import_service import format_import_report
from smsbook.domain import (
    CardProperty,
    ContactCard,
    DecodeError,
    PrerequisiteError,
    StoreError,
    ValidationError,
)
from smsbook.infrastructure import InMemoryContactStore, canonicalize

ALICE = "+15551234567"
BOB = "+15559876543"
BOB_WORK = "+15550001111"


def _card(name: str | None, *numbers) -> ContactCard:
    props = []
    if name is not None:
        props.append(CardProperty(name="FN", value=name))
    for number in numbers:
        if isinstance(number, tuple):
            raw, label = number
            props.append(CardProperty(name="TEL", value=raw, params={"TYPE": (label,)}))
        else:
            props.append(CardProperty(name="TEL", value=number))
    return ContactCard(properties=tuple(props))


def _service(store: InMemoryContactStore | None = None):
    store = store or InMemoryContactStore()
    store.upsert_user_name(ALICE, "Alice")
    workflow = WorkflowState(clock=lambda: 0.0)
    return ImportService(store, workflow, canonicalize), store, workflow


def test_submitter_must_exist() -> None:
    store = InMemoryContactStore()
    service = ImportService(store, WorkflowState(), canonicalize)
    with pytest.raises(PrerequisiteError, match="set your name first"):
        service.import_card(ALICE, _card("Bob", BOB))


def test_card_without_name_is_invalid() -> None:
    service, _, _ = _service()
    with pytest.raises(ValidationError, match="No name provided"):
        service.import_card(ALICE, _card(None, BOB))
    with pytest.raises(ValidationError, match="No name provided"):
        service.import_card(ALICE, _card("", BOB))


def test_card_without_valid_numbers_is_invalid() -> None:
    service, _, _ = _service()
    with pytest.raises(ValidationError, match="No valid phone numbers provided"):
        service.import_card(ALICE, _card("Bob"))
    with pytest.raises(ValidationError, match="No valid phone numbers provided"):
        service.import_card(ALICE, _card("Bob", "not a phone", "12"))


def test_import_twice_is_added_then_unchanged() -> None:
    service, store, _ = _service()
    assert service.import_card(ALICE, _card("Bob", BOB)) is ImportResult.ADDED
    assert service.import_card(ALICE, _card("Bob", "+1 (555) 987-6543")) is ImportResult.UNCHANGED
    contacts = store.list_contacts(ALICE)
    assert len(contacts) == 1
    assert contacts[0].contact_name == "Bob"
    assert contacts[0].contact_user_number == BOB


def test_changed_name_updates_once() -> None:
    service, store, _ = _service()
    service.import_card(ALICE, _card("Bob", BOB))
    assert service.import_card(ALICE, _card("Robert", BOB)) is ImportResult.UPDATED
    assert service.import_card(ALICE, _card("Robert", BOB)) is ImportResult.UNCHANGED
    assert [c.contact_name for c in store.list_contacts(ALICE)] == ["Robert"]


def test_name_compare_is_case_sensitive() -> None:
    service, _, _ = _service()
    service.import_card(ALICE, _card("Bob", BOB))
    assert service.import_card(ALICE, _card("bob", BOB)) is ImportResult.UPDATED


def test_adding_materializes_target_user() -> None:
    service, store, _ = _service()
    service.import_card(ALICE, _card("Bob", BOB))
    user = store.find_user(BOB)
    assert user is not None
    assert user.name == "Bob"


def test_existing_target_user_keeps_its_name() -> None:
    service, store, _ = _service()
    store.upsert_user_name(BOB, "Bobby B")
    service.import_card(ALICE, _card("Bob", BOB))
    assert store.find_user(BOB).name == "Bobby B"
    assert store.list_contacts(ALICE)[0].contact_name == "Bob"


def test_invalid_numbers_are_skipped_silently() -> None:
    service, store, _ = _service()
    assert service.import_card(ALICE, _card("Bob", "garbage", BOB)) is ImportResult.ADDED
    assert len(store.list_contacts(ALICE)) == 1


def test_two_new_numbers_are_deferred() -> None:
    service, store, workflow = _service()
    result = service.import_card(ALICE, _card("Bob", (BOB, "CELL"), BOB_WORK))
    assert result is ImportResult.DEFERRED
    assert store.list_contacts(ALICE) == []
    deferred = workflow.deferred_for(ALICE)
    assert len(deferred) == 1
    assert deferred[0].name == "Bob"
    assert deferred[0].numbers == ((BOB, "CELL"), (BOB_WORK, None))


def test_owned_numbers_do_not_count_toward_deferral() -> None:
    service, store, workflow = _service()
    service.import_card(ALICE, _card("Bob", BOB))
    result = service.import_card(ALICE, _card("Bob", BOB, BOB_WORK))
    assert result is ImportResult.ADDED
    assert workflow.deferred_for(ALICE) == ()
    assert len(store.list_contacts(ALICE)) == 2


def test_repeated_number_on_one_card_counts_once() -> None:
    service, store, workflow = _service()
    result = service.import_card(ALICE, _card("Bob", BOB, "+1 555 987 6543"))
    assert result is ImportResult.ADDED
    assert workflow.deferred_for(ALICE) == ()


def test_batch_counts_outcomes_and_errors() -> None:
    service, _, _ = _service()
    service.import_card(ALICE, _card("Dan", "+15553334444"))
    cards = [
        _card("Bob", BOB),
        _card("Dan", "+15553334444"),
        _card("Daniel", "+15553334444"),
        _card("Carol", "+15550002222", "+15550003333"),
        _card(None, BOB),
        _card("Eve"),
        _card("Frank"),
        DecodeError("Malformed vCard: bad line"),
    ]
    stats = service.import_batch(ALICE, cards)
    assert (stats.added, stats.unchanged, stats.updated, stats.deferred) == (1, 1, 1, 1)
    assert stats.failed == 4
    assert stats.errors["No valid phone numbers provided"] == 2
    assert stats.errors["No name provided"] == 1
    assert stats.errors["Malformed vCard: bad line"] == 1


def test_batch_from_unknown_sender_fails_every_card() -> None:
    store = InMemoryContactStore()
    service = ImportService(store, WorkflowState(), canonicalize)
    stats = service.import_batch(ALICE, [_card("Bob", BOB), _card("Carol", BOB_WORK)])
    assert stats.failed == 2
    assert stats.added == 0
    assert len(stats.errors) == 1


class _BrokenStore(InMemoryContactStore):
    def contacts_for_dedup(self, submitter: str) -> dict[str, str]:
        raise StoreError("connection reset by peer")


def test_store_failure_is_counted_without_leaking_details() -> None:
    service, _, _ = _service(_BrokenStore())
    stats = service.import_batch(ALICE, [_card("Bob", BOB)])
    assert stats.failed == 1
    assert list(stats.errors) == ["Internal error"]


def test_report_lists_deferred_choices() -> None:
    service, _, workflow = _service()
    stats = service.import_batch(
        ALICE,
        [
            _card("Bob", BOB),
            _card("Carol", ("+15550002222", "cell"), "+15550003333"),
        ],
    )
    report = format_import_report(stats, workflow.deferred_for(ALICE))
    assert report.startswith(
        "Processed contacts: 1 added, 0 updated, 0 unchanged, 1 deferred, 0 failed"
    )
    assert 'Reply with "pick NA, MB, ..."' in report
    assert "\n1. Carol" in report
    assert "\n   a. +15550002222 (cell)" in report
    assert "\n   b. +15550003333 (no description)" in report


def test_report_without_deferrals_has_no_pick_prompt() -> None:
    service, _, workflow = _service()
    stats = service.import_batch(ALICE, [_card("Bob", BOB), _card("Eve")])
    report = format_import_report(stats, workflow.deferred_for(ALICE))
    assert "pick" not in report
    assert "Errors encountered:\n- 1 × No valid phone numbers provided" in report
