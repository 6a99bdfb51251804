"""Tests for the command grammar: parsing and help text."""

import pytest

from smsbook.domain import Command, UnrecognizedCommand, ValidationError, all_commands


def test_parse_every_command_word() -> None:
    for word in ("h", "name", "stop", "info", "contacts", "delete", "confirm", "pick"):
        assert Command.parse(word).value == word


def test_parse_is_case_sensitive() -> None:
    with pytest.raises(UnrecognizedCommand):
        Command.parse("H")
    with pytest.raises(UnrecognizedCommand):
        Command.parse("Name")


def test_unrecognized_command_keeps_word_and_is_validation_error() -> None:
    with pytest.raises(ValidationError) as excinfo:
        Command.parse("hello")
    assert excinfo.value.word == "hello"


def test_all_commands_in_help_order() -> None:
    assert [c.value for c in all_commands()] == [
        "h",
        "name",
        "stop",
        "info",
        "contacts",
        "delete",
        "confirm",
        "pick",
    ]


def test_hint_combines_usage_and_description() -> None:
    assert Command.H.hint() == 'Reply "h" to see the list of available commands.'
    assert Command.NAME.hint() == 'Reply "name NAME" to set your name.'


def test_details_include_example_when_present() -> None:
    assert Command.NAME.details() == (
        'Reply "name NAME", to set your name.\nExample: "name Alice Smith"'
    )
    assert Command.STOP.details() == (
        'Reply "stop", to unsubscribe and delete your contacts.'
    )


def test_str_is_help_line() -> None:
    assert str(Command.CONTACTS) == "contacts: list your contacts"
