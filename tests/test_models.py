"""Tests for the status variant and planned operation checks."""
from pathlib import Path

import pytest

from fileog.models import FileType, OperationKind, OperationStatus, PlannedOperation, StatusKind


class TestOperationStatus:

    @pytest.mark.parametrize("text, kind", [
        ("completed", StatusKind.COMPLETED),
        ("pending", StatusKind.PENDING),
        ("in_progress", StatusKind.IN_PROGRESS),
        ("undone", StatusKind.UNDONE),
    ])
    def test_simple_states_from_db(self, text, kind):
        status = OperationStatus.from_db(text)
        assert status.kind is kind
        assert status.to_db() == text

    def test_failed_keeps_reason(self):
        status = OperationStatus.from_db("failed:No such file: a:b")
        assert status.is_failed
        assert status.reason == "No such file: a:b"
        assert status.to_db() == "failed:No such file: a:b"

    def test_failed_needs_reason(self):
        with pytest.raises(ValueError):
            OperationStatus.failed("")

    def test_from_error_uses_class_name_when_message_empty(self):
        assert OperationStatus.from_error(PermissionError()).reason == "PermissionError"

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            OperationStatus.from_db("exploded")

    def test_transitions(self):
        assert OperationStatus.pending().can_transition_to(OperationStatus.in_progress())
        assert OperationStatus.in_progress().can_transition_to(OperationStatus.failed("x"))
        assert OperationStatus.completed().can_transition_to(OperationStatus.undone())
        assert not OperationStatus.failed("x").can_transition_to(OperationStatus.undone())
        assert not OperationStatus.undone().can_transition_to(OperationStatus.completed())
        assert OperationStatus.undone().is_terminal


class TestPlannedOperation:

    def test_move_needs_destination(self):
        with pytest.raises(ValueError):
            PlannedOperation(file_id="1", file_name="a", kind=OperationKind.MOVE, source=Path("/a"))

    def test_delete_without_destination(self):
        p = PlannedOperation(file_id="1", file_name="a", kind=OperationKind.DELETE, source="/a")
        assert p.source == Path("/a")
        assert p.destination is None


def test_file_type_from_extension():
    assert FileType.from_extension("PDF") is FileType.DOCUMENT
    assert FileType.from_extension(".jpg") is FileType.IMAGE
    assert FileType.from_extension("py") is FileType.CODE
    assert FileType.from_extension(None) is FileType.OTHER
    assert OperationKind.from_string("Rename") is OperationKind.RENAME
