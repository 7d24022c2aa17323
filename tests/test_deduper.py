"""Tests for hashing and duplicate detection."""
import hashlib

import pytest

from fileog import deduper
from fileog.hashing import hash_file
from fileog.models import FileItem, OperationKind


def _item(path):
    return FileItem(path=path, name=path.name, size=path.stat().st_size)


class TestHashFile:

    def test_matches_hashlib(self, tmp_path):
        f = tmp_path / "big.bin"
        data = b"0123456789" * 5000
        f.write_bytes(data)
        assert hash_file(f) == hashlib.sha256(data).hexdigest()
        assert hash_file(f, algo="md5", chunk_size=7) == hashlib.md5(data).hexdigest()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            hash_file(tmp_path / "nope")

    @pytest.mark.parametrize("chunk_size", [0, -1])
    def test_non_positive_chunk_size_rejected(self, tmp_path, chunk_size):
        f = tmp_path / "a.bin"
        f.write_bytes(b"aaa")
        with pytest.raises(ValueError):
            hash_file(f, chunk_size=chunk_size)


class TestFindDuplicates:

    def test_one_group_for_identical_pair(self, tmp_path):
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        c = tmp_path / "c.txt"
        a.write_bytes(b"same bytes")
        b.write_bytes(b"same bytes")
        c.write_bytes(b"other bytes")

        groups = deduper.find_duplicates([_item(a), _item(b), _item(c)])

        assert len(groups) == 1
        assert set(groups[0].files) == {a, b}
        assert groups[0].size == len(b"same bytes")
        assert groups[0].hash == hashlib.sha256(b"same bytes").hexdigest()

    def test_distinct_files_give_no_groups(self, tmp_path):
        items = []
        for i in range(4):
            f = tmp_path / f"f{i}"
            f.write_bytes(bytes([i]) * 10)
            items.append(_item(f))
        assert deduper.find_duplicates(items) == []

    def test_unreadable_files_are_skipped(self, tmp_path):
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_bytes(b"x")
        b.write_bytes(b"x")
        ghost = FileItem(path=tmp_path / "ghost.txt", name="ghost.txt", size=1)

        groups = deduper.find_duplicates([_item(a), ghost, _item(b)])

        assert len(groups) == 1
        assert ghost.path not in groups[0].files

    def test_progress_events(self, tmp_path):
        items = []
        for i in range(2):
            f = tmp_path / f"f{i}"
            f.write_bytes(b"z")
            items.append(_item(f))
        events = []

        deduper.find_duplicates(items, on_progress=events.append)

        assert [e.event for e in events] == ["hashing", "hashing", "completed"]
        assert [e.percentage for e in events] == [0.0, 50.0, 100.0]
        assert events[0].current_file == "f0"

    def test_same_file_twice_is_not_a_duplicate(self, tmp_path):
        a = tmp_path / "a.txt"
        a.write_bytes(b"only copy")

        groups = deduper.find_duplicates([_item(a), a, tmp_path / "." / "a.txt"])

        assert groups == []
        assert deduper.plan_deletions(groups) == []

    def test_zero_chunk_size_does_not_group_different_files(self, tmp_path):
        a = tmp_path / "a.bin"
        b = tmp_path / "b.bin"
        a.write_bytes(b"aaa")
        b.write_bytes(b"bbb")
        with pytest.raises(ValueError):
            deduper.find_duplicates([a, b], chunk_size=0)

    def test_accepts_plain_paths(self, tmp_path):
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.write_bytes(b"1")
        b.write_bytes(b"1")
        assert len(deduper.find_duplicates([a, str(b)])) == 1


class TestPlans:

    def test_choose_to_delete_keep_first(self, tmp_path):
        paths = [tmp_path / "a", tmp_path / "b", tmp_path / "c"]
        assert deduper.choose_to_delete(paths) == paths[1:]

    def test_choose_to_delete_keep_largest(self, tmp_path):
        small = tmp_path / "small"
        large = tmp_path / "large"
        small.write_bytes(b"1")
        large.write_bytes(b"123")
        assert deduper.choose_to_delete([small, large], strategy="keep-largest") == [small]

    def test_unknown_strategy(self, tmp_path):
        with pytest.raises(ValueError):
            deduper.choose_to_delete([tmp_path / "a", tmp_path / "b"], strategy="keep-all")

    def test_plan_deletions_then_execute_and_undo(self, tmp_path, executor, undo_engine):
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_bytes(b"dup")
        b.write_bytes(b"dup")
        groups = deduper.find_duplicates([a, b])

        planned = deduper.plan_deletions(groups)
        assert [p.kind for p in planned] == [OperationKind.DELETE]

        results = executor.execute(planned)
        assert results[0].status.is_completed
        assert len([p for p in (a, b) if p.exists()]) == 1

        undo_engine.undo(1)
        assert a.exists() and b.exists()
