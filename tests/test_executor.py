"""Tests for OperationExecutor."""
from fileog.errors import StoreError
from fileog.executor import OperationExecutor
from fileog.models import OperationKind, PlannedOperation, StatusKind


def _plan(kind, src, dst=None, name=None):
    return PlannedOperation(file_id=str(src), file_name=name or src.name, kind=kind, source=src, destination=dst)


class TestExecute:

    def test_move_copy_rename_delete(self, executor, src_dir, dst_dir):
        a = src_dir / "a.txt"
        b = src_dir / "b.txt"
        c = src_dir / "c.txt"
        d = src_dir / "d.txt"
        for f in (a, b, c, d):
            f.write_text(f.name)

        results = executor.execute([
            _plan(OperationKind.MOVE, a, dst_dir / "a.txt"),
            _plan(OperationKind.COPY, b, dst_dir / "b.txt"),
            _plan(OperationKind.RENAME, c, src_dir / "c2.txt"),
            _plan(OperationKind.DELETE, d),
        ])

        assert [op.status.kind for op in results] == [StatusKind.COMPLETED] * 4
        assert not a.exists() and (dst_dir / "a.txt").read_text() == "a.txt"
        assert b.exists() and (dst_dir / "b.txt").read_text() == "b.txt"
        assert not c.exists() and (src_dir / "c2.txt").exists()
        assert not d.exists()

    def test_output_matches_input_order_and_length(self, executor, src_dir, dst_dir):
        planned = []
        for i in range(5):
            f = src_dir / f"f{i}.txt"
            f.write_text(str(i))
            planned.append(_plan(OperationKind.MOVE, f, dst_dir / f.name))
        planned.insert(2, _plan(OperationKind.MOVE, src_dir / "missing.txt", dst_dir / "missing.txt"))

        results = executor.execute(planned)

        assert len(results) == len(planned)
        assert [op.source_path for op in results] == [p.source for p in planned]
        assert len({op.batch_id for op in results}) == 1
        assert len({op.id for op in results}) == len(results)

    def test_failure_does_not_stop_batch(self, executor, src_dir, dst_dir):
        ok = src_dir / "ok.txt"
        ok.write_text("ok")
        taken = src_dir / "taken.txt"
        taken.write_text("new")
        (dst_dir / "taken.txt").write_text("old")

        results = executor.execute([
            _plan(OperationKind.MOVE, src_dir / "gone.txt", dst_dir / "gone.txt"),
            _plan(OperationKind.MOVE, taken, dst_dir / "taken.txt"),
            _plan(OperationKind.MOVE, ok, dst_dir / "ok.txt"),
        ])

        assert results[0].status.is_failed and results[0].status.reason
        assert results[1].status.is_failed and results[1].status.reason
        assert results[2].status.is_completed
        # existing destination is never overwritten
        assert (dst_dir / "taken.txt").read_text() == "old"
        assert taken.read_text() == "new"

    def test_delete_keeps_backup(self, executor, src_dir, backup_dir):
        f = src_dir / "doomed.txt"
        f.write_text("precious")

        [op] = executor.execute([_plan(OperationKind.DELETE, f)])

        assert op.status.is_completed
        assert op.destination_path is None
        assert op.backup_path is not None
        assert op.backup_path.read_text() == "precious"
        assert backup_dir in op.backup_path.parents

    def test_records_are_persisted(self, executor, store, src_dir, dst_dir):
        f = src_dir / "a.txt"
        f.write_text("a")

        [op] = executor.execute([_plan(OperationKind.COPY, f, dst_dir / "a.txt")])

        saved = store.get(op.id)
        assert saved is not None
        assert saved.kind is OperationKind.COPY
        assert saved.status.is_completed
        assert saved.batch_id == op.batch_id
        assert saved.original_name == "a.txt"

    def test_failed_status_is_persisted_with_reason(self, executor, store, src_dir, dst_dir):
        [op] = executor.execute([_plan(OperationKind.COPY, src_dir / "nope.txt", dst_dir / "nope.txt")])

        saved = store.get(op.id)
        assert saved.status.is_failed
        assert saved.status.reason == op.status.reason

    def test_store_failure_is_not_fatal(self, src_dir, dst_dir, backup_dir):
        class BrokenStore:
            def append(self, op):
                raise StoreError("disk full")

        f = src_dir / "a.txt"
        f.write_text("a")
        executor = OperationExecutor(BrokenStore(), backup_dir)

        results = executor.execute([_plan(OperationKind.MOVE, f, dst_dir / "sub" / "a.txt")])

        assert results[0].status.is_completed
        assert (dst_dir / "sub" / "a.txt").exists()


class TestProgress:

    def test_events_sequence(self, executor, src_dir, dst_dir):
        planned = []
        for i in range(4):
            f = src_dir / f"f{i}.txt"
            f.write_text(str(i))
            planned.append(_plan(OperationKind.COPY, f, dst_dir / f.name))
        events = []

        executor.execute(planned, on_progress=events.append)

        assert [e.event for e in events] == ["processing"] * 4 + ["completed"]
        assert [e.completed_count for e in events] == [0, 1, 2, 3, 4]
        assert [e.percentage for e in events] == [0.0, 25.0, 50.0, 75.0, 100.0]
        assert events[1].current_file == "f1.txt"
        assert events[-1].current_file is None
        assert all(e.total_count == 4 for e in events)

    def test_completed_event_after_failures(self, executor, src_dir, dst_dir):
        events = []

        executor.execute([_plan(OperationKind.MOVE, src_dir / "x", dst_dir / "x")], on_progress=events.append)

        assert events[-1].event == "completed"
        assert events[-1].percentage == 100.0

    def test_raising_sink_does_not_affect_results(self, executor, src_dir, dst_dir):
        f = src_dir / "a.txt"
        f.write_text("a")

        def sink(evt):
            raise RuntimeError("ui closed")

        results = executor.execute([_plan(OperationKind.MOVE, f, dst_dir / "a.txt")], on_progress=sink)

        assert results[0].status.is_completed
