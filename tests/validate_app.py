import shutil
import sys
import tempfile
from pathlib import Path

# Ensure project root is on sys.path so `fileog` package can be imported
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from fileog import deduper, organizer, scanner
from fileog.app import open_app
from fileog.models import OperationKind

ROOT = Path(tempfile.mkdtemp(prefix='fileog_validation_'))

src = ROOT / 'src'
src.mkdir()
(src / 'a.txt').write_text('hello')
(src / 'b.bin').write_bytes(b'\x00' * 2048)
(src / 'c.txt').write_text('hello')

target = ROOT / 'target'
app = open_app(ROOT / 'data')

print('Organizing by type with copy mode')
files = list(scanner.scan_paths([src]))
planned = organizer.plan_by_type(files, target, kind=OperationKind.COPY)
results = app.executor.execute(planned)
copied = [op for op in results if op.status.is_completed]
print('Copied:', len(copied), 'of', len(results))
for op in copied:
    if not op.destination_path.exists():
        print('ERROR: copied dst missing', op.destination_path)
        sys.exit(2)

print('Undoing copies (should delete them)')
app.undo.undo(len(copied))
for op in copied:
    if op.destination_path.exists():
        print('ERROR: dst still exists after undo', op.destination_path)
        sys.exit(3)

print('Organizing by type with move mode')
results = app.executor.execute(organizer.plan_by_type(files, target))
moved = [op for op in results if op.status.is_completed]
for op in moved:
    if not op.destination_path.exists() or op.source_path.exists():
        print('ERROR: move not applied', op.source_path)
        sys.exit(4)

print('Undoing moves (should restore original files)')
app.undo.undo(len(moved))
for op in moved:
    if not op.source_path.exists():
        print('ERROR: source not restored', op.source_path)
        sys.exit(5)

print('Deleting duplicates')
groups = deduper.find_duplicates(scanner.scan_paths([src]))
print('Duplicate groups:', len(groups))
if len(groups) != 1:
    print('ERROR: expected one duplicate group')
    sys.exit(6)
deleted = app.executor.execute(deduper.plan_deletions(groups))
app.undo.undo(len(deleted))
if not all(op.source_path.exists() for op in deleted):
    print('ERROR: deleted duplicate not restored')
    sys.exit(7)

print('History batches:', len(app.store.list_recent()))
app.close()

print('CLEANUP: removing', ROOT)
shutil.rmtree(ROOT)
print('ALL TESTS PASSED')
