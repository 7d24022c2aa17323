import pytest

from fileog.executor import OperationExecutor
from fileog.history import OperationLogStore
from fileog.undo import UndoEngine


@pytest.fixture
def store(tmp_path):
    s = OperationLogStore(tmp_path / "data" / "fileog.db")
    s.initialize()
    yield s
    s.close()


@pytest.fixture
def backup_dir(tmp_path):
    return tmp_path / "data" / "trash"


@pytest.fixture
def executor(store, backup_dir):
    return OperationExecutor(store, backup_dir)


@pytest.fixture
def undo_engine(store):
    return UndoEngine(store)


@pytest.fixture
def src_dir(tmp_path):
    d = tmp_path / "src"
    d.mkdir()
    return d


@pytest.fixture
def dst_dir(tmp_path):
    d = tmp_path / "dst"
    d.mkdir()
    return d
