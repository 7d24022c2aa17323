"""Best-effort progress notifications for long-running calls."""
from dataclasses import dataclass, asdict
from typing import Callable, Optional
import logging
import queue

_LOG = logging.getLogger(__name__)

STARTED = "started"
PROCESSING = "processing"
HASHING = "hashing"
SCANNING = "scanning"
COMPLETED = "completed"


@dataclass(frozen=True)
class ProgressEvent:
    event: str
    current_file: Optional[str]
    completed_count: int
    total_count: Optional[int]
    percentage: float

    def to_dict(self) -> dict:
        return asdict(self)


ProgressSink = Callable[[ProgressEvent], None]


def _percent(done: int, total: Optional[int]) -> float:
    if not total:
        return 0.0
    return done / total * 100.0


class QueueSink:
    """Sink that pushes events onto a queue without blocking.

    Events are dropped when the queue is full.
    """

    def __init__(self, q: "queue.Queue[ProgressEvent]"):
        self.queue = q
        self.dropped = 0

    def __call__(self, event: ProgressEvent) -> None:
        try:
            self.queue.put_nowait(event)
        except queue.Full:
            self.dropped += 1


class ProgressReporter:
    """Wraps an optional sink so delivery failures never reach the caller."""

    def __init__(self, sink: Optional[ProgressSink] = None):
        self.sink = sink

    def emit(self, event: str, current_file: Optional[str], done: int, total: Optional[int], percentage: Optional[float] = None) -> None:
        if self.sink is None:
            return
        if percentage is None:
            percentage = _percent(done, total)
        evt = ProgressEvent(event=event, current_file=current_file, completed_count=done,
                            total_count=total, percentage=float(percentage))
        try:
            self.sink(evt)
        except Exception as e:
            _LOG.warning("Progress sink failed on %s event: %s", event, e)

    def step(self, event: str, current_file: Optional[str], done: int, total: int) -> None:
        self.emit(event, current_file, done, total)

    def started(self) -> None:
        self.emit(STARTED, None, 0, None, 0.0)

    def completed(self, total: int) -> None:
        self.emit(COMPLETED, None, total, total, 100.0)
