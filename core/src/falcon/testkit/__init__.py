from .fakes import ExecutorCall, FakeExecutor, FakeProcessOutcome, RecordingObserver

__all__ = [
    "ExecutorCall",
    "FakeExecutor",
    "FakeProcessOutcome",
    "RecordingObserver",
]
