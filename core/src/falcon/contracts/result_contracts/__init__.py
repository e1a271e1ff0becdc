from .result import (
    TERMINAL_STATUSES,
    FalconResult,
    ResultError,
    ResultOptions,
    ResultStateError,
    ResultStatus,
    ResultType,
)

__all__ = [
    "FalconResult",
    "ResultError",
    "ResultOptions",
    "ResultStateError",
    "ResultStatus",
    "ResultType",
    "TERMINAL_STATUSES",
]
