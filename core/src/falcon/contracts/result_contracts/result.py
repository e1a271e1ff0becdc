from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, Literal

from falcon.errors import FalconError

ResultType = Literal["EXECUTOR", "ACTION", "RECIPE", "COMMAND"]
ResultStatus = Literal["INITIALIZED", "RUNNING", "SUCCESS", "FAILURE", "ERROR"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"SUCCESS", "FAILURE", "ERROR"})

_logger = logging.getLogger("sfdx_falcon.result")


class ResultStateError(RuntimeError):
    """Raised on an illegal Result transition (re-completion, late mutation)."""


class ResultError(Exception):
    """
    Raised when a Result completes with ERROR.

    Carries the finalized Result so the caller can attach it to its own tree.
    """

    def __init__(self, result: FalconResult) -> None:
        super().__init__(f"{result.result_type} '{result.name}' completed with ERROR")
        self.result = result

    @property
    def error(self) -> FalconError | None:
        return self.result.error


@dataclass(frozen=True, slots=True)
class ResultOptions:
    start_now: bool = True
    bubble_error: bool = True
    bubble_failure: bool = True
    # Escalate a bubbled child FAILURE to an ERROR on this Result.
    failure_is_error: bool = False


class FalconResult:
    """
    Hierarchical outcome of one EXECUTOR, ACTION, RECIPE or COMMAND.

    A Result is built while RUNNING and frozen by exactly one of
    `complete_success()`, `complete_failure()` or `complete_error()`. After
    that neither its status, detail nor children can change.
    """

    def __init__(
        self,
        name: str,
        result_type: ResultType,
        options: ResultOptions | None = None,
        *,
        detail: Mapping[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.result_type: ResultType = result_type
        self.options = options or ResultOptions()
        self._status: ResultStatus = "INITIALIZED"
        self._detail: dict[str, Any] = dict(detail or {})
        self._children: list[FalconResult] = []
        self._error: FalconError | None = None
        self._started_at: datetime | None = None
        self._ended_at: datetime | None = None
        if self.options.start_now:
            self.start()

    def __repr__(self) -> str:
        return (
            f"FalconResult(name={self.name!r}, type={self.result_type}, "
            f"status={self._status}, children={len(self._children)})"
        )

    @property
    def status(self) -> ResultStatus:
        return self._status

    @property
    def detail(self) -> Mapping[str, Any]:
        return MappingProxyType(self._detail)

    @property
    def children(self) -> tuple[FalconResult, ...]:
        return tuple(self._children)

    @property
    def error(self) -> FalconError | None:
        return self._error

    @property
    def started_at_utc(self) -> datetime | None:
        return self._started_at

    @property
    def ended_at_utc(self) -> datetime | None:
        return self._ended_at

    @property
    def is_finalized(self) -> bool:
        return self._status in TERMINAL_STATUSES

    @property
    def is_running(self) -> bool:
        return self._status == "RUNNING"

    @property
    def duration_s(self) -> float:
        if self._started_at is None:
            return 0.0
        end = self._ended_at or datetime.now(UTC)
        return (end - self._started_at).total_seconds()

    @property
    def duration_string(self) -> str:
        return f"{self.duration_s:.3f}s"

    @property
    def stack_label(self) -> str:
        return f"{self.result_type}:{self.name}"

    def start(self) -> FalconResult:
        if self._status != "INITIALIZED":
            raise ResultStateError(f"Cannot start {self.stack_label}: status is {self._status}")
        self._started_at = datetime.now(UTC)
        self._status = "RUNNING"
        return self

    def update_detail(self, **fields: Any) -> FalconResult:
        self._ensure_mutable("update detail of")
        self._detail.update(fields)
        return self

    def add_child(self, child: FalconResult) -> FalconResult:
        """Attach a child without applying any bubbling policy."""
        self._ensure_mutable("add a child to")
        if child is self:
            raise ResultStateError(f"{self.stack_label} cannot be its own child")
        if child.is_running and any(existing.is_running for existing in self._children):
            raise ResultStateError(
                f"{self.stack_label} already has a RUNNING child; "
                f"cannot attach {child.stack_label}"
            )
        self._children.append(child)
        return self

    def add_resolved_child(self, child: FalconResult) -> FalconResult:
        """
        Attach a child that completed with SUCCESS or FAILURE.

        A FAILURE is bubbled only when `bubble_failure` is set; with
        `failure_is_error` it becomes an ERROR and `ResultError` is raised.
        """
        if child.status == "ERROR":
            return self.add_rejected_child(child)
        self.add_child(child)
        if child.status != "FAILURE" or not self.options.bubble_failure:
            return self
        error = child.error or FalconError(
            f"{child.stack_label} failed", source=self.stack_label
        )
        if self.options.failure_is_error:
            self.complete_error(error)
            raise ResultError(self) from error
        self.complete_failure(error)
        return self

    def add_rejected_child(self, child: FalconResult) -> FalconResult:
        """
        Attach a child that completed with ERROR.

        With `bubble_error` this Result also completes with ERROR and
        `ResultError` is raised. Otherwise the error is recorded as suppressed.
        """
        self.add_child(child)
        if not self.options.bubble_error:
            _logger.debug("%s suppressed ERROR from %s", self.stack_label, child.stack_label)
            suppressed = list(self._detail.get("suppressed_errors", []))
            suppressed.append(child.stack_label)
            self._detail["suppressed_errors"] = suppressed
            return self
        error = child.error or FalconError(
            f"{child.stack_label} errored", source=self.stack_label
        )
        self.complete_error(error)
        raise ResultError(self) from error

    def complete_success(self) -> FalconResult:
        return self._complete("SUCCESS", None)

    def complete_failure(self, error: BaseException) -> FalconResult:
        return self._complete("FAILURE", FalconError.wrap(error, self.stack_label))

    def complete_error(self, error: Any) -> FalconResult:
        return self._complete("ERROR", FalconError.wrap(error, self.stack_label))

    def debug_result(self, message: str, source: str) -> None:
        _logger.debug("[%s] %s: %s (%s)", source, message, self.stack_label, self._status)

    def find_children(self, result_type: ResultType) -> list[FalconResult]:
        return [child for child in self._children if child.result_type == result_type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.result_type,
            "status": self._status,
            "started_at_utc": self._started_at.isoformat() if self._started_at else None,
            "ended_at_utc": self._ended_at.isoformat() if self._ended_at else None,
            "duration_s": self.duration_s,
            "detail": _jsonable(self._detail),
            "error": self._error.to_dict() if self._error is not None else None,
            "children": [child.to_dict() for child in self._children],
        }

    def _complete(self, status: ResultStatus, error: FalconError | None) -> FalconResult:
        if self.is_finalized:
            raise ResultStateError(
                f"{self.stack_label} already completed with {self._status}; "
                f"refusing to set {status}"
            )
        now = datetime.now(UTC)
        if self._started_at is None:
            self._started_at = now
        self._ended_at = now
        self._status = status
        if error is not None:
            error.add_to_stack(f"{self.stack_label} ({status})")
            self._error = error
        self.debug_result(f"Completed in {self.duration_string}", self.stack_label)
        return self

    def _ensure_mutable(self, what: str) -> None:
        if self.is_finalized:
            raise ResultStateError(
                f"Cannot {what} {self.stack_label}: already completed with {self._status}"
            )


def _jsonable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return repr(value)
