from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal

ErrorKind = Literal["generic", "cli", "shell"]


@dataclass(slots=True)
class ErrorInfo:
    """Title/message/actions block shown for one verbosity tier."""

    title: str = "UNKNOWN ERROR"
    message: str = "An unknown error has occurred"
    actions: list[str] = field(default_factory=list)

    def add_action(self, action_item: str = "") -> None:
        self.actions.append(action_item)


@dataclass(frozen=True, slots=True)
class CliErrorDetail:
    """JSON error body returned by the Salesforce CLI when run with --json."""

    name: str
    message: str
    status: int
    actions: Sequence[str] = ()
    warnings: Any = field(default_factory=list)
    stack: str = ""
    result: Any = None

    kind: ClassVar[ErrorKind] = "cli"


@dataclass(frozen=True, slots=True)
class ShellErrorDetail:
    """Shell-level facts about a process that died without a CLI error body."""

    command: str
    code: int | None
    signal: str | None
    message: str
    stderr: str = ""
    stdout: str = ""

    kind: ClassVar[ErrorKind] = "shell"


class FalconError(Exception):
    """
    Structured error shared by executors, actions, recipes and commands.

    Plain instances are the "generic" variant (usually produced by `wrap()`);
    `CliError` and `ShellError` are the two classified variants.
    """

    kind: ClassVar[ErrorKind] = "generic"

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        source: str = "Unhandled Exception",
        cause: BaseException | None = None,
        actions: Sequence[str] | None = None,
        exit_code: int = 1,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.name = name or type(self).__name__
        self.source = source
        self.cause = cause
        self.actions: list[str] = list(actions or [])
        self.exit_code = exit_code
        self.data: dict[str, Any] = {}
        self.user_info = ErrorInfo()
        self.debug_info = ErrorInfo()
        self.dev_info = ErrorInfo()
        self._detail: Any = {}
        self._result_stack = ""
        if cause is not None:
            self.__cause__ = cause
            self._result_stack = getattr(cause, "result_stack", "") or ""

    def __str__(self) -> str:
        return self.message

    @property
    def detail(self) -> Any:
        return self._detail

    @property
    def result_stack(self) -> str:
        return self._result_stack

    @property
    def root_cause(self) -> BaseException:
        """Walk the cause chain down to the innermost error."""
        current: BaseException = self
        seen: set[int] = {id(current)}
        while True:
            nxt = getattr(current, "cause", None) or current.__cause__
            if nxt is None or id(nxt) in seen:
                return current
            seen.add(id(nxt))
            current = nxt

    def set_detail(self, detail: Any) -> FalconError:
        self._detail = detail
        return self

    def add_to_stack(self, stack_item: str) -> None:
        """Prepend a frame to the result stack; the most recent frame reads first."""
        indent = "    "
        if self._result_stack:
            self._result_stack = f"{indent}{stack_item}\n{self._result_stack}"
        else:
            self._result_stack = f"{indent}{stack_item}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "message": self.message,
            "source": self.source,
            "actions": list(self.actions),
            "result_stack": self._result_stack,
            "cause": repr(self.cause) if self.cause is not None else None,
        }

    @classmethod
    def wrap(cls, error: Any, source: str | None = None) -> FalconError:
        """
        Return `error` unchanged when it is already structured, otherwise wrap it.

        Exceptions are kept as the wrapper's `cause`; anything else is kept
        under `data["unknown_obj"]` so nothing is dropped.
        """
        if isinstance(error, FalconError):
            return error
        if isinstance(error, BaseException):
            return FalconError(
                str(error) or type(error).__name__,
                name=type(error).__name__,
                source=source or "Unhandled Exception",
                cause=error,
            )
        wrapped = FalconError(
            "Additional error detail saved to the FalconError.data mapping.",
            name="UnknownError",
            source=source or "Unhandled Exception",
        )
        wrapped.data = {"unknown_obj": error}
        return wrapped


class CliError(FalconError):
    """A CLI invocation that exited non-zero with a recognizable JSON error body."""

    kind: ClassVar[ErrorKind] = "cli"

    def __init__(
        self,
        std_out_buffer: str,
        message: str = "Unknown CLI Error",
        source: str = "",
    ) -> None:
        self.cli_error = parse_cli_error(std_out_buffer)
        super().__init__(
            f"{message}. {self.cli_error.message}",
            name="CliError",
            source=source,
            actions=self.cli_error.actions,
        )


class ShellError(FalconError):
    """A process that failed for shell-level reasons (signal, missing binary, crash)."""

    kind: ClassVar[ErrorKind] = "shell"

    def __init__(
        self,
        command: str,
        code: int | None,
        signal: str | None,
        std_err_buffer: str = "",
        std_out_buffer: str = "",
        source: str = "",
        message: str = "",
    ) -> None:
        if not message:
            message = (
                _first_line(std_err_buffer)
                or _first_line(std_out_buffer)
                or f"Unknown Shell Error (code={code}, signal={signal})"
            )
        super().__init__(message, name="ShellError", source=source)
        self.shell_error = ShellErrorDetail(
            command=command,
            code=code,
            signal=signal,
            message=message,
            stderr=std_err_buffer or "",
            stdout=std_out_buffer or "",
        )


def parse_cli_error(std_out_buffer: str) -> CliErrorDetail:
    try:
        parsed = json.loads(std_out_buffer)
    except (TypeError, ValueError):
        parsed = None

    if not isinstance(parsed, Mapping):
        return CliErrorDetail(
            name="UnparseableCliError",
            message="Unparseable CLI Error (see 'cli_error.result' for raw error)",
            status=999,
            stack="Unparseable CLI Error (see 'cli_error.result' for raw error)",
            result={"raw_result": std_out_buffer},
        )

    actions: list[str] = []
    if isinstance(parsed.get("actions"), list):
        actions.extend(str(item) for item in parsed["actions"])
    if parsed.get("action"):
        actions.append(str(parsed["action"]))

    status = parsed.get("status")
    return CliErrorDetail(
        name=parsed.get("name") or "UnknownCliError",
        message=parsed.get("message")
        or "Unknown CLI Error (see 'cli_error.result' for original CLI response)",
        status=status if isinstance(status, int) and not isinstance(status, bool) else 1,
        actions=tuple(actions),
        warnings=parsed.get("warnings") or [],
        stack=parsed.get("stack") or "",
        result=parsed.get("result") or {"raw_result": dict(parsed)},
    )


def _first_line(buffer: str | None) -> str:
    if not buffer:
        return ""
    for line in buffer.splitlines():
        if line.strip():
            return line.strip()
    return ""
