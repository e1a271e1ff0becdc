from __future__ import annotations

import asyncio
import json
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from falcon.contracts.command_contracts.command_definition import CommandDefinition
from falcon.contracts.result_contracts.result import FalconResult
from falcon.executors.sanitizer import compile_command
from falcon.executors.sfdx import ProcessOutcome, finalize_executor_result, new_executor_result
from falcon.notifications import update_observer


@dataclass(frozen=True, slots=True)
class FakeProcessOutcome:
    """Canned exit of a fake CLI process."""

    returncode: int = 0
    std_out: str = ""
    std_err: str = ""
    timed_out: bool = False

    @classmethod
    def success(cls, result: Any = None) -> FakeProcessOutcome:
        return cls(0, json.dumps({"status": 0, "result": result if result is not None else {}}))

    @classmethod
    def cli_failure(
        cls, name: str, message: str, *, status: int = 1, returncode: int = 1, **extra: Any
    ) -> FakeProcessOutcome:
        body: dict[str, Any] = {"status": status, "name": name, "message": message, **extra}
        return cls(returncode, json.dumps(body))

    @classmethod
    def shell_error(
        cls, returncode: int = -9, *, std_err: str = "", std_out: str = ""
    ) -> FakeProcessOutcome:
        return cls(returncode, std_out, std_err)


@dataclass(frozen=True, slots=True)
class ExecutorCall:
    """Record of an execute() call for assertions in tests."""

    command_def: CommandDefinition
    command_string: str

    @property
    def flags(self) -> Mapping[str, Any]:
        return self.command_def.command_flags


class FakeExecutor:
    """
    In-memory CommandExecutor for unit tests.

    Outcomes are consumed in order (then `default` is reused) and classified by
    the same routine as the real executor, so SUCCESS/FAILURE/ERROR semantics
    match a real run.
    """

    def __init__(
        self,
        outcomes: Iterable[FakeProcessOutcome] | None = None,
        *,
        default: FakeProcessOutcome | None = None,
        cli_binary: str = "sfdx",
    ) -> None:
        self._outcomes: deque[FakeProcessOutcome] = deque(outcomes or [])
        self._default = default or FakeProcessOutcome.success()
        self._cli_binary = cli_binary
        self._calls: list[ExecutorCall] = []

    @property
    def calls(self) -> list[ExecutorCall]:
        """Return the recorded calls in order."""
        return list(self._calls)

    def queue(self, *outcomes: FakeProcessOutcome) -> None:
        self._outcomes.extend(outcomes)

    async def execute(self, command_def: CommandDefinition) -> FalconResult:
        command_string = compile_command(command_def, cli_binary=self._cli_binary)
        self._calls.append(ExecutorCall(command_def=command_def, command_string=command_string))
        outcome = self._outcomes.popleft() if self._outcomes else self._default

        result = new_executor_result(command_def, command_string)
        update_observer(command_def.observer, f"[0.000s] Executing {command_def.command}")
        await asyncio.sleep(0)
        return finalize_executor_result(
            result,
            command_def,
            ProcessOutcome.from_returncode(
                outcome.returncode, outcome.std_out, outcome.std_err, timed_out=outcome.timed_out
            ),
        )


class RecordingObserver:
    """Observer that keeps every progress message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def update(self, message: str) -> None:
        self.messages.append(message)
