from __future__ import annotations

import asyncio
import logging
import os
import signal
from dataclasses import dataclass

from falcon.contracts.command_contracts.command_definition import CommandDefinition
from falcon.contracts.command_contracts.executor_config import ExecutorConfig
from falcon.contracts.result_contracts.result import FalconResult, ResultError
from falcon.errors import CliError, ShellError
from falcon.executors.parsing import detect_cli_error, safe_parse
from falcon.executors.sanitizer import compile_command
from falcon.notifications import progress_notifications, update_observer

EXECUTOR_SOURCE = "sfdx:execute_sfdx_command"

_logger = logging.getLogger("sfdx_falcon.executor")


@dataclass(frozen=True, slots=True)
class ProcessOutcome:
    """Exit facts of one finished child process, with fully drained buffers."""

    code: int | None
    signal: str | None
    std_out: str
    std_err: str
    timed_out: bool = False

    @classmethod
    def from_returncode(
        cls, returncode: int | None, std_out: str, std_err: str, *, timed_out: bool = False
    ) -> ProcessOutcome:
        # asyncio reports death by signal N as returncode -N.
        if returncode is not None and returncode < 0:
            return cls(None, _signal_name(-returncode), std_out, std_err, timed_out)
        return cls(returncode, None, std_out, std_err, timed_out)


def new_executor_result(command_def: CommandDefinition, command_string: str) -> FalconResult:
    result = FalconResult(
        EXECUTOR_SOURCE,
        "EXECUTOR",
        detail={
            "command_def": command_def,
            "command_string": command_string,
            "std_out_parsed": None,
            "std_out_buffer": None,
            "std_err_buffer": None,
        },
    )
    result.debug_result("Executor Result Initialized", EXECUTOR_SOURCE)
    return result


def finalize_executor_result(
    result: FalconResult,
    command_def: CommandDefinition,
    outcome: ProcessOutcome,
) -> FalconResult:
    """
    Classify a finished process into SUCCESS, FAILURE or ERROR.

    SUCCESS and FAILURE are returned. ERROR raises `ResultError` carrying the
    finalized Result.
    """
    command_string = result.detail["command_string"]
    result.update_detail(std_out_buffer=outcome.std_out, std_err_buffer=outcome.std_err)

    if outcome.timed_out:
        error = ShellError(
            command_string,
            outcome.code,
            outcome.signal,
            outcome.std_err,
            outcome.std_out,
            EXECUTOR_SOURCE,
            message=f"Command timed out: {command_def.command}",
        )
        return _reject(result, command_def, error, "CLI Command Timed Out")

    if outcome.code == 0:
        result.update_detail(std_out_parsed=safe_parse(outcome.std_out))
        update_observer(
            command_def.observer,
            f"[{result.duration_string}] SUCCESS: {command_def.success_msg}",
        )
        result.complete_success()
        result.debug_result("CLI Command Succeeded", EXECUTOR_SOURCE)
        return result

    if detect_cli_error(outcome.std_out):
        # The CLI answered with a recognizable JSON error: an expected outcome
        # the calling action may still decide to tolerate.
        error = CliError(outcome.std_out, command_def.error_msg or "Unknown CLI Error", EXECUTOR_SOURCE)
        update_observer(
            command_def.observer,
            f"[{result.duration_string}] FAILURE: {error.cli_error.message}",
        )
        result.complete_failure(error)
        result.debug_result("CLI Command Failed", EXECUTOR_SOURCE)
        return result

    error = ShellError(
        command_string,
        outcome.code,
        outcome.signal,
        outcome.std_err,
        outcome.std_out,
        EXECUTOR_SOURCE,
    )
    return _reject(result, command_def, error, "CLI Command Shell Error")


def _reject(
    result: FalconResult, command_def: CommandDefinition, error: ShellError, debug_msg: str
) -> FalconResult:
    update_observer(command_def.observer, f"[{result.duration_string}] ERROR: {error.message}")
    result.complete_error(error)
    result.debug_result(debug_msg, EXECUTOR_SOURCE)
    raise ResultError(result) from error


class SfdxExecutor:
    """
    Runs Salesforce CLI commands as detached shell child processes.

    One child process is live per `execute()` call. Environment flags come
    from the injected `ExecutorConfig`, merged over `os.environ` for the child
    only.
    """

    def __init__(self, config: ExecutorConfig | None = None) -> None:
        self.config = config or ExecutorConfig()

    async def execute(self, command_def: CommandDefinition) -> FalconResult:
        command_string = compile_command(command_def, cli_binary=self.config.cli_binary)
        result = new_executor_result(command_def, command_string)
        result.debug_result("Parsed SFDX Command Object to String", EXECUTOR_SOURCE)

        update_observer(command_def.observer, f"[0.000s] Executing {command_def.command}")
        interval_s = command_def.progress_interval_s or self.config.progress_interval_s

        try:
            proc = await asyncio.create_subprocess_shell(
                command_string,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, **self.config.env},
                cwd=self.config.cwd,
                start_new_session=self.config.detached,
            )
        except OSError as exc:
            _logger.warning("Failed to launch %s", command_string, exc_info=True)
            error = ShellError(command_string, None, None, str(exc), "", EXECUTOR_SOURCE)
            error.__cause__ = exc
            return _reject(result, command_def, error, "CLI Command Failed To Start")

        _logger.debug("Started pid=%s: %s", proc.pid, command_string)
        std_out = bytearray()
        std_err = bytearray()
        timed_out = False
        async with progress_notifications(
            command_def.progress_msg, interval_s, result, command_def.observer
        ):
            waiter = asyncio.gather(
                _drain(proc.stdout, std_out),
                _drain(proc.stderr, std_err),
                proc.wait(),
            )
            try:
                await asyncio.wait_for(waiter, timeout=self.config.timeout_s)
            except asyncio.CancelledError:
                _logger.warning("Cancelled; killing pid=%s: %s", proc.pid, command_string)
                self._kill(proc)
                await _reap(proc, waiter)
                raise
            except asyncio.TimeoutError:
                timed_out = True
                _logger.warning(
                    "Command exceeded %.1fs; killing pid=%s: %s",
                    self.config.timeout_s,
                    proc.pid,
                    command_string,
                )
                self._kill(proc)
                await proc.wait()

        outcome = ProcessOutcome.from_returncode(
            proc.returncode,
            std_out.decode("utf-8", errors="replace"),
            std_err.decode("utf-8", errors="replace"),
            timed_out=timed_out,
        )
        _logger.debug(
            "pid=%s exited code=%s signal=%s", proc.pid, outcome.code, outcome.signal
        )
        return finalize_executor_result(result, command_def, outcome)

    def _kill(self, proc: asyncio.subprocess.Process) -> None:
        try:
            if self.config.detached:
                # The child leads its own session, so its pid is the group id.
                os.killpg(proc.pid, signal.SIGKILL)
            else:
                proc.kill()
        except ProcessLookupError:
            pass


async def execute_sfdx_command(
    command_def: CommandDefinition, *, config: ExecutorConfig | None = None
) -> FalconResult:
    return await SfdxExecutor(config).execute(command_def)


async def _drain(stream: asyncio.StreamReader | None, buffer: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(65536)
        if not chunk:
            return
        buffer.extend(chunk)


async def _reap(proc: asyncio.subprocess.Process, waiter: asyncio.Future) -> None:
    try:
        await asyncio.wait_for(proc.wait(), timeout=1.0)
    except asyncio.TimeoutError:
        _logger.warning("pid=%s still running after SIGKILL", proc.pid)
    if waiter.done() and not waiter.cancelled() and waiter.exception() is not None:
        _logger.debug("pid=%s output drain ended with %r", proc.pid, waiter.exception())


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"SIG{signum}"
