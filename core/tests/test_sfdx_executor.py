from __future__ import annotations

import asyncio
import json
import os
import stat
import sys
from pathlib import Path

import pytest

from falcon.contracts import CommandDefinition, ExecutorConfig, ResultError
from falcon.errors import CliError, ShellError
from falcon.executors.sfdx import SfdxExecutor, execute_sfdx_command
from falcon.testkit import RecordingObserver

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="fake CLI is a POSIX shell script")


def _fake_cli(tmp_path: Path, body: str) -> str:
    script = tmp_path / "fake-sfdx"
    script.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


def _executor(tmp_path: Path, body: str, **config: object) -> SfdxExecutor:
    return SfdxExecutor(ExecutorConfig(cli_binary=_fake_cli(tmp_path, body), **config))


def _command(observer: RecordingObserver | None = None, **kwargs: object) -> CommandDefinition:
    defaults: dict[str, object] = {
        "command": "force:org:display",
        "command_flags": {"FLAG_JSON": True},
        "progress_msg": "Displaying org",
        "error_msg": "Display failed",
        "success_msg": "Org displayed",
        "observer": observer,
    }
    defaults.update(kwargs)
    return CommandDefinition(**defaults)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_exit_zero_resolves_with_success_and_parsed_stdout(tmp_path: Path) -> None:
    executor = _executor(tmp_path, """echo '{"status":0,"result":{"id":"abc"}}'""")
    observer = RecordingObserver()

    result = await executor.execute(_command(observer))

    assert result.result_type == "EXECUTOR"
    assert result.status == "SUCCESS"
    assert result.detail["std_out_parsed"]["result"]["id"] == "abc"
    assert result.detail["command_string"].endswith("force:org:display --json")
    assert result.detail["std_err_buffer"] == ""
    assert observer.messages[0] == "[0.000s] Executing force:org:display"
    assert observer.messages[-1].endswith("SUCCESS: Org displayed")


@pytest.mark.asyncio
async def test_exit_zero_with_non_json_stdout_keeps_raw_string(tmp_path: Path) -> None:
    executor = _executor(tmp_path, "echo 'plain text'")

    result = await executor.execute(_command())

    assert result.status == "SUCCESS"
    assert result.detail["std_out_parsed"] == "plain text\n"


@pytest.mark.asyncio
async def test_recognized_cli_error_resolves_with_failure(tmp_path: Path) -> None:
    executor = _executor(
        tmp_path,
        """echo '{"status":1,"name":"ScratchOrgNotFound","message":"no such org"}'\nexit 1""",
    )

    result = await executor.execute(_command())

    assert result.status == "FAILURE"
    assert isinstance(result.error, CliError)
    assert result.error.cli_error.name == "ScratchOrgNotFound"
    assert result.error.message == "Display failed. no such org"
    assert result.error.source == "sfdx:execute_sfdx_command"


@pytest.mark.asyncio
async def test_process_killed_by_signal_rejects_with_shell_error(tmp_path: Path) -> None:
    # Kill the whole process group, including the wrapping shell.
    executor = _executor(tmp_path, "echo 'not json'\nkill -9 0")

    with pytest.raises(ResultError) as excinfo:
        await executor.execute(_command())

    result = excinfo.value.result
    assert result.status == "ERROR"
    assert isinstance(result.error, ShellError)
    assert result.error.shell_error.signal == "SIGKILL"
    assert result.error.shell_error.code is None
    assert "EXECUTOR:sfdx:execute_sfdx_command (ERROR)" in result.error.result_stack


@pytest.mark.asyncio
async def test_unrecognized_non_zero_exit_rejects_with_shell_error(tmp_path: Path) -> None:
    executor = _executor(tmp_path, "echo 'boom' >&2\nexit 3")

    with pytest.raises(ResultError) as excinfo:
        await executor.execute(_command())

    error = excinfo.value.error
    assert isinstance(error, ShellError)
    assert error.shell_error.code == 3
    assert error.shell_error.signal is None
    assert error.shell_error.stderr == "boom\n"
    assert error.message == "boom"


@pytest.mark.asyncio
async def test_json_without_error_shape_is_a_shell_error(tmp_path: Path) -> None:
    executor = _executor(tmp_path, """echo '{"status":0,"result":{}}'\nexit 1""")

    with pytest.raises(ResultError) as excinfo:
        await executor.execute(_command())

    assert isinstance(excinfo.value.error, ShellError)


@pytest.mark.asyncio
async def test_missing_binary_is_a_shell_error(tmp_path: Path) -> None:
    executor = SfdxExecutor(ExecutorConfig(cli_binary=str(tmp_path / "does-not-exist")))

    with pytest.raises(ResultError) as excinfo:
        await executor.execute(_command())

    error = excinfo.value.error
    assert isinstance(error, ShellError)
    assert error.shell_error.code == 127


@pytest.mark.asyncio
async def test_env_flags_are_injected_without_touching_parent_env(
    tmp_path: Path, monkeypatch
) -> None:
    monkeypatch.delenv("SFDX_JSON_TO_STDOUT", raising=False)
    monkeypatch.delenv("FALCON_TEST_FLAG", raising=False)
    body = (
        "printf '{\"status\":0,\"result\":{\"json\":\"%s\",\"auto\":\"%s\",\"extra\":\"%s\"}}' "
        '"$SFDX_JSON_TO_STDOUT" "$SFDX_AUTOUPDATE_DISABLE" "$FALCON_TEST_FLAG"'
    )
    executor = _executor(tmp_path, body, env={"FALCON_TEST_FLAG": "yes"})

    result = await executor.execute(_command())

    assert result.detail["std_out_parsed"]["result"] == {
        "json": "true",
        "auto": "true",
        "extra": "yes",
    }
    assert "SFDX_JSON_TO_STDOUT" not in os.environ
    assert "FALCON_TEST_FLAG" not in os.environ


@pytest.mark.asyncio
async def test_arguments_reach_the_cli_as_single_words(tmp_path: Path) -> None:
    body = """printf '{"status":0,"result":{"argc":%d,"last":"%s"}}' "$#" "$4\""""
    executor = _executor(tmp_path, body)
    command_def = _command(
        command="force:apex:execute",
        command_flags={"FLAG_APEXCODEFILE": "my scripts/setup.apex", "FLAG_JSON": True},
    )

    result = await executor.execute(command_def)

    parsed = result.detail["std_out_parsed"]["result"]
    assert parsed == {"argc": 4, "last": "--json"}
    assert "'my scripts/setup.apex'" in result.detail["command_string"]


@pytest.mark.asyncio
async def test_timeout_kills_the_process_group_and_errors(tmp_path: Path) -> None:
    executor = _executor(tmp_path, "echo started\nsleep 30", timeout_s=0.3)

    with pytest.raises(ResultError) as excinfo:
        await executor.execute(_command())

    error = excinfo.value.error
    assert isinstance(error, ShellError)
    assert error.message == "Command timed out: force:org:display"
    assert error.shell_error.signal == "SIGKILL"
    assert excinfo.value.result.detail["std_out_buffer"] == "started\n"


@pytest.mark.asyncio
async def test_progress_ticks_while_running(tmp_path: Path) -> None:
    executor = _executor(
        tmp_path,
        """sleep 0.5\necho '{"status":0,"result":{}}'""",
        progress_interval_s=0.1,
    )
    observer = RecordingObserver()

    await executor.execute(_command(observer))

    ticks = [message for message in observer.messages if message.endswith("] Displaying org")]
    assert len(ticks) >= 2
    assert observer.messages[0] == "[0.000s] Executing force:org:display"
    assert observer.messages[-1].endswith("SUCCESS: Org displayed")


@pytest.mark.asyncio
async def test_execute_sfdx_command_uses_given_config(tmp_path: Path) -> None:
    config = ExecutorConfig(cli_binary=_fake_cli(tmp_path, """echo '{"status":0,"result":[]}'"""))

    result = await execute_sfdx_command(_command(), config=config)

    assert result.status == "SUCCESS"
    assert json.loads(result.detail["std_out_buffer"]) == {"status": 0, "result": []}


@pytest.mark.asyncio
async def test_cancellation_kills_the_process_group(tmp_path: Path) -> None:
    marker = tmp_path / "alive"
    executor = _executor(tmp_path, f"sleep 1.5\ntouch '{marker}'")

    task = asyncio.create_task(executor.execute(_command()))
    await asyncio.sleep(0.3)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    await asyncio.sleep(1.8)
    assert not marker.exists()
