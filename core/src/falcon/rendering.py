"""
Plain-text rendering of errors and Result trees.

Every function here is safe to call on partially built objects: missing
attributes render as ``None`` instead of raising, since these reports are
usually produced while something has already gone wrong.
"""

from __future__ import annotations

import pprint
import traceback
from typing import Any, Literal

from falcon.contracts.result_contracts.result import FalconResult
from falcon.errors import CliError, ErrorInfo, FalconError, ShellError

Verbosity = Literal["user", "debug", "developer"]

_DEFAULT_INFO = ErrorInfo()


def render_error(
    error: Any,
    child_inspect_depth: int = 2,
    detail_inspect_depth: int = 4,
    error_inspect_depth: int = 1,
) -> str:
    depths = (child_inspect_depth, detail_inspect_depth, error_inspect_depth)
    match error:
        case CliError():
            return _render_base(error, *depths) + _render_cli(error, child_inspect_depth)
        case ShellError():
            return _render_base(error, *depths) + _render_shell(error)
        case FalconError():
            return _render_base(error, *depths)
        case BaseException():
            return _render_exception(error, child_inspect_depth)
        case _:
            return _render_unknown(error, child_inspect_depth)


def render_error_for(error: Any, verbosity: Verbosity = "user") -> str:
    """
    Render one of the audience tiers.

    Every tier opens with the `user_info` block. "debug" adds `debug_info`,
    source, Result stack and root cause. "developer" adds `debug_info` and
    `dev_info`, then the full `render_error()` report.
    """
    structured = FalconError.wrap(error)
    lines = _render_info(structured, structured.user_info)
    if verbosity == "user":
        return "\n".join(lines)

    if _is_set(structured.debug_info):
        lines.extend(_render_info(structured, structured.debug_info))
    if verbosity == "developer":
        if _is_set(structured.dev_info):
            lines.extend(_render_info(structured, structured.dev_info))
        lines.append(render_error(error))
        return "\n".join(lines)

    lines.append(f"Source: {structured.source}")
    if structured.result_stack:
        lines.append("Result Stack:")
        lines.append(structured.result_stack)
    root = structured.root_cause
    if root is not structured:
        lines.append(f"Root Cause: {type(root).__name__}: {root}")
    return "\n".join(lines)


def render_result_tree(result: FalconResult, *, indent: str = "  ") -> str:
    lines: list[str] = []
    _render_result_node(result, lines, depth=0, indent=indent)
    return "\n".join(lines)


def _render_result_node(result: FalconResult, lines: list[str], *, depth: int, indent: str) -> None:
    prefix = indent * depth
    lines.append(
        f"{prefix}[{result.status}] {result.stack_label} ({result.duration_string})"
    )
    if result.error is not None:
        lines.append(f"{prefix}{indent}! {result.error.name}: {result.error.message}")
    suppressed = result.detail.get("suppressed_failure")
    if suppressed:
        lines.append(f"{prefix}{indent}~ tolerated {suppressed}")
    for child in result.children:
        _render_result_node(child, lines, depth=depth + 1, indent=indent)


def _render_info(error: FalconError, info: ErrorInfo) -> list[str]:
    title = info.title if info.title != _DEFAULT_INFO.title else error.name
    message = info.message if info.message != _DEFAULT_INFO.message else error.message
    lines = [f"{title}: {message}"]
    actions = info.actions or error.actions
    for action in actions:
        lines.append(f"  - {action}")
    return lines


def _render_base(error: FalconError, child_depth: int, detail_depth: int, error_depth: int) -> str:
    output = f"\nError Name:    {_get(error, 'name')}\nError Message: {_get(error, 'message')}"
    actions = _get(error, "actions")
    if actions:
        output += f"\nError Actions (Depth {child_depth}):\n{_inspect(actions, child_depth)}"
    output += f"\nError Source:  {_get(error, 'source')}"
    output += f"\nError Stack:\n{_format_traceback(error)}"
    result_stack = _get(error, "result_stack")
    if result_stack:
        output += f"\nResult Stack:\n{result_stack}"
    detail = _get(error, "detail")
    if detail:
        output += f"\nError Detail (Depth {detail_depth}):\n{_inspect(detail, detail_depth)}"
    data = _get(error, "data")
    if data:
        output += f"\nError Data (Depth {error_depth}):\n{_inspect(data, error_depth)}"
    return output


def _render_cli(error: CliError, child_depth: int) -> str:
    cli = _get(error, "cli_error")
    if cli is None:
        return ""
    output = ""
    if _get(cli, "name"):
        output += f"\nCLI Error Name:    {cli.name}"
    if _get(cli, "message"):
        output += f"\nCLI Error Message: {cli.message}"
    if _get(cli, "status") is not None:
        output += f"\nCLI Error Status:  {cli.status}"
    if _get(cli, "actions"):
        output += "\nCLI Error Actions:"
        for action in cli.actions:
            output += f"\n{action}"
    if _get(cli, "warnings"):
        output += f"\nCLI Error Warnings:\n{_inspect(cli.warnings, child_depth)}"
    if _get(cli, "stack"):
        output += f"\nCLI Error Stack:\n{cli.stack}"
    if _get(cli, "result") is not None:
        raw_depth = child_depth + 2
        output += f"\nCLI Error Raw Result: (Depth {raw_depth})\n{_inspect(cli.result, raw_depth)}"
    return output


def _render_shell(error: ShellError) -> str:
    shell = _get(error, "shell_error")
    if shell is None:
        return ""
    output = ""
    if _get(shell, "command"):
        output += f"\nShellError Command: {shell.command}"
    output += f"\nShellError Code:    {_get(shell, 'code')}"
    output += f"\nShellError Signal:  {_get(shell, 'signal')}"
    if _get(shell, "message"):
        output += f"\nShellError Message: {shell.message}"
    if _get(shell, "stderr"):
        output += f"\nShellError StdErr:\n{shell.stderr}"
    if _get(shell, "stdout"):
        output += f"\nShellError StdOut:\n{shell.stdout}"
    return output


def _render_exception(error: BaseException, child_depth: int) -> str:
    output = f"\nError Name:    {type(error).__name__}\nError Message: {error}"
    output += f"\nError Stack:\n{_format_traceback(error)}"
    args = getattr(error, "args", ())
    if args:
        output += f"\nError Args (Depth {child_depth}):\n{_inspect(args, child_depth)}"
    return output


def _render_unknown(obj: Any, child_depth: int) -> str:
    return (
        "\nError Name:    UNKNOWN"
        "\nError Message: The object provided is not an exception"
        "\nError Stack:   Not Available"
        f"\nRaw Object: (Depth {child_depth})\n{_inspect(obj, child_depth)}"
    )


def _format_traceback(error: BaseException) -> str:
    try:
        return "".join(traceback.format_exception(error)).rstrip()
    except Exception:
        return "Not Available"


def _inspect(value: Any, depth: int) -> str:
    try:
        return pprint.pformat(value, depth=depth, width=100, sort_dicts=False)
    except Exception:
        return repr(value)


def _get(obj: Any, name: str) -> Any:
    try:
        return getattr(obj, name, None)
    except Exception:
        return None


def _is_set(info: ErrorInfo) -> bool:
    return info != _DEFAULT_INFO
