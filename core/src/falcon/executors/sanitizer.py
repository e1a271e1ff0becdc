"""
Compile command definitions into shell strings.

Quoting here is an allow-list filter: anything outside ``[A-Za-z0-9_/:=-]`` is
single-quoted. It is not a general shell-escaping routine, so command
definitions must never be built from untrusted input.

Flag values of `True` render as a bare flag. `False` and `None` leave the flag
out entirely, so a switch can be turned off by setting it to `False`.
"""

from __future__ import annotations

import re
from typing import Any

from falcon.contracts.command_contracts.command_definition import FLAG_PREFIX, CommandDefinition

_UNSAFE_ARGUMENT_CHARS = re.compile(r"[^A-Za-z0-9_/:=-]")
_UNSAFE_FLAG_CHARS = re.compile(r"[^a-z0-9-]", re.IGNORECASE)
_LEADING_EMPTY_QUOTES = re.compile(r"^(?:'')+")


def sanitize_argument(argument: Any) -> str:
    value = str(argument).strip()
    if not _UNSAFE_ARGUMENT_CHARS.search(value):
        return value
    quoted = "'" + value.replace("'", "'\\''") + "'"
    quoted = _LEADING_EMPTY_QUOTES.sub("", quoted)
    return quoted.replace("\\'''", "\\'")


def sanitize_flag(flag: Any) -> str:
    return _UNSAFE_FLAG_CHARS.sub("", str(flag).strip())


def render_flags(command_flags: dict[str, Any] | Any) -> list[str]:
    """Render `FLAG_*` entries in insertion order; other keys are ignored."""
    tokens: list[str] = []
    for key, value in command_flags.items():
        if key[: len(FLAG_PREFIX)].upper() != FLAG_PREFIX:
            continue
        if value is None or value is False:
            continue
        flag = key[len(FLAG_PREFIX) :].lower()
        hyphen = "-" if len(flag) == 1 else "--"
        resolved_flag = sanitize_flag(hyphen + flag)
        if value is True:
            tokens.append(resolved_flag)
            continue
        tokens.append(f"{resolved_flag} {sanitize_argument(value)}")
    return tokens


def compile_command(command_def: CommandDefinition, *, cli_binary: str = "sfdx") -> str:
    parts = [cli_binary, command_def.command]
    # Positional arguments must precede flags.
    parts.extend(sanitize_argument(argument) for argument in command_def.command_args)
    parts.extend(render_flags(command_def.command_flags))
    return " ".join(parts)
