from __future__ import annotations

from typing import Protocol, runtime_checkable

from falcon.contracts.command_contracts.command_definition import CommandDefinition
from falcon.contracts.result_contracts.result import FalconResult


@runtime_checkable
class CommandExecutor(Protocol):
    """
    Runs one command definition and classifies its outcome.

    Returns an EXECUTOR Result with status SUCCESS or FAILURE and raises
    `ResultError` (carrying an ERROR Result) for anything unclassifiable.
    """

    async def execute(self, command_def: CommandDefinition) -> FalconResult: ...
