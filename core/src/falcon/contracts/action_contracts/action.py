from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

from falcon.contracts.action_contracts.action_context import ActionContext
from falcon.contracts.result_contracts.result import FalconResult

ActionType = Literal["SFDX_CLI", "JSFORCE", "PLUGIN"]
ActionState = Literal["INITIALIZED", "VALIDATING", "EXECUTING", "SUCCEEDED", "FAILED", "ERRORED"]


@dataclass(frozen=True, slots=True)
class ActionInfo:
    name: str
    command: str
    description: str
    action_type: ActionType = "SFDX_CLI"
    success_delay_s: float = 2.0
    error_delay_s: float = 2.0
    progress_interval_s: float = 1.0


@runtime_checkable
class Action(Protocol):
    """
    Action interface contract.

    Actions are named units of work (delete-scratch-org, execute-apex, ...)
    that the recipe engine runs in order.
    """

    @property
    def info(self) -> ActionInfo: ...

    @property
    def state(self) -> ActionState: ...

    def validate_options(self, options: Mapping[str, Any] | None) -> Any:
        """Validate options or raise ActionOptionsError before any command runs."""
        ...

    async def execute(
        self, context: ActionContext, options: Mapping[str, Any] | None = None
    ) -> FalconResult:
        """
        Run the action and return its ACTION Result.

        Raises ResultError when the action completes with ERROR.
        """
        ...
