"""
Base class for recipe actions.

An action validates its options, builds one or more command definitions,
runs them through the context's executor and folds each EXECUTOR Result into
its own ACTION Result. Subclasses implement `initialize_action()` and
`execute_action()`; the lifecycle lives in `execute()`.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError

from falcon.configuration import ConfigError, format_validation_error
from falcon.contracts.action_contracts.action import ActionInfo, ActionState
from falcon.contracts.action_contracts.action_context import ActionContext
from falcon.contracts.command_contracts.command_definition import CommandDefinition
from falcon.contracts.result_contracts.result import FalconResult, ResultError, ResultOptions
from falcon.errors import CliError


class ActionOptionsError(ConfigError):
    """Raised when an action's options are missing or invalid."""

    def __init__(self, action_name: str, message: str) -> None:
        super().__init__(f"Invalid options for action '{action_name}': {message}")
        self.action_name = action_name


class NoOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")


class FalconAction(ABC):
    """
    One named unit of work in a recipe.

    State machine: INITIALIZED -> VALIDATING -> EXECUTING -> one of
    SUCCEEDED, FAILED or ERRORED. An instance runs at most once.
    """

    options_model: ClassVar[type[BaseModel]] = NoOptions
    result_options: ClassVar[ResultOptions] = ResultOptions()
    # CLI error names whose FAILURE is treated as ACTION-level SUCCESS.
    tolerated_failures: ClassVar[frozenset[str]] = frozenset()

    def __init__(self) -> None:
        self._info = self.initialize_action()
        self._state: ActionState = "INITIALIZED"
        self.logger = logging.getLogger(f"sfdx_falcon.action.{self._info.name}")

    @property
    def info(self) -> ActionInfo:
        return self._info

    @property
    def state(self) -> ActionState:
        return self._state

    @abstractmethod
    def initialize_action(self) -> ActionInfo:
        """Return static metadata: name, command, description and display delays."""
        raise NotImplementedError

    @abstractmethod
    async def execute_action(
        self, context: ActionContext, options: Any, action_result: FalconResult
    ) -> None:
        """Build command definitions and fold their results in via `run_command()`."""
        raise NotImplementedError

    def validate_options(self, options: Mapping[str, Any] | None) -> Any:
        try:
            return self.options_model.model_validate(dict(options or {}))
        except ValidationError as exc:
            raise ActionOptionsError(
                self._info.name, format_validation_error("options", exc)
            ) from exc

    async def execute(
        self, context: ActionContext, options: Mapping[str, Any] | None = None
    ) -> FalconResult:
        if self._state != "INITIALIZED":
            raise RuntimeError(f"Action '{self._info.name}' already ran (state={self._state})")

        self._state = "VALIDATING"
        try:
            parsed = self.validate_options(options)
        except ActionOptionsError:
            self._state = "ERRORED"
            raise

        self._state = "EXECUTING"
        action_result = self.create_action_result(context, parsed)
        self.logger.info("Executing %s against '%s'", self._info.name, context.target_org.alias)
        try:
            await self.execute_action(context, parsed, action_result)
        except ResultError as exc:
            if not action_result.is_finalized:
                action_result.complete_error(exc.error or exc)
            if action_result.status == "ERROR":
                self._state = "ERRORED"
                self.logger.error("%s errored: %s", self._info.name, action_result.error)
                await self._display_delay(context, self._info.error_delay_s)
                if exc.result is action_result:
                    raise
                raise ResultError(action_result) from exc
            self._log_after_completion(action_result, exc)
        except Exception as exc:
            if not action_result.is_finalized:
                action_result.complete_error(exc)
            if action_result.status == "ERROR":
                self._state = "ERRORED"
                self.logger.error(
                    "%s raised %s", self._info.name, type(exc).__name__, exc_info=True
                )
                await self._display_delay(context, self._info.error_delay_s)
                raise ResultError(action_result) from exc
            self._log_after_completion(action_result, exc)

        if action_result.is_running:
            action_result.complete_success()

        if action_result.status == "SUCCESS":
            self._state = "SUCCEEDED"
            await self._display_delay(context, self._info.success_delay_s)
        else:
            self._state = "FAILED"
            self.logger.warning("%s failed: %s", self._info.name, action_result.error)
            await self._display_delay(context, self._info.error_delay_s)
        return action_result

    def create_action_result(self, context: ActionContext, options: Any) -> FalconResult:
        dumped = options.model_dump(mode="json") if isinstance(options, BaseModel) else options
        return FalconResult(
            self._info.name,
            "ACTION",
            self.result_options,
            detail={
                "action_name": self._info.name,
                "action_type": self._info.action_type,
                "action_options": dumped,
                "target_org": context.target_org.alias,
                "command_defs": [],
            },
        )

    def command_definition(
        self,
        context: ActionContext,
        *,
        progress_msg: str,
        error_msg: str,
        success_msg: str,
        command_flags: Mapping[str, Any],
        command_args: tuple[Any, ...] = (),
        command: str | None = None,
    ) -> CommandDefinition:
        return CommandDefinition(
            command=command or self._info.command,
            command_args=command_args,
            command_flags=dict(command_flags),
            progress_msg=progress_msg,
            error_msg=error_msg,
            success_msg=success_msg,
            observer=context.observer,
            progress_interval_s=self._info.progress_interval_s,
        )

    async def run_command(
        self,
        action_result: FalconResult,
        context: ActionContext,
        command_def: CommandDefinition,
    ) -> FalconResult:
        """
        Execute one command and fold its EXECUTOR Result into `action_result`.

        Returns the EXECUTOR Result. Raises `ResultError` when the folding
        policy turns the child's outcome into an ACTION-level ERROR.

        Once `action_result` is finalized (an earlier command's FAILURE was
        bubbled), nothing is launched and `action_result` itself is returned.
        """
        if action_result.is_finalized:
            self.logger.info(
                "%s skipped %s: action already completed with %s",
                self._info.name,
                command_def.command,
                action_result.status,
            )
            return action_result

        action_result.update_detail(
            command_defs=[*action_result.detail["command_defs"], command_def.to_dict()]
        )
        try:
            executor_result = await context.executor.execute(command_def)
        except ResultError as exc:
            action_result.add_rejected_child(exc.result)
            return exc.result

        tolerated = self._tolerated_failure_name(executor_result)
        if tolerated is not None:
            self.logger.info("%s tolerated CLI failure %s", self._info.name, tolerated)
            action_result.add_child(executor_result)
            action_result.update_detail(suppressed_failure=tolerated)
            return executor_result

        action_result.add_resolved_child(executor_result)
        return executor_result

    def _log_after_completion(self, action_result: FalconResult, exc: BaseException) -> None:
        # A finalized Result keeps its status; the late exception is only logged.
        self.logger.warning(
            "%s raised %s after completing with %s",
            self._info.name,
            type(exc).__name__,
            action_result.status,
            exc_info=True,
        )

    def _tolerated_failure_name(self, executor_result: FalconResult) -> str | None:
        if executor_result.status != "FAILURE":
            return None
        error = executor_result.error
        if isinstance(error, CliError) and error.cli_error.name in self.tolerated_failures:
            return error.cli_error.name
        return None

    async def _display_delay(self, context: ActionContext, delay_s: float) -> None:
        if context.display_delays and delay_s > 0:
            await asyncio.sleep(delay_s)
