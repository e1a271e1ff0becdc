from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from falcon.contracts.command_contracts.executor import CommandExecutor
from falcon.contracts.command_contracts.observer import Observer

LogLevel = str


@dataclass(frozen=True, slots=True)
class TargetOrg:
    """The org a recipe runs against."""

    alias: str
    username: str | None = None
    org_id: str | None = None
    is_scratch_org: bool = False


@dataclass(frozen=True, slots=True)
class ActionContext:
    """
    Core-provided runtime context for action execution.

    Keep this stable: actions should only depend on these fields.
    """

    target_org: TargetOrg
    executor: CommandExecutor
    config_path: Path = field(default_factory=lambda: Path("config"))
    dev_hub_alias: str | None = None
    log_level: LogLevel = "error"
    observer: Observer | None = None
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("sfdx_falcon.action")
    )
    # Pause for the action's success/error delay so a task-list UI can show it.
    display_delays: bool = False
