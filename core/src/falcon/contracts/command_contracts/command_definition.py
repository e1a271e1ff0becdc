from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from falcon.contracts.command_contracts.observer import Observer

FLAG_PREFIX = "FLAG_"


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    """
    One Salesforce CLI invocation, before it is compiled to a shell string.

    Only `command_flags` keys starting with `FLAG_` are treated as flags,
    e.g. `{"FLAG_TARGETUSERNAME": "dev@org.com", "FLAG_JSON": True}`.
    """

    command: str
    command_args: Sequence[Any] = field(default_factory=tuple)
    command_flags: Mapping[str, Any] = field(default_factory=dict)

    progress_msg: str = ""
    error_msg: str = ""
    success_msg: str = ""

    observer: Observer | None = None
    # Overrides ExecutorConfig.progress_interval_s for this command only.
    progress_interval_s: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": self.command,
            "command_args": [str(arg) for arg in self.command_args],
            "command_flags": {key: value for key, value in self.command_flags.items()},
            "progress_msg": self.progress_msg,
            "error_msg": self.error_msg,
            "success_msg": self.success_msg,
        }
