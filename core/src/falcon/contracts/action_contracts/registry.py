from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from falcon.contracts.action_contracts.action import Action, ActionInfo


class ActionNotFoundError(KeyError):
    pass


@runtime_checkable
class ActionRegistry(Protocol):
    def get(self, action_name: str) -> Action:
        """Return a fresh action for the name or raise ActionNotFoundError."""
        ...

    def list(self) -> Iterable[ActionInfo]:
        """List available actions (for UI / debugging)."""
        ...
