from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from falcon.contracts import Action, ActionInfo, ActionNotFoundError, ActionRegistry


@dataclass
class DictActionRegistry(ActionRegistry):
    """Maps action names to factories; every lookup builds a fresh action."""

    actions: dict[str, Callable[[], Action]]

    def get(self, action_name: str) -> Action:
        try:
            factory = self.actions[action_name]
        except KeyError as e:
            raise ActionNotFoundError(action_name) from e
        return factory()

    def list(self) -> Iterable[ActionInfo]:
        return [factory().info for factory in self.actions.values()]
