from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Observer(Protocol):
    """
    Receives free-text progress notifications.

    Rendering is owned by the caller (task list, spinner, log handler, ...).
    """

    def update(self, message: str) -> None: ...
