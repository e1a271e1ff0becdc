from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class RecipeStep:
    action: str
    options: Mapping[str, Any] = field(default_factory=dict)
    description: str | None = None


@dataclass(frozen=True, slots=True)
class Recipe:
    """
    Ordered sequence of actions run against one target org.

    Steps run strictly one after another: later steps usually depend on state
    created by earlier ones.
    """

    name: str
    steps: Sequence[RecipeStep] = field(default_factory=tuple)
    description: str | None = None
    halt_on_failure: bool = True

    def short_name(self) -> str:
        """Human-friendly identifier for logs/UI."""
        return f"{self.name} ({len(self.steps)} steps)"
