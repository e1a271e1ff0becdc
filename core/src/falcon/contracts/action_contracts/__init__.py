from .action import Action, ActionInfo, ActionState, ActionType
from .action_context import ActionContext, TargetOrg
from .recipe import Recipe, RecipeStep
from .registry import ActionNotFoundError, ActionRegistry

__all__ = [
    "Action",
    "ActionContext",
    "ActionInfo",
    "ActionNotFoundError",
    "ActionRegistry",
    "ActionState",
    "ActionType",
    "Recipe",
    "RecipeStep",
    "TargetOrg",
]
