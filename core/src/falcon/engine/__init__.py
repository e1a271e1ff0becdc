from falcon.engine.action import ActionOptionsError, FalconAction, NoOptions
from falcon.engine.recipe_engine import RecipeEngine, RecipeValidationError

__all__ = [
    "ActionOptionsError",
    "FalconAction",
    "NoOptions",
    "RecipeEngine",
    "RecipeValidationError",
]
