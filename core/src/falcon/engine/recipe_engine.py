from __future__ import annotations

import logging
from collections.abc import Sequence

from falcon.configuration import ConfigError
from falcon.contracts.action_contracts.action_context import ActionContext
from falcon.contracts.action_contracts.recipe import Recipe
from falcon.contracts.action_contracts.registry import ActionNotFoundError, ActionRegistry
from falcon.contracts.result_contracts.result import FalconResult, ResultError, ResultOptions
from falcon.engine.action import ActionOptionsError
from falcon.errors import FalconError

_logger = logging.getLogger("sfdx_falcon.recipe")


class RecipeValidationError(ConfigError):
    def __init__(self, recipe_name: str, issues: Sequence[str]) -> None:
        self.recipe_name = recipe_name
        self.issues = list(issues)
        super().__init__(f"Recipe '{recipe_name}' is invalid: " + "; ".join(self.issues))


class RecipeEngine:
    """
    Runs recipe steps strictly in order against one target org.

    Later steps usually depend on earlier ones (create an org, then run Apex
    in it), so at most one action and one child process is live at a time.
    """

    def __init__(self, registry: ActionRegistry) -> None:
        self.registry = registry

    def validate(self, recipe: Recipe) -> None:
        """Pre-flight every step; raise RecipeValidationError listing all issues."""
        issues: list[str] = []
        if not recipe.name or not recipe.name.strip():
            issues.append("name must be a non-empty string")
        if not recipe.steps:
            issues.append("steps must not be empty")

        for index, step in enumerate(recipe.steps):
            try:
                action = self.registry.get(step.action)
            except ActionNotFoundError:
                issues.append(f"steps[{index}]: unknown action '{step.action}'")
                continue
            try:
                action.validate_options(step.options)
            except ActionOptionsError as exc:
                issues.append(f"steps[{index}]: {exc}")

        if issues:
            raise RecipeValidationError(recipe.name, issues)

    async def run(self, recipe: Recipe, context: ActionContext) -> FalconResult:
        """
        Run the recipe and return its RECIPE Result.

        SUCCESS and FAILURE are returned; an ERROR in any step stops the
        recipe and raises `ResultError`.
        """
        self.validate(recipe)
        recipe_result = FalconResult(
            recipe.name,
            "RECIPE",
            ResultOptions(bubble_failure=recipe.halt_on_failure),
            detail={
                "recipe": recipe.short_name(),
                "target_org": context.target_org.alias,
                "steps_total": len(recipe.steps),
                "steps_completed": 0,
                "failed_steps": [],
            },
        )
        _logger.info("Running %s against '%s'", recipe.short_name(), context.target_org.alias)

        for index, step in enumerate(recipe.steps):
            action = self.registry.get(step.action)
            _logger.info(
                "Step %d/%d: %s", index + 1, len(recipe.steps), step.description or step.action
            )
            try:
                action_result = await action.execute(context, step.options)
            except ResultError as exc:
                recipe_result.update_detail(steps_completed=index + 1)
                recipe_result.add_rejected_child(exc.result)
                continue

            update: dict[str, object] = {"steps_completed": index + 1}
            if action_result.status == "FAILURE":
                update["failed_steps"] = [*recipe_result.detail["failed_steps"], step.action]
            recipe_result.update_detail(**update)
            recipe_result.add_resolved_child(action_result)
            if recipe_result.is_finalized:
                _logger.warning("Halting %s after failed step '%s'", recipe.name, step.action)
                break

        if recipe_result.is_running:
            failed = recipe_result.detail["failed_steps"]
            if failed:
                recipe_result.complete_failure(
                    FalconError(
                        f"{len(failed)} step(s) failed: {', '.join(failed)}",
                        name="RecipeStepsFailed",
                        source=recipe_result.stack_label,
                    )
                )
            else:
                recipe_result.complete_success()
        return recipe_result
