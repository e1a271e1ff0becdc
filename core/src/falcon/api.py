from __future__ import annotations

import asyncio
import json
import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path

from falcon.configuration import FalconConfig
from falcon.contracts import (
    ActionContext,
    ActionRegistry,
    CommandExecutor,
    FalconResult,
    Observer,
    Recipe,
    ResultError,
    TargetOrg,
)
from falcon.engine.recipe_engine import RecipeEngine
from falcon.executors.sfdx import SfdxExecutor
from falcon.rendering import render_error, render_result_tree


def build_action_context(
    config: FalconConfig,
    *,
    executor: CommandExecutor | None = None,
    observer: Observer | None = None,
    logger: logging.Logger | None = None,
) -> ActionContext:
    target = config.target_org
    return ActionContext(
        target_org=TargetOrg(
            alias=target.alias,
            username=target.username,
            org_id=target.org_id,
            is_scratch_org=target.is_scratch_org,
        ),
        executor=executor or SfdxExecutor(config.executor),
        config_path=config.config_path,
        dev_hub_alias=config.dev_hub_alias,
        log_level=config.log_level,
        observer=observer,
        logger=logger or logging.getLogger("sfdx_falcon.action"),
        display_delays=config.display_delays,
    )


async def run_recipe(
    recipe: Recipe,
    *,
    context: ActionContext,
    registry: ActionRegistry,
    report_dir: Path | None = None,
) -> FalconResult:
    """
    Run a recipe end to end and return its COMMAND Result.

    Invalid recipes raise `RecipeValidationError` before anything runs. After
    that nothing is raised: an ERROR anywhere below ends up as the status of
    the returned COMMAND Result.

    With `report_dir`, the finished Result tree is also written there as
    `<run_id>.json` and `<run_id>.txt`.
    """
    engine = RecipeEngine(registry)
    engine.validate(recipe)

    run_id = f"{recipe.name}-{datetime.now(UTC).strftime('%Y%m%dT%H%M%S')}-{uuid.uuid4().hex[:8]}"
    logger = logging.getLogger(f"sfdx_falcon.recipe.{run_id}")

    command_result = FalconResult(
        f"run:{recipe.name}",
        "COMMAND",
        detail={
            "run_id": run_id,
            "recipe": recipe.short_name(),
            "target_org": context.target_org.alias,
            "report_dir": str(report_dir) if report_dir is not None else None,
        },
    )
    logger.info("Starting %s", recipe.short_name())

    try:
        recipe_result = await engine.run(recipe, context)
    except ResultError as exc:
        try:
            command_result.add_rejected_child(exc.result)
        except ResultError:
            logger.error("Recipe %s errored: %s", recipe.name, command_result.error)
    except Exception as exc:
        logger.error("Recipe %s raised %s", recipe.name, type(exc).__name__, exc_info=True)
        command_result.complete_error(exc)
    else:
        command_result.add_resolved_child(recipe_result)
        if command_result.is_running:
            command_result.complete_success()

    logger.info(
        "Finished %s with %s in %s",
        recipe.name,
        command_result.status,
        command_result.duration_string,
    )
    if report_dir is not None:
        _write_run_report_best_effort(report_dir, command_result, run_id)
    return command_result


def run_recipe_sync(
    recipe: Recipe,
    *,
    context: ActionContext,
    registry: ActionRegistry,
    report_dir: Path | None = None,
) -> FalconResult:
    return asyncio.run(
        run_recipe(recipe, context=context, registry=registry, report_dir=report_dir)
    )


def _write_run_report_best_effort(report_dir: Path, result: FalconResult, run_id: str) -> None:
    """Write `<run_id>.json` (Result tree) and `<run_id>.txt` (tree plus error report)."""
    try:
        report_dir.mkdir(parents=True, exist_ok=True)
        with (report_dir / f"{run_id}.json").open("w", encoding="utf-8") as handle:
            json.dump(result.to_dict(), handle, indent=2, sort_keys=True, default=str)
        sections = [render_result_tree(result)]
        if result.error is not None:
            sections.append(render_error(result.error))
        (report_dir / f"{run_id}.txt").write_text("\n".join(sections) + "\n", encoding="utf-8")
    except Exception:
        logging.getLogger("sfdx_falcon.reports").warning(
            "Failed to write run report for %s",
            run_id,
            exc_info=True,
        )
