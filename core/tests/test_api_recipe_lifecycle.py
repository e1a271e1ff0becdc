from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
from pydantic import BaseModel, ConfigDict

from falcon.api import build_action_context, run_recipe, run_recipe_sync
from falcon.configuration import load_falcon_config_dict
from falcon.contracts import ActionContext, ActionInfo, FalconResult, Recipe, RecipeStep, TargetOrg
from falcon.engine.action import FalconAction
from falcon.engine.recipe_engine import RecipeValidationError
from falcon.executors.sfdx import SfdxExecutor
from falcon.orchestration.registry import DictActionRegistry
from falcon.testkit import FakeExecutor, FakeProcessOutcome, RecordingObserver


class _PingOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target: str


class _PingAction(FalconAction):
    options_model = _PingOptions

    def initialize_action(self) -> ActionInfo:
        return ActionInfo(name="ping", command="force:ping", description="Ping")

    async def execute_action(
        self, context: ActionContext, options: Any, action_result: FalconResult
    ) -> None:
        command_def = self.command_definition(
            context,
            progress_msg=f"Pinging {options.target}",
            error_msg="Ping failed",
            success_msg="Pong",
            command_flags={"FLAG_TARGET": options.target, "FLAG_JSON": True},
        )
        await self.run_command(action_result, context, command_def)


def _registry() -> DictActionRegistry:
    return DictActionRegistry(actions={"ping": _PingAction})


def _context(executor: FakeExecutor) -> ActionContext:
    return ActionContext(target_org=TargetOrg(alias="scratch"), executor=executor)


def _recipe(*targets: str) -> Recipe:
    return Recipe(
        name="ping-all",
        steps=tuple(RecipeStep(action="ping", options={"target": target}) for target in targets),
    )


@pytest.mark.asyncio
async def test_run_recipe_wraps_recipe_in_command_result() -> None:
    result = await run_recipe(
        _recipe("a", "b"), context=_context(FakeExecutor()), registry=_registry()
    )

    assert result.result_type == "COMMAND"
    assert result.name == "run:ping-all"
    assert result.status == "SUCCESS"
    assert result.detail["recipe"] == "ping-all"
    assert result.detail["target_org"] == "scratch"
    assert result.detail["run_id"].startswith("ping-all-")
    assert result.detail["report_dir"] is None
    assert [child.result_type for child in result.children] == ["RECIPE"]
    assert len(result.children[0].children) == 2


@pytest.mark.asyncio
async def test_run_recipe_writes_report_named_after_run_id(tmp_path: Path) -> None:
    report_dir = tmp_path / "reports"

    result = await run_recipe(
        _recipe("a"), context=_context(FakeExecutor()), registry=_registry(), report_dir=report_dir
    )

    run_id = result.detail["run_id"]
    assert result.detail["report_dir"] == str(report_dir)
    written = sorted(path.name for path in report_dir.iterdir())
    assert written == [f"{run_id}.json", f"{run_id}.txt"]

    payload = json.loads((report_dir / f"{run_id}.json").read_text(encoding="utf-8"))
    assert payload["type"] == "COMMAND"
    assert payload["status"] == "SUCCESS"
    assert payload["children"][0]["type"] == "RECIPE"

    report_text = (report_dir / f"{run_id}.txt").read_text(encoding="utf-8")
    assert report_text.startswith("[SUCCESS] COMMAND:run:ping-all")
    assert "Error Name:" not in report_text


@pytest.mark.asyncio
async def test_run_recipe_reports_error_without_raising(tmp_path: Path) -> None:
    executor = FakeExecutor([FakeProcessOutcome.shell_error(2, std_err="segfault")])

    result = await run_recipe(
        _recipe("a", "b"), context=_context(executor), registry=_registry(), report_dir=tmp_path
    )

    assert result.status == "ERROR"
    assert len(executor.calls) == 1
    assert result.error.result_stack.splitlines()[0] == "    COMMAND:run:ping-all (ERROR)"

    report_text = (tmp_path / f"{result.detail['run_id']}.txt").read_text(encoding="utf-8")
    assert report_text.startswith("[ERROR] COMMAND:run:ping-all")
    assert "Error Name:    ShellError" in report_text
    assert "ShellError Code:    2" in report_text


@pytest.mark.asyncio
async def test_run_recipe_reports_failure() -> None:
    executor = FakeExecutor([FakeProcessOutcome.cli_failure("NoOrgFound", "gone")])

    result = await run_recipe(_recipe("a"), context=_context(executor), registry=_registry())

    assert result.status == "FAILURE"
    assert result.error.cli_error.name == "NoOrgFound"


@pytest.mark.asyncio
async def test_run_recipe_validates_before_running(tmp_path: Path) -> None:
    executor = FakeExecutor()
    recipe = Recipe(name="bad", steps=(RecipeStep(action="nope"),))

    with pytest.raises(RecipeValidationError):
        await run_recipe(
            recipe, context=_context(executor), registry=_registry(), report_dir=tmp_path
        )

    assert executor.calls == []
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_unwritable_report_dir_does_not_fail_the_run(tmp_path: Path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("nope", encoding="utf-8")

    result = await run_recipe(
        _recipe("a"), context=_context(FakeExecutor()), registry=_registry(), report_dir=blocker
    )

    assert result.status == "SUCCESS"


def test_run_recipe_sync_runs_event_loop() -> None:
    observer = RecordingObserver()
    context = ActionContext(
        target_org=TargetOrg(alias="scratch"), executor=FakeExecutor(), observer=observer
    )

    result = run_recipe_sync(_recipe("a"), context=context, registry=_registry())

    assert result.status == "SUCCESS"
    assert any(message.endswith("SUCCESS: Pong") for message in observer.messages)


def test_build_action_context_maps_config() -> None:
    config = load_falcon_config_dict(
        {
            "target_org": {"alias": "dev", "username": "dev@example.com"},
            "dev_hub_alias": "hub",
            "log_level": "debug",
            "config_path": "/project/config",
            "executor": {"cli_binary": "sf"},
        }
    )
    logger = logging.getLogger("test.api")

    context = build_action_context(config, logger=logger)

    assert context.target_org == TargetOrg(alias="dev", username="dev@example.com")
    assert context.dev_hub_alias == "hub"
    assert context.log_level == "debug"
    assert context.config_path == Path("/project/config")
    assert context.logger is logger
    assert isinstance(context.executor, SfdxExecutor)


def test_build_action_context_prefers_injected_executor() -> None:
    config = load_falcon_config_dict({"target_org": {"alias": "dev"}})
    executor = FakeExecutor()

    context = build_action_context(config, executor=executor)

    assert context.executor is executor
    assert context.observer is None
    assert context.display_delays is False
