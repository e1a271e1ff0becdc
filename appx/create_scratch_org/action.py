from __future__ import annotations

from collections.abc import Mapping

from falcon.contracts import ActionContext, ActionInfo, FalconResult
from falcon.engine.action import FalconAction

from .config import CreateScratchOrgOptions


class CreateScratchOrgAction(FalconAction):
    options_model = CreateScratchOrgOptions

    def initialize_action(self) -> ActionInfo:
        return ActionInfo(
            name="create-scratch-org",
            command="force:org:create",
            description="Create Scratch Org",
            success_delay_s=2.0,
            error_delay_s=2.0,
            progress_interval_s=1.0,
        )

    async def execute_action(
        self,
        context: ActionContext,
        options: CreateScratchOrgOptions,
        action_result: FalconResult,
    ) -> None:
        alias = options.scratch_org_alias
        command_def = self.command_definition(
            context,
            progress_msg=f"Creating scratch org '{alias}' (this can take several minutes)",
            error_msg=f"Request to create scratch org '{alias}' failed",
            success_msg=f"Scratch org '{alias}' created",
            command_flags={
                "FLAG_DEFINITIONFILE": str(context.config_path / options.scratch_def_json),
                "FLAG_SETALIAS": alias,
                "FLAG_DURATIONDAYS": options.duration_days,
                "FLAG_SETDEFAULTUSERNAME": options.set_default,
                "FLAG_TARGETDEVHUBUSERNAME": context.dev_hub_alias,
                "FLAG_JSON": True,
                "FLAG_LOGLEVEL": context.log_level,
            },
        )
        executor_result = await self.run_command(action_result, context, command_def)
        if executor_result.status != "SUCCESS":
            return

        created = _cli_result(executor_result.detail.get("std_out_parsed"))
        action_result.update_detail(
            org_id=created.get("orgId"),
            username=created.get("username"),
        )
        self.logger.info("Created scratch org '%s' (%s)", alias, created.get("username"))


def _cli_result(parsed: object) -> Mapping[str, object]:
    if isinstance(parsed, Mapping) and isinstance(parsed.get("result"), Mapping):
        return parsed["result"]
    return {}
