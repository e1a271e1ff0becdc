from __future__ import annotations

from falcon.contracts import ActionContext, ActionInfo, FalconResult
from falcon.engine.action import FalconAction

from .config import DeleteScratchOrgOptions


class DeleteScratchOrgAction(FalconAction):
    """
    Mark a scratch org for deletion.

    Deleting an org that is already gone is not an error: the CLI's
    "org not found" failures are tolerated and the action succeeds.
    """

    options_model = DeleteScratchOrgOptions
    tolerated_failures = frozenset({"NamedOrgNotFound", "NoOrgFound", "ScratchOrgNotFound"})

    def initialize_action(self) -> ActionInfo:
        return ActionInfo(
            name="delete-scratch-org",
            command="force:org:delete",
            description="Delete Scratch Org",
            success_delay_s=2.0,
            error_delay_s=2.0,
            progress_interval_s=1.0,
        )

    async def execute_action(
        self,
        context: ActionContext,
        options: DeleteScratchOrgOptions,
        action_result: FalconResult,
    ) -> None:
        alias = options.scratch_org_alias
        command_def = self.command_definition(
            context,
            progress_msg=f"Marking scratch org '{alias}' for deletion",
            error_msg=f"Request to mark scratch org '{alias}' for deletion failed",
            success_msg=f"Scratch org '{alias}' successfully marked for deletion",
            command_flags={
                "FLAG_TARGETUSERNAME": alias,
                "FLAG_TARGETDEVHUBUSERNAME": context.dev_hub_alias,
                "FLAG_NOPROMPT": True,
                "FLAG_JSON": True,
                "FLAG_LOGLEVEL": context.log_level,
            },
        )
        await self.run_command(action_result, context, command_def)
