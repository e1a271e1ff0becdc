from __future__ import annotations

from falcon.contracts import ActionContext, ActionInfo, FalconResult, ResultOptions
from falcon.engine.action import FalconAction

from .config import ExecuteApexOptions


class ExecuteApexAction(FalconAction):
    """Run a file of anonymous Apex against the target org."""

    options_model = ExecuteApexOptions
    # Apex that fails to compile or throws leaves the org half-configured.
    result_options = ResultOptions(failure_is_error=True)

    def initialize_action(self) -> ActionInfo:
        return ActionInfo(
            name="execute-apex",
            command="force:apex:execute",
            description="Execute Apex",
            success_delay_s=2.0,
            error_delay_s=2.0,
            progress_interval_s=1.0,
        )

    async def execute_action(
        self,
        context: ActionContext,
        options: ExecuteApexOptions,
        action_result: FalconResult,
    ) -> None:
        apex_file = options.apex_code_file
        action_result.update_detail(
            executor_messages={
                "progress_msg": f"Executing anonymous Apex from '{apex_file}'",
                "error_msg": f"Execution failed for anonymous Apex in '{apex_file}'",
                "success_msg": f"Execution of anonymous Apex in '{apex_file}' succeeded",
            }
        )
        messages = action_result.detail["executor_messages"]
        command_def = self.command_definition(
            context,
            progress_msg=messages["progress_msg"],
            error_msg=messages["error_msg"],
            success_msg=messages["success_msg"],
            command_flags={
                "FLAG_TARGETUSERNAME": context.target_org.alias,
                "FLAG_APEXCODEFILE": str(context.config_path / apex_file),
                "FLAG_JSON": True,
                "FLAG_LOGLEVEL": context.log_level,
            },
        )
        await self.run_command(action_result, context, command_def)
