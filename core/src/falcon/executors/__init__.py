from falcon.executors.parsing import detect_cli_error, safe_parse
from falcon.executors.sanitizer import compile_command, sanitize_argument, sanitize_flag
from falcon.executors.sfdx import (
    EXECUTOR_SOURCE,
    ProcessOutcome,
    SfdxExecutor,
    execute_sfdx_command,
    finalize_executor_result,
    new_executor_result,
)

__all__ = [
    "EXECUTOR_SOURCE",
    "ProcessOutcome",
    "SfdxExecutor",
    "compile_command",
    "detect_cli_error",
    "execute_sfdx_command",
    "finalize_executor_result",
    "new_executor_result",
    "safe_parse",
    "sanitize_argument",
    "sanitize_flag",
]
