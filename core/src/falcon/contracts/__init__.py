from .action_contracts import (
    Action,
    ActionContext,
    ActionInfo,
    ActionNotFoundError,
    ActionRegistry,
    ActionState,
    ActionType,
    Recipe,
    RecipeStep,
    TargetOrg,
)
from .command_contracts import (
    DEFAULT_CLI_ENV,
    FLAG_PREFIX,
    CommandDefinition,
    CommandExecutor,
    ExecutorConfig,
    Observer,
)
from .result_contracts import (
    TERMINAL_STATUSES,
    FalconResult,
    ResultError,
    ResultOptions,
    ResultStateError,
    ResultStatus,
    ResultType,
)

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
    "CommandDefinition",
    "CommandExecutor",
    "ExecutorConfig",
    "Observer",
    "DEFAULT_CLI_ENV",
    "FLAG_PREFIX",
    "FalconResult",
    "ResultError",
    "ResultOptions",
    "ResultStateError",
    "ResultStatus",
    "ResultType",
    "TERMINAL_STATUSES",
]
