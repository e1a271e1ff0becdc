from .command_definition import FLAG_PREFIX, CommandDefinition
from .executor import CommandExecutor
from .executor_config import DEFAULT_CLI_ENV, ExecutorConfig
from .observer import Observer

__all__ = [
    "CommandDefinition",
    "CommandExecutor",
    "DEFAULT_CLI_ENV",
    "ExecutorConfig",
    "FLAG_PREFIX",
    "Observer",
]
