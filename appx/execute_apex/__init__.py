from .action import ExecuteApexAction
from .config import ExecuteApexOptions

__all__ = ["ExecuteApexAction", "ExecuteApexOptions"]
