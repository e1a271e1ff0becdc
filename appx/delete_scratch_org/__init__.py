from .action import DeleteScratchOrgAction
from .config import DeleteScratchOrgOptions

__all__ = ["DeleteScratchOrgAction", "DeleteScratchOrgOptions"]
