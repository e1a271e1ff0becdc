from .action import CreateScratchOrgAction
from .config import CreateScratchOrgOptions

__all__ = ["CreateScratchOrgAction", "CreateScratchOrgOptions"]
