"""Salesforce CLI actions and recipes for AppX package projects."""

from falcon.orchestration.registry import DictActionRegistry

from .create_scratch_org import CreateScratchOrgAction
from .delete_scratch_org import DeleteScratchOrgAction
from .execute_apex import ExecuteApexAction
from .recipes import build_scratch_org_recipe, refresh_scratch_org_recipe


def build_registry() -> DictActionRegistry:
    actions = {
        "create-scratch-org": CreateScratchOrgAction,
        "delete-scratch-org": DeleteScratchOrgAction,
        "execute-apex": ExecuteApexAction,
    }
    return DictActionRegistry(actions=actions)


__all__ = [
    "CreateScratchOrgAction",
    "DeleteScratchOrgAction",
    "ExecuteApexAction",
    "build_registry",
    "build_scratch_org_recipe",
    "refresh_scratch_org_recipe",
]
