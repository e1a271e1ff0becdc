from falcon.orchestration.registry import DictActionRegistry

__all__ = ["DictActionRegistry"]
