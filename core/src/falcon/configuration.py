from __future__ import annotations

import os
import re
from collections.abc import Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from falcon.contracts.command_contracts.executor_config import DEFAULT_CLI_ENV, ExecutorConfig

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

CliLogLevel = Literal["trace", "debug", "info", "warn", "error", "fatal"]


class ConfigError(ValueError):
    pass


class TargetOrgConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    alias: str = Field(min_length=1)
    username: str | None = None
    org_id: str | None = None
    is_scratch_org: bool = False


class FalconConfig(BaseModel):
    """Top-level YAML config for a recipe run."""

    model_config = ConfigDict(extra="forbid")

    target_org: TargetOrgConfig
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    dev_hub_alias: str | None = None
    log_level: CliLogLevel = "error"
    # Base directory for relative paths in action options (apex files, scratch defs).
    config_path: Path = Path("config")
    display_delays: bool = False
    # Where run reports are written; no reports when unset.
    report_dir: Path | None = None


def load_yaml(path: str | Path) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ConfigError(f"YAML root must be a mapping: {path}")
    return payload


def load_falcon_config(path: str | Path) -> FalconConfig:
    """
    Load and validate a FalconConfig YAML file.

    `${VAR}` references are substituted from the environment, executor env
    values are merged over the CLI defaults, and relative `config_path` and
    `report_dir` values are resolved against the YAML file's directory.
    """
    config = load_falcon_config_dict(load_yaml(path))
    base_dir = Path(path).resolve().parent
    update: dict[str, Path] = {}
    if not config.config_path.is_absolute():
        update["config_path"] = base_dir / config.config_path
    if config.report_dir is not None and not config.report_dir.is_absolute():
        update["report_dir"] = base_dir / config.report_dir
    return config.model_copy(update=update) if update else config


def load_falcon_config_dict(payload: Mapping[str, Any]) -> FalconConfig:
    resolved = resolve_env_vars(dict(payload))
    executor = resolved.get("executor")
    if isinstance(executor, Mapping) and isinstance(executor.get("env"), Mapping):
        resolved["executor"] = {
            **executor,
            "env": deep_merge(DEFAULT_CLI_ENV, executor["env"]),
        }
    try:
        return FalconConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigError(format_validation_error("falcon", exc)) from exc


def resolve_env_vars(payload: Any) -> Any:
    return _resolve_env_vars(payload, path="$")


def _resolve_env_vars(payload: Any, *, path: str) -> Any:
    if isinstance(payload, Mapping):
        return {
            str(key): _resolve_env_vars(value, path=f"{path}.{key}")
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [
            _resolve_env_vars(value, path=f"{path}[{index}]") for index, value in enumerate(payload)
        ]
    if isinstance(payload, str):
        return _substitute_env(payload, path=path)
    return payload


def _substitute_env(value: str, *, path: str) -> str:
    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        env_value = os.environ.get(key)
        if env_value is None:
            raise ConfigError(f"Missing environment variable '{key}' at {path}")
        return env_value

    return _ENV_VAR_PATTERN.sub(replace, value)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def format_validation_error(prefix: str, exc: ValidationError) -> str:
    details: list[str] = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error["loc"])
        details.append(f"{prefix}.{loc}: {error['msg']}" if loc else f"{prefix}: {error['msg']}")
    return "; ".join(details)
