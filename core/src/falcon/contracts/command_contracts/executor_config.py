from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CLI_ENV: dict[str, str] = {
    # Forces --json output onto stdout instead of stderr.
    "SFDX_JSON_TO_STDOUT": "true",
    "SFDX_AUTOUPDATE_DISABLE": "true",
}


class ExecutorConfig(BaseModel):
    """
    Process-level settings handed to an executor at construction time.

    `env` is merged over `os.environ` for each child process only; the
    parent environment is never mutated.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    cli_binary: str = Field(default="sfdx", min_length=1)
    env: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CLI_ENV))
    progress_interval_s: float = Field(default=1.0, gt=0)
    timeout_s: float | None = Field(default=1800.0, gt=0)
    detached: bool = True
    cwd: str | None = None

    @field_validator("env", mode="before")
    @classmethod
    def _stringify_env(cls, value: Any) -> dict[str, str]:
        if value is None:
            return dict(DEFAULT_CLI_ENV)
        if not isinstance(value, dict):
            raise ValueError("env must be a mapping")
        return {**DEFAULT_CLI_ENV, **{str(key): str(item) for key, item in value.items()}}
