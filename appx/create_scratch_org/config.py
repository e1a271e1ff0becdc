from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CreateScratchOrgOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    scratch_org_alias: str = Field(min_length=1, alias="scratchOrgAlias")
    # Relative to the context's config_path.
    scratch_def_json: str = Field(
        default="project-scratch-def.json", min_length=1, alias="scratchDefJson"
    )
    duration_days: int = Field(default=7, ge=1, le=30, alias="durationDays")
    set_default: bool = Field(default=False, alias="setDefault")
