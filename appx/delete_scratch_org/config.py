from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeleteScratchOrgOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    scratch_org_alias: str = Field(min_length=1, alias="scratchOrgAlias")
