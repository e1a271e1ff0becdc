from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExecuteApexOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    # Relative to the context's config_path.
    apex_code_file: str = Field(min_length=1, alias="apexCodeFile")
