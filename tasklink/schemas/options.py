from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExtensionOptions(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    asana_host_port: str = Field(default="app.asana.com", min_length=1)
    default_workspace_id: str = "0"


class OptionsPatch(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    asana_host_port: str | None = Field(default=None, min_length=1)
    default_workspace_id: str | None = None
