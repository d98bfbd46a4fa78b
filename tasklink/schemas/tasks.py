from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    notes: str | None = None
    assignee: str | None = None


class TaskUrlOut(BaseModel):
    task_id: str
    url: str


class SessionOut(BaseModel):
    logged_in: bool


class LogEventIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)
