from __future__ import annotations

from pydantic import BaseModel, Field

from .models import Condition


class GroupReport(BaseModel):
    """Group classification for one reconciliation pass."""

    progressing: list[int] = Field(default_factory=list, description="Groups mid-transition")
    updated: list[int] = Field(default_factory=list, description="Groups on the new revision and healthy")
    current: list[int] = Field(default_factory=list, description="Groups still on the old revision")


class RolloutParametersResponse(BaseModel):
    partition: int
    max_unavailable: int
    max_surge: int


class ReconcileResponse(BaseModel):
    workload: str
    changed: bool
    attempts: int
    parameters: RolloutParametersResponse
    condition: Condition | None = None


class EventResponse(BaseModel):
    id: int
    ts: str
    level: str
    workload: str | None = None
    condition_type: str | None = None
    message: str
