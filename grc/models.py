from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


PERCENT_RE = re.compile(r"^[0-9]+%$")

# Either an absolute group count or a percentage string such as "25%".
IntOrString = int | str


class RolloutStrategyType(str, Enum):
    ROLLING_UPDATE = "RollingUpdate"


class ConditionType(str, Enum):
    AVAILABLE = "Available"
    PROGRESSING = "Progressing"
    UPDATE_IN_PROGRESS = "UpdateInProgress"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class _Resource(BaseModel):
    # Wire format is camelCase; Python code uses snake_case attributes.
    model_config = ConfigDict(populate_by_name=True)


class ObjectMeta(_Resource):
    name: str = Field(..., description="Workload name")
    resource_version: str = Field("", alias="resourceVersion", description="Opaque version owned by the store")
    generation: int = Field(1, description="Bumped on every spec change")


class RollingUpdateConfiguration(_Resource):
    partition: int | None = Field(
        None, description="Groups with an index below the partition stay on the current revision"
    )
    max_unavailable: IntOrString | None = Field(None, alias="maxUnavailable")
    max_surge: IntOrString | None = Field(None, alias="maxSurge")

    @field_validator("max_unavailable", "max_surge")
    @classmethod
    def _percent_shape(cls, v: IntOrString | None) -> IntOrString | None:
        if isinstance(v, str) and not PERCENT_RE.match(v):
            raise ValueError(f"expected an integer or a percentage like '25%', got {v!r}")
        return v


class RolloutStrategy(_Resource):
    type: RolloutStrategyType = RolloutStrategyType.ROLLING_UPDATE
    rolling_update_configuration: RollingUpdateConfiguration | None = Field(
        None, alias="rollingUpdateConfiguration"
    )


class WorkloadSpec(_Resource):
    replicas: int = Field(1, ge=0, description="Desired number of groups")
    rollout_strategy: RolloutStrategy | None = Field(None, alias="rolloutStrategy")


class Condition(_Resource):
    type: str
    status: str = ConditionStatus.TRUE.value
    reason: str = ""
    message: str = ""
    last_transition_time: str = Field("", alias="lastTransitionTime")


class WorkloadStatus(_Resource):
    conditions: list[Condition] = Field(default_factory=list)


class Workload(_Resource):
    metadata: ObjectMeta
    spec: WorkloadSpec = Field(default_factory=WorkloadSpec)
    status: WorkloadStatus = Field(default_factory=WorkloadStatus)
