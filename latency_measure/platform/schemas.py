"""Validation schemas for Kubernetes-style JSON returned by the platform.

Only the fields the resolver reads are declared; everything else is ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ObjectMetaIn(BaseModel):
    name: str
    namespace: str = ""
    creation_timestamp: datetime = Field(..., alias="creationTimestamp")
    generation: Optional[int] = None
    labels: Dict[str, str] = Field(default_factory=dict)


class ConditionIn(BaseModel):
    type: str
    status: str = "Unknown"
    last_transition_time: Optional[datetime] = Field(default=None, alias="lastTransitionTime")


class RunningStateIn(BaseModel):
    started_at: Optional[datetime] = Field(default=None, alias="startedAt")


class ContainerStateIn(BaseModel):
    running: Optional[RunningStateIn] = None


class ContainerStatusIn(BaseModel):
    name: str
    state: ContainerStateIn = Field(default_factory=ContainerStateIn)


class StatusIn(BaseModel):
    observed_generation: Optional[int] = Field(default=None, alias="observedGeneration")
    conditions: List[ConditionIn] = Field(default_factory=list)
    # Configuration
    latest_ready_revision_name: Optional[str] = Field(default=None, alias="latestReadyRevisionName")
    # Pod
    container_statuses: List[ContainerStatusIn] = Field(default_factory=list, alias="containerStatuses")


class ObjectIn(BaseModel):
    metadata: ObjectMetaIn
    status: StatusIn = Field(default_factory=StatusIn)


class ObjectListIn(BaseModel):
    items: List[ObjectIn] = Field(default_factory=list)
