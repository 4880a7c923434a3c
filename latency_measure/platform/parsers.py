"""Convert validated platform JSON into domain snapshots.

Timestamps are truncated to whole seconds (RFC 3339 precision) and
normalised to UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.domain.conditions import ConditionKind
from ..core.domain.snapshots import (
    ConfigurationSnapshot,
    PodSnapshot,
    ResourceSnapshot,
    ServiceSnapshot,
)
from .schemas import ObjectIn, ObjectListIn, StatusIn


def truncate_time(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(microsecond=0)


def conditions_of(status: StatusIn) -> Dict[ConditionKind, datetime]:
    out: Dict[ConditionKind, datetime] = {}
    for cond in status.conditions:
        kind = ConditionKind.from_type(cond.type)
        if kind is None or cond.last_transition_time is None:
            continue
        out[kind] = truncate_time(cond.last_transition_time)
    return out


def _condition_true(status: StatusIn, kind: ConditionKind) -> bool:
    for cond in status.conditions:
        if cond.type == kind.value:
            return cond.status == "True"
    return False


def parse_resource(payload: Dict[str, Any]) -> ResourceSnapshot:
    obj = ObjectIn.model_validate(payload)
    return ResourceSnapshot(
        name=obj.metadata.name,
        namespace=obj.metadata.namespace,
        created=truncate_time(obj.metadata.creation_timestamp),
        conditions=conditions_of(obj.status),
    )


def parse_service(payload: Dict[str, Any]) -> ServiceSnapshot:
    return service_from(ObjectIn.model_validate(payload))


def service_from(obj: ObjectIn) -> ServiceSnapshot:
    ready = _condition_true(obj.status, ConditionKind.READY)
    # A stale status (controller has not observed the latest spec) is not ready
    generation = obj.metadata.generation
    observed = obj.status.observed_generation
    if generation is not None and observed is not None and generation != observed:
        ready = False
    return ServiceSnapshot(
        name=obj.metadata.name,
        namespace=obj.metadata.namespace,
        created=truncate_time(obj.metadata.creation_timestamp),
        conditions=conditions_of(obj.status),
        ready=ready,
    )


def parse_configuration(payload: Dict[str, Any]) -> ConfigurationSnapshot:
    obj = ObjectIn.model_validate(payload)
    return ConfigurationSnapshot(
        name=obj.metadata.name,
        namespace=obj.metadata.namespace,
        created=truncate_time(obj.metadata.creation_timestamp),
        conditions=conditions_of(obj.status),
        latest_ready_revision=obj.status.latest_ready_revision_name or None,
    )


def pod_from(obj: ObjectIn) -> PodSnapshot:
    started: Dict[str, datetime] = {}
    for cs in obj.status.container_statuses:
        if cs.state.running is not None and cs.state.running.started_at is not None:
            started[cs.name] = truncate_time(cs.state.running.started_at)
    return PodSnapshot(
        name=obj.metadata.name,
        namespace=obj.metadata.namespace,
        created=truncate_time(obj.metadata.creation_timestamp),
        conditions=conditions_of(obj.status),
        container_started=started,
    )


def parse_pod_list(payload: Dict[str, Any]) -> List[PodSnapshot]:
    return [pod_from(item) for item in ObjectListIn.model_validate(payload).items]


def parse_service_list(payload: Dict[str, Any]) -> List[ServiceSnapshot]:
    return [service_from(item) for item in ObjectListIn.model_validate(payload).items]
