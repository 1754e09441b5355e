"""Build PodStatusSnapshot values from Kubernetes pod objects and manifests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from kubernetes import client as k8s_client

from pod_status_server.models import (
    ContainerState,
    ContainerStatus,
    PodCondition,
    PodStatusSnapshot,
    RunningState,
    TerminatedState,
    UnsetState,
    WaitingState,
)

log = structlog.get_logger()

# Pod status reason set by the node lifecycle controller when a node stops reporting.
NODE_LOST_REASON = "NodeLost"

# Order in which a state key is chosen when a malformed status carries several.
_STATE_PRECEDENCE = ("waiting", "terminated", "running")

_serializer: k8s_client.ApiClient | None = None


def _get_serializer() -> k8s_client.ApiClient:
    global _serializer
    if _serializer is None:
        _serializer = k8s_client.ApiClient()
    return _serializer


def snapshot_from_pod(pod: k8s_client.V1Pod) -> PodStatusSnapshot:
    """Build a snapshot from a Kubernetes SDK ``V1Pod`` object.

    The object is serialised to its API (camelCase) form first, so SDK objects
    and raw manifests go through the same conversion.
    """
    manifest = _get_serializer().sanitize_for_serialization(pod)
    return snapshot_from_manifest(manifest)


def snapshot_from_manifest(pod: Mapping[str, Any]) -> PodStatusSnapshot:
    """Build a snapshot from a pod manifest as returned by ``kubectl get pod -o json``.

    Raises:
        ValueError: If a section has the wrong shape or a numeric field is not an integer.
    """
    metadata = _section(pod, "metadata")
    spec = _section(pod, "spec")
    status = _section(pod, "status")

    reason = _text(status.get("reason"))
    deletion_requested = metadata.get("deletionTimestamp") is not None

    return PodStatusSnapshot(
        phase=_text(status.get("phase")),
        reason=reason,
        init_container_statuses=tuple(
            _container_status(cs) for cs in _items(status, "initContainerStatuses")
        ),
        container_statuses=tuple(_container_status(cs) for cs in _items(status, "containerStatuses")),
        conditions=tuple(_condition(c) for c in _items(status, "conditions")),
        deletion_requested=deletion_requested,
        deletion_reason_is_node_lost=deletion_requested and reason == NODE_LOST_REASON,
        declared_init_containers=len(_items(spec, "initContainers")) if "initContainers" in spec else None,
        declared_containers=len(_items(spec, "containers")) if "containers" in spec else None,
    )


def _container_status(raw: Mapping[str, Any]) -> ContainerStatus:
    name = _text(raw.get("name"))
    return ContainerStatus(
        name=name,
        ready=_flag(raw.get("ready"), "ready"),
        restart_count=_integer(raw.get("restartCount"), "restartCount"),
        state=_container_state(raw.get("state"), name),
    )


def _container_state(raw: Any, container: str) -> ContainerState:
    if raw is None:
        return UnsetState()
    if not isinstance(raw, Mapping):
        msg = f"Container {container!r} has a malformed state: expected a mapping, got {type(raw).__name__}."
        raise ValueError(msg)

    present = [key for key in _STATE_PRECEDENCE if raw.get(key) is not None]
    if not present:
        return UnsetState()
    if len(present) > 1:
        log.warning("container_state_ambiguous", container=container, states=present, chosen=present[0])

    chosen = present[0]
    detail = raw[chosen]
    if not isinstance(detail, Mapping):
        msg = f"Container {container!r} state {chosen!r} must be a mapping."
        raise ValueError(msg)

    if chosen == "waiting":
        return WaitingState(reason=_text(detail.get("reason")))
    if chosen == "terminated":
        return TerminatedState(
            reason=_text(detail.get("reason")),
            exit_code=_integer(detail.get("exitCode"), "exitCode"),
            signal=_integer(detail.get("signal"), "signal"),
        )
    return RunningState()


def _condition(raw: Mapping[str, Any]) -> PodCondition:
    return PodCondition(
        type=_text(raw.get("type")),
        status=_condition_status(raw.get("status")),
        reason=_text(raw.get("reason")),
    )


def _section(obj: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = obj.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        msg = f"Pod field {key!r} must be a mapping, got {type(value).__name__}."
        raise ValueError(msg)
    return value


def _items(obj: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = obj.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, Mapping) for item in value):
        msg = f"Pod field {key!r} must be a list of mappings."
        raise ValueError(msg)
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _integer(value: Any, field: str) -> int:
    if value is None:
        return 0
    # bool is an int subclass but never a valid count or code
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Pod field {field!r} must be an integer, got {value!r}."
        raise ValueError(msg)
    return value


def _flag(value: Any, field: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    msg = f"Pod field {field!r} must be a boolean, got {value!r}."
    raise ValueError(msg)


def _condition_status(value: Any) -> Any:
    # Unquoted YAML True/False loads as bool.
    if value is None or value == "":
        return "Unknown"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str) and value.lower() in ("true", "false", "unknown"):
        return value.capitalize()
    return value
