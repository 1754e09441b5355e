"""get_pod_status — resolve the STATUS label of every pod in a manifest."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
import yaml

from pod_status_server.config import get_server_config
from pod_status_server.models import PodStatusOutput, PodStatusRow, ToolError
from pod_status_server.snapshots import snapshot_from_manifest
from pod_status_server.tools.status_reason import (
    count_ready_containers,
    resolve_status_reason,
    total_restarts,
)
from pod_status_server.validation import (
    POD_KIND,
    validate_manifest_kind,
    validate_namespace,
    validate_status_filter,
)

log = structlog.get_logger()


def _load_pods(manifest: str) -> list[Mapping[str, Any]]:
    """Parse YAML or JSON text into a flat list of pod manifests."""
    try:
        documents = list(yaml.safe_load_all(manifest))
    except yaml.YAMLError as e:
        msg = f"Manifest is not valid YAML or JSON: {e}"
        raise ValueError(msg) from None

    pods: list[Mapping[str, Any]] = []
    for document in documents:
        if document is None:
            continue
        kind = validate_manifest_kind(document)
        if kind == POD_KIND:
            pods.append(document)
            continue
        items = document.get("items") or []
        if not isinstance(items, list):
            msg = f"Manifest {kind} 'items' must be a list."
            raise ValueError(msg)
        for item in items:
            if not isinstance(item, Mapping) or (item.get("kind") or POD_KIND) != POD_KIND:
                msg = f"Manifest {kind} may only contain pods."
                raise ValueError(msg)
            pods.append(item)
    return pods


def _pod_identity(pod: Mapping[str, Any]) -> tuple[str, str | None]:
    metadata = pod.get("metadata")
    if not isinstance(metadata, Mapping):
        return "<unknown>", None
    return str(metadata.get("name") or "<unknown>"), metadata.get("namespace")


def _build_row(pod: Mapping[str, Any]) -> PodStatusRow:
    name, namespace = _pod_identity(pod)
    snapshot = snapshot_from_manifest(pod)
    return PodStatusRow(
        name=name,
        namespace=namespace,
        status=resolve_status_reason(snapshot),
        phase=snapshot.phase,
        ready=f"{count_ready_containers(snapshot)}/{snapshot.container_count}",
        restarts=total_restarts(snapshot),
    )


def get_pod_status_handler(
    manifest: str,
    namespace: str | None = None,
    status_filter: str | None = None,
) -> PodStatusOutput:
    """Core handler for get_pod_status."""
    validate_namespace(namespace)
    validate_status_filter(status_filter)
    config = get_server_config()

    pods = _load_pods(manifest)
    errors: list[ToolError] = []

    rows: list[PodStatusRow] = []
    for pod in pods:
        name, pod_namespace = _pod_identity(pod)
        if namespace is not None and pod_namespace != namespace:
            continue
        try:
            rows.append(_build_row(pod))
        except ValueError as e:
            log.warning("pod_conversion_failed", pod=name, namespace=pod_namespace, error=str(e))
            errors.append(ToolError(error=str(e), source="manifest", pod=name, partial_data=True))

    if status_filter is not None:
        rows = [r for r in rows if r.status == status_filter]

    total_matching = len(rows)

    # Grouped over every matching pod, not only the displayed ones.
    groups: dict[str, int] = defaultdict(int)
    for row in rows:
        groups[row.status] += 1

    truncated = total_matching > config.result_cap
    display_rows = rows[: config.result_cap]

    if truncated:
        summary = f"Showing {config.result_cap} of {total_matching} matching pods"
    elif total_matching > 0:
        summary = f"{total_matching} pod{'s' if total_matching != 1 else ''} resolved"
    else:
        summary = "No matching pods"

    return PodStatusOutput(
        pods=display_rows,
        groups=dict(groups),
        total_matching=total_matching,
        truncated=truncated,
        summary=summary,
        timestamp=datetime.now(tz=UTC).isoformat(),
        errors=errors,
    )


def resolve_pod_status_handler(manifest: str) -> PodStatusRow:
    """Resolve the status of exactly one pod."""
    pods = _load_pods(manifest)
    if len(pods) != 1:
        msg = f"Expected exactly one pod in the manifest, found {len(pods)}."
        raise ValueError(msg)
    return _build_row(pods[0])
