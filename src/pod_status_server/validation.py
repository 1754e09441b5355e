"""Input validation helpers for MCP tool parameters and manifest documents."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

# RFC 1123 label: lowercase alphanumeric and hyphens, 1-63 chars, starts/ends with alphanumeric
_NAMESPACE_RE = re.compile(r"^[a-z0-9]([a-z0-9\-]{0,61}[a-z0-9])?$")

# Resolved labels never contain whitespace (e.g. "CrashLoopBackOff", "Init:0/2").
_STATUS_RE = re.compile(r"^\S+$")

POD_KIND = "Pod"
LIST_KINDS = {"List", "PodList"}


def validate_namespace(namespace: str | None) -> None:
    """Validate a Kubernetes namespace name against RFC 1123."""
    if namespace is None:
        return
    if not _NAMESPACE_RE.match(namespace):
        msg = f"Invalid namespace: {namespace!r}. Must be a valid RFC 1123 label."
        raise ValueError(msg)


def validate_status_filter(status_filter: str | None) -> None:
    """Validate the status_filter parameter for get_pod_status."""
    if status_filter is None:
        return
    if not _STATUS_RE.match(status_filter):
        msg = f"Invalid status_filter: {status_filter!r}. Must be a single status label such as 'Running'."
        raise ValueError(msg)


def validate_manifest_kind(document: Any) -> str:
    """Validate one parsed manifest document and return its kind.

    A document without ``kind`` is treated as a bare pod.
    """
    if not isinstance(document, Mapping):
        msg = f"Manifest document must be a mapping, got {type(document).__name__}."
        raise ValueError(msg)
    kind = document.get("kind") or POD_KIND
    if not isinstance(kind, str) or (kind != POD_KIND and kind not in LIST_KINDS):
        valid = ", ".join(sorted({POD_KIND, *LIST_KINDS}))
        msg = f"Unsupported manifest kind: {kind!r}. Must be one of: {valid}"
        raise ValueError(msg)
    return kind
