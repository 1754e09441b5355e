"""Pydantic v2 models for pod status snapshots, tool outputs, and errors."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Shared error model ---


class ToolError(BaseModel):
    """Structured error returned alongside partial tool output."""

    error: str
    source: str
    pod: str | None = None
    partial_data: bool = False


# --- Container state ---


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class WaitingState(_SnapshotModel):
    """Container has not started yet, or is backing off before a restart."""

    kind: Literal["waiting"] = "waiting"
    reason: str = ""


class RunningState(_SnapshotModel):
    """Container process is running."""

    kind: Literal["running"] = "running"


class TerminatedState(_SnapshotModel):
    """Container process exited."""

    kind: Literal["terminated"] = "terminated"
    reason: str = ""
    exit_code: int = 0
    signal: int = 0


class UnsetState(_SnapshotModel):
    """No state has been reported for the container yet."""

    kind: Literal["unset"] = "unset"


# Exactly one case is active; "kind" selects it when validating plain dicts.
ContainerState = Annotated[
    WaitingState | RunningState | TerminatedState | UnsetState,
    Field(discriminator="kind"),
]


class ContainerStatus(_SnapshotModel):
    """Last-known state of one container."""

    name: str = ""
    ready: bool = False
    restart_count: int = 0
    state: ContainerState = Field(default_factory=UnsetState)


class PodCondition(_SnapshotModel):
    """A named pod condition such as Ready or PodScheduled."""

    type: str
    status: Literal["True", "False", "Unknown"]
    reason: str = ""


class PodStatusSnapshot(_SnapshotModel):
    """Immutable view of a pod's runtime status, as needed to derive its STATUS label."""

    phase: str = ""
    reason: str = ""
    init_container_statuses: tuple[ContainerStatus, ...] = ()
    container_statuses: tuple[ContainerStatus, ...] = ()
    conditions: tuple[PodCondition, ...] = ()
    deletion_requested: bool = False
    deletion_reason_is_node_lost: bool = False
    declared_init_containers: int | None = None
    declared_containers: int | None = None

    @property
    def init_container_count(self) -> int:
        """Number of declared init containers, falling back to the reported statuses."""
        if self.declared_init_containers is not None:
            return self.declared_init_containers
        return len(self.init_container_statuses)

    @property
    def container_count(self) -> int:
        """Number of declared main containers, falling back to the reported statuses."""
        if self.declared_containers is not None:
            return self.declared_containers
        return len(self.container_statuses)


# --- Pod Status tool models ---


class PodStatusRow(BaseModel):
    """Resolved status for a single pod."""

    name: str
    namespace: str | None = None
    status: str
    phase: str
    ready: str
    restarts: int = 0


class PodStatusOutput(BaseModel):
    """Output for get_pod_status."""

    pods: list[PodStatusRow]
    groups: dict[str, int]
    total_matching: int
    truncated: bool
    summary: str
    timestamp: str
    errors: list[ToolError] = Field(default_factory=list)
