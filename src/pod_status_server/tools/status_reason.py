"""Status reason resolution: collapse a pod status snapshot into one STATUS label."""

from __future__ import annotations

from collections.abc import Sequence

from pod_status_server.models import (
    ContainerStatus,
    PodStatusSnapshot,
    RunningState,
    TerminatedState,
    WaitingState,
)

# Phases a pod never leaves; deletion of such a pod is not reported as Terminating.
TERMINAL_PHASES = {"Succeeded", "Failed"}

# Waiting reason for an init container that is simply queued behind earlier ones.
POD_INITIALIZING = "PodInitializing"

POD_READY_CONDITION = "Ready"
POD_SCHEDULED_CONDITION = "PodScheduled"
SCHEDULING_GATED = "SchedulingGated"

COMPLETED = "Completed"
RUNNING = "Running"
NOT_READY = "NotReady"
TERMINATING = "Terminating"
UNKNOWN = "Unknown"


def resolve_status_reason(snapshot: PodStatusSnapshot) -> str:
    """Return the single STATUS label for a pod.

    Precedence, lowest to highest: phase, pod reason, scheduling gate,
    init container progress, main container states, the Completed/Running
    reconciliation, and finally deletion in progress.
    """
    label = snapshot.reason or snapshot.phase
    if _is_scheduling_gated(snapshot):
        label = SCHEDULING_GATED

    init_label = _init_container_label(snapshot.init_container_statuses, snapshot.init_container_count)
    if init_label is not None:
        label = init_label
    else:
        label, has_running = _container_label(snapshot.container_statuses, label)
        # A finished sidecar next to a live container does not make the pod Completed.
        if label == COMPLETED and has_running:
            label = RUNNING if _has_ready_condition(snapshot) else NOT_READY

    if snapshot.deletion_requested and snapshot.deletion_reason_is_node_lost:
        return UNKNOWN
    if snapshot.deletion_requested and snapshot.phase not in TERMINAL_PHASES:
        return TERMINATING
    return label


def _is_scheduling_gated(snapshot: PodStatusSnapshot) -> bool:
    return any(
        c.type == POD_SCHEDULED_CONDITION and c.reason == SCHEDULING_GATED for c in snapshot.conditions
    )


def _has_ready_condition(snapshot: PodStatusSnapshot) -> bool:
    return any(c.type == POD_READY_CONDITION and c.status == "True" for c in snapshot.conditions)


def _init_container_label(statuses: Sequence[ContainerStatus], total: int) -> str | None:
    """Label for the first init container that has not completed, or None if all have."""
    for index, status in enumerate(statuses):
        state = status.state
        if isinstance(state, TerminatedState):
            if state.exit_code == 0:
                continue
            if state.reason:
                return f"Init:{state.reason}"
            if state.signal:
                return f"Init:Signal:{state.signal}"
            return f"Init:ExitCode:{state.exit_code}"
        if isinstance(state, WaitingState) and state.reason and state.reason != POD_INITIALIZING:
            return f"Init:{state.reason}"
        return f"Init:{index}/{total}"
    return None


def _container_label(statuses: Sequence[ContainerStatus], label: str) -> tuple[str, bool]:
    """Apply main container states to ``label``.

    The walk runs last to first so that the first declared container with a
    reportable state is the one that overwrites last. Also returns whether any
    container is running and ready.
    """
    has_running = False
    for status in reversed(statuses):
        state = status.state
        if isinstance(state, WaitingState) and state.reason:
            label = state.reason
        elif isinstance(state, TerminatedState) and state.reason:
            label = state.reason
        elif isinstance(state, TerminatedState):
            label = f"Signal:{state.signal}" if state.signal else f"ExitCode:{state.exit_code}"
        elif isinstance(state, RunningState) and status.ready:
            has_running = True
    return label, has_running


def count_ready_containers(snapshot: PodStatusSnapshot) -> int:
    """Number of main containers reporting ready."""
    return sum(1 for cs in snapshot.container_statuses if cs.ready)


def total_restarts(snapshot: PodStatusSnapshot) -> int:
    """Sum of restart counts over the main containers."""
    return sum(cs.restart_count for cs in snapshot.container_statuses)
