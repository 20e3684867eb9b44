# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Declarative screen descriptions handed to the renderer"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from .models import GroupNode, Job, Pipeline
from .views import BranchSelection, Dialog, JobAction, JobActionDialog, View, ViewKind

STATUS_COLORS = {
    "success": "green",
    "failed": "red",
    "running": "yellow",
    "pending": "grey50",
    "created": "grey50",
    "canceled": "grey50",
    "skipped": "grey50",
    "manual": "cyan",
}

HINTS = {
    ViewKind.GROUP_LIST: "Enter - Select project   / - Search   r - Refresh   q - Quit",
    ViewKind.PIPELINE_LIST: "Enter - Jobs   ESC - Back   g - Groups   r - Refresh",
    ViewKind.JOB_LIST: "Enter - Job actions   ESC - Back   g - Groups   r - Refresh",
    ViewKind.JOB_LOGS: "ESC - Back   g - Groups",
}


@dataclass(frozen=True)
class TreeNode:
    label: str
    ref: Optional[int] = None
    color: Optional[str] = None
    children: Tuple["TreeNode", ...] = ()


@dataclass(frozen=True)
class ListEntry:
    label: str
    ref: Optional[object] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class DialogSpec:
    kind: str
    title: str
    options: Tuple[ListEntry, ...]


@dataclass(frozen=True)
class Screen:
    kind: ViewKind
    title: str
    tree: Optional[TreeNode] = None
    entries: Tuple[ListEntry, ...] = ()
    text: Optional[str] = None
    dialog: Optional[DialogSpec] = None
    error: Optional[str] = None
    hints: str = ""


def format_duration(duration) -> str:
    if duration is None:
        return "N/A"

    hours = int(duration // 3600)
    minutes = int((duration % 3600) // 60)
    seconds = int(duration % 60)

    if hours > 0:
        return f"{hours}h{minutes}m{seconds}s"
    elif minutes > 0:
        return f"{minutes}m{seconds}s"
    else:
        return f"{seconds}s"


def format_ts(ts: Optional[str]) -> str:
    if not ts:
        return "-"
    try:
        dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        return dt.strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return ts


def status_color(status: str) -> Optional[str]:
    return STATUS_COLORS.get((status or "").lower())


def pipeline_label(pipeline: Pipeline) -> str:
    return "\n".join([
        f"Pipeline ID: {pipeline.id}",
        f"Status: {pipeline.status}",
        f"Ref: {pipeline.ref}",
        f"Source: {pipeline.source}",
        f"Updated At: {format_ts(pipeline.updated_at)}",
    ])


def job_label(job: Job, retry_failed: bool = False) -> str:
    status = job.status
    if retry_failed:
        status = f"{status} (retry failed)"
    lines = [
        f"Job ID: {job.id}",
        f"Name: {job.name}",
        f"Status: {status}",
    ]
    if job.stage:
        lines.append(f"Stage: {job.stage}   Duration: {format_duration(job.duration)}")
    return "\n".join(lines)


def group_tree(instance_url: str, nodes: Sequence[GroupNode]) -> TreeNode:
    groups = []
    for node in nodes:
        projects = tuple(
            TreeNode(f"Project: {project.name}", ref=project.id, color="grey50")
            for project in node.projects
        )
        groups.append(TreeNode(f"Group: {node.group.name}", color="grey93", children=projects))
    instance = TreeNode(f"Instance: {instance_url}", color="orange_red1", children=tuple(groups))
    return TreeNode("GitLab Pipelines", color="yellow", children=(instance,))


def dialog_spec(dialog: Dialog) -> DialogSpec:
    if isinstance(dialog, BranchSelection):
        options = tuple(
            ListEntry(branch.name, ref=branch.name, color="orange_red1" if branch.default else None)
            for branch in dialog.branches
        )
        return DialogSpec("branch", f"Select branch for {dialog.project_name}", options)
    if isinstance(dialog, JobActionDialog):
        options = tuple(ListEntry(action.value, ref=action) for action in JobAction)
        return DialogSpec("job_action", f"Select Action for Job {dialog.job_id}", options)
    raise TypeError(f"Unknown dialog {dialog!r}")


def build_screen(view: View, instance_url: str, dialog: Optional[Dialog] = None, error: Optional[str] = None) -> Screen:
    """Describe what the renderer should paint for the top of the stack"""
    kind = view.kind
    params = view.params
    items = view.cached_items
    spec = dialog_spec(dialog) if dialog is not None else None
    common = dict(kind=kind, dialog=spec, error=error, hints=HINTS[kind])

    if kind is ViewKind.GROUP_LIST:
        title = "Groups"
        if params.filter_text:
            title = f"Groups matching '{params.filter_text}'"
        return Screen(title=title, tree=group_tree(instance_url, items or ()), **common)

    if kind is ViewKind.PIPELINE_LIST:
        entries: List[ListEntry] = [
            ListEntry(pipeline_label(p), ref=p.id, color=status_color(p.status)) for p in items or ()
        ]
        title = f"Pipelines for project {params.project_id} on {params.branch}"
        return Screen(title=title, entries=tuple(entries), **common)

    if kind is ViewKind.JOB_LIST:
        entries = [
            ListEntry(
                job_label(job, retry_failed=job.id in view.retry_failed),
                ref=job.id,
                color=status_color(job.status),
            )
            for job in items or ()
        ]
        title = f"Jobs for pipeline {params.pipeline_id} ({params.branch})"
        return Screen(title=title, entries=tuple(entries), **common)

    title = f"Logs for job {params.job_id}"
    return Screen(title=title, text=items or "", **common)
