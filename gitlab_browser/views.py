# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Navigation stack entries and the ephemeral dialogs layered over them.

A view stores only the parameters needed to fetch its level again. It never
holds widgets or data borrowed from another view. That way any entry can be
rebuilt when the user comes back to it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Set, Tuple, Union

from .models import Branch


class ViewKind(str, Enum):
    GROUP_LIST = "group_list"
    PIPELINE_LIST = "pipeline_list"
    JOB_LIST = "job_list"
    JOB_LOGS = "job_logs"


@dataclass(frozen=True)
class GroupListParams:
    filter_text: str = ""


@dataclass(frozen=True)
class PipelineListParams:
    project_id: int
    branch: str


@dataclass(frozen=True)
class JobListParams:
    project_id: int
    branch: str
    pipeline_id: int


@dataclass(frozen=True)
class JobLogsParams:
    project_id: int
    job_id: int


ViewParams = Union[GroupListParams, PipelineListParams, JobListParams, JobLogsParams]

_KINDS = {
    GroupListParams: ViewKind.GROUP_LIST,
    PipelineListParams: ViewKind.PIPELINE_LIST,
    JobListParams: ViewKind.JOB_LIST,
    JobLogsParams: ViewKind.JOB_LOGS,
}


@dataclass
class View:
    params: ViewParams
    cached_items: Optional[Any] = None
    # Set by a mutation; the items are still shown but must be fetched again
    stale: bool = False
    retry_failed: Set[int] = field(default_factory=set)

    @property
    def kind(self) -> ViewKind:
        return _KINDS[type(self.params)]

    def invalidate(self):
        self.stale = True

    def store(self, items: Any):
        self.cached_items = items
        self.stale = False


class JobAction(str, Enum):
    LOGS = "Logs"
    RETRY = "Retry"
    CANCEL = "Cancel"


@dataclass(frozen=True)
class BranchSelection:
    """Branch picker opened from a project node"""

    project_id: int
    project_name: str
    branches: Tuple[Branch, ...]

    def has_branch(self, name: str) -> bool:
        return any(branch.name == name for branch in self.branches)


@dataclass(frozen=True)
class JobActionDialog:
    """Logs / Retry / Cancel decision for one job"""

    project_id: int
    job_id: int
    job_name: str = ""


Dialog = Union[BranchSelection, JobActionDialog]
