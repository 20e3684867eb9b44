# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Navigation state machine over the group/project/pipeline/job hierarchy.

The navigator owns a stack of views. The root is always the group list.
Each transition fetches the data for the level it moves to. If the fetch
fails, the transition is abandoned: the stack is left as it was and the
failure is kept in ``error`` for the renderer to display. Branch selection
and job actions are dialogs on top of the stack. They are never stack
entries themselves.
"""

import time
import logging
from functools import wraps
from typing import Any, Callable, List, Optional

from .config import Config
from .errors import NavigationReferenceError, RemoteError
from .models import GroupNode
from .render import Screen, build_screen
from .views import (
    BranchSelection,
    Dialog,
    GroupListParams,
    JobAction,
    JobActionDialog,
    JobListParams,
    JobLogsParams,
    PipelineListParams,
    View,
    ViewKind,
    ViewParams,
)

log = logging.getLogger(__name__)


def transition(method):
    """Run a navigator transition; failures leave the state untouched and set ``error``"""

    @wraps(method)
    def wrapper(self, *args, **kwargs) -> bool:
        try:
            method(self, *args, **kwargs)
        except RemoteError as e:
            log.warning("%s failed: %s", method.__name__, e)
            self.error = str(e)
            return False
        except NavigationReferenceError as e:
            log.error("%s rejected: %s", method.__name__, e)
            self.error = str(e)
            return False
        self.error = None
        return True

    return wrapper


class Navigator:
    def __init__(self, client, config: Config):
        self.client = client
        self.config = config
        self.stack: List[View] = []
        self.dialog: Optional[Dialog] = None
        self.error: Optional[str] = None

    @property
    def current(self) -> View:
        if not self.stack:
            raise NavigationReferenceError("Navigator has not been launched")
        return self.stack[-1]

    @property
    def root(self) -> View:
        return self.stack[0]

    @property
    def last_filter(self) -> str:
        if not self.stack:
            return ""
        return self.root.params.filter_text

    # Fetching

    def _fetch(self, description: str, call: Callable, *args) -> Any:
        """Single point where the navigator blocks on the remote API"""
        start = time.time()
        result = call(*args)
        log.debug("%s took %.2fs", description, time.time() - start)
        return result

    def _load(self, params: ViewParams) -> Any:
        if isinstance(params, GroupListParams):
            groups = self._fetch("list groups", self.client.list_groups, params.filter_text)
            nodes = []
            for group in groups:
                projects = self._fetch(f"list projects of {group.id}", self.client.list_projects, group.id)
                nodes.append(GroupNode(group, tuple(projects)))
            return nodes
        if isinstance(params, PipelineListParams):
            return self._fetch(
                "list pipelines", self.client.list_pipelines, params.project_id, params.branch
            )
        if isinstance(params, JobListParams):
            return self._fetch(
                "list jobs", self.client.list_jobs, params.project_id, params.pipeline_id
            )
        if isinstance(params, JobLogsParams):
            blob = self._fetch(
                "fetch job log", self.client.fetch_job_log, params.project_id, params.job_id
            )
            return blob.decode("utf-8", errors="replace")
        raise NavigationReferenceError(f"Unknown view parameters {params!r}")

    def _push(self, params: ViewParams):
        items = self._load(params)
        self.stack.append(View(params, items))
        log.info("Entered %s %s (depth %d)", self.current.kind.value, params, len(self.stack))

    def _reload(self, view: View):
        view.store(self._load(view.params))

    def _require(self, kind: ViewKind) -> View:
        view = self.current
        if view.kind is not kind:
            raise NavigationReferenceError(
                f"Action needs a {kind.value} view, currently on {view.kind.value}"
            )
        return view

    # Root level

    @transition
    def launch(self, filter_text: str = ""):
        """Show the group list for the first time."""
        params = GroupListParams(filter_text or "")
        items = self._load(params)
        self.stack = [View(params, items)]
        self.dialog = None
        log.info("Launched with filter %r: %d groups", params.filter_text, len(items))

    @transition
    def submit_filter(self, filter_text: str):
        """Replace the group list with one filtered by ``filter_text``."""
        self._require(ViewKind.GROUP_LIST)
        params = GroupListParams(filter_text.strip())
        items = self._load(params)
        self.stack[0] = View(params, items)
        self.dialog = None

    @transition
    def replace_root(self, filter_text: Optional[str] = None):
        """Drop every pushed view and show the group list.

        Without ``filter_text`` the previously used filter is kept.
        """
        if filter_text is None:
            filter_text = self.last_filter
        params = GroupListParams(filter_text.strip())
        items = self._load(params)
        self.stack = [View(params, items)]
        self.dialog = None

    # Drill down

    def enter(self, ref) -> bool:
        """Activate a node or list item of the current screen"""
        if isinstance(self.dialog, BranchSelection):
            return self.select_branch(ref)
        if isinstance(self.dialog, JobActionDialog):
            return self.choose_job_action(ref)
        if not self.stack:
            self.error = "Navigator has not been launched"
            return False

        kind = self.current.kind
        if kind is ViewKind.GROUP_LIST:
            return self.select_project(ref)
        if kind is ViewKind.PIPELINE_LIST:
            return self.select_pipeline(ref)
        if kind is ViewKind.JOB_LIST:
            return self.select_job(ref)
        # Log lines are not selectable
        return False

    @transition
    def select_project(self, project_id):
        view = self._require(ViewKind.GROUP_LIST)
        if project_id is None:
            raise NavigationReferenceError("Selected node is not a project")
        project = None
        for node in view.cached_items or ():
            for candidate in node.projects:
                if candidate.id == project_id:
                    project = candidate
        if project is None:
            raise NavigationReferenceError(f"Project {project_id} is not in the group list")

        branches = self._fetch("list branches", self.client.list_branches, project.id)
        self.dialog = BranchSelection(project.id, project.name, tuple(branches))

    @transition
    def select_branch(self, branch: str):
        if not isinstance(self.dialog, BranchSelection):
            raise NavigationReferenceError("No branch selection is open")
        if not self.dialog.has_branch(branch):
            raise NavigationReferenceError(f"Unknown branch {branch!r}")
        self._push(PipelineListParams(self.dialog.project_id, branch))
        self.dialog = None

    @transition
    def select_pipeline(self, pipeline_id):
        view = self._require(ViewKind.PIPELINE_LIST)
        if not any(pipeline.id == pipeline_id for pipeline in view.cached_items or ()):
            raise NavigationReferenceError(f"Pipeline {pipeline_id} is not in the list")
        params = view.params
        self._push(JobListParams(params.project_id, params.branch, pipeline_id))

    @transition
    def select_job(self, job_id):
        view = self._require(ViewKind.JOB_LIST)
        job = next((job for job in view.cached_items or () if job.id == job_id), None)
        if job is None:
            raise NavigationReferenceError(f"Job {job_id} is not in the list")
        self.dialog = JobActionDialog(view.params.project_id, job.id, job.name)

    @transition
    def choose_job_action(self, action):
        dialog = self.dialog
        if not isinstance(dialog, JobActionDialog):
            raise NavigationReferenceError("No job is selected")
        try:
            action = JobAction(action)
        except ValueError:
            raise NavigationReferenceError(f"Unknown job action {action!r}")

        # The decision is resolved before the stack changes
        self.dialog = None
        view = self._require(ViewKind.JOB_LIST)

        if action is JobAction.LOGS:
            self._push(JobLogsParams(dialog.project_id, dialog.job_id))
        elif action is JobAction.RETRY:
            self._retry(view, dialog)

    def _retry(self, view: View, dialog: JobActionDialog):
        try:
            self._fetch("retry job", self.client.retry_job, dialog.project_id, dialog.job_id)
        except RemoteError:
            view.retry_failed.add(dialog.job_id)
            raise
        view.retry_failed.discard(dialog.job_id)
        view.invalidate()
        # A failed refresh keeps the previous jobs on screen, still marked stale
        self._reload(view)

    def cancel_dialog(self) -> bool:
        if self.dialog is None:
            return False
        log.debug("Dialog %s abandoned", type(self.dialog).__name__)
        self.dialog = None
        self.error = None
        return True

    # Going back

    def back(self) -> bool:
        """Close the open dialog, or pop the top view.

        Returns False at the root, which is never popped.
        """
        if self.dialog is not None:
            return self.cancel_dialog()
        if len(self.stack) <= 1:
            return False

        popped = self.stack.pop()
        revealed = self.current
        log.info("Back from %s to %s", popped.kind.value, revealed.kind.value)
        self.error = None
        if self.config.refresh_on_back or revealed.stale or revealed.cached_items is None:
            try:
                self._reload(revealed)
            except RemoteError as e:
                log.warning("Refreshing %s failed: %s", revealed.kind.value, e)
                self.error = str(e)
        return True

    @transition
    def refresh(self):
        """Fetch the current view again, keeping its items if the fetch fails."""
        self._reload(self.current)

    def render(self) -> Screen:
        return build_screen(self.current, self.config.gitlab_url, self.dialog, self.error)
