# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

import time
import logging
from contextlib import contextmanager
from itertools import islice
from typing import Any, Callable, Dict, List, Optional, TypeVar

import gitlab
import requests

from .config import Config
from .errors import RemoteError
from .listing import accumulate_pages, filter_by_name
from .models import Branch, Group, Job, Page, Pipeline, Project

T = TypeVar("T")

log = logging.getLogger(__name__)


@contextmanager
def remote_call(description: str):
    """Convert any python-gitlab, transport or decoding failure into RemoteError"""
    try:
        yield
    except gitlab.exceptions.GitlabError as e:
        raise RemoteError(f"Error {description}", e) from e
    except requests.exceptions.RequestException as e:
        raise RemoteError(f"Error {description}", e) from e
    except (KeyError, TypeError, ValueError) as e:
        raise RemoteError(f"Invalid response {description}", e) from e


class ResourceClient:
    """Stateless adapter over the GitLab REST API used by the navigator"""

    def __init__(self, config: Config, gl: Optional[gitlab.Gitlab] = None):
        self.config = config
        self.gl = gl or gitlab.Gitlab(
            config.gitlab_url,
            private_token=config.gitlab_token,
            timeout=config.request_timeout,
        )

    def _fetch_page(self, manager, page: int, filters: Optional[Dict[str, Any]] = None) -> Page[Dict[str, Any]]:
        start = time.time()
        objects = manager.list(page=page, per_page=self.config.per_page, iterator=True, **(filters or {}))

        # Iterating a RESTObjectList past the end of a page fetches the next one,
        # so a page that announces a successor is read only up to its size
        limit = (objects.per_page or self.config.per_page) if objects.next_page else None
        items = [obj.attributes for obj in islice(objects, limit)]

        result = Page(
            items=items,
            current_page=objects.current_page or page,
            total_pages=objects.total_pages,
            next_page=objects.next_page,
        )
        log.debug(
            "Listed %s page %s/%s: %d items (%.2fs)",
            manager.path, result.current_page, result.total_pages, len(items), time.time() - start,
        )
        return result

    def _list_all(
        self,
        manager,
        factory: Callable[[Dict[str, Any]], T],
        description: str,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[T]:
        with remote_call(description):
            rows = accumulate_pages(lambda page: self._fetch_page(manager, page, filters))
            return [factory(row) for row in rows]

    def _project(self, project_id: int):
        return self.gl.projects.get(project_id, lazy=True)

    def list_groups(self, filter_text: Optional[str] = None) -> List[Group]:
        """Get every group visible to the token, optionally filtered by name."""
        groups = self._list_all(self.gl.groups, Group.from_dict, "fetching groups")
        return filter_by_name(groups, filter_text or "")

    def list_projects(self, group_id: int) -> List[Project]:
        """Get the projects of a group."""
        group = self.gl.groups.get(group_id, lazy=True)
        return self._list_all(
            group.projects,
            Project.from_dict,
            f"fetching projects for group {group_id}",
        )

    def list_branches(self, project_id: int) -> List[Branch]:
        """Get the branches of a project."""
        return self._list_all(
            self._project(project_id).branches,
            Branch.from_dict,
            f"fetching branches for project {project_id}",
        )

    def list_pipelines(self, project_id: int, branch: str) -> List[Pipeline]:
        """Get the pipelines of a project that ran on a branch, newest first."""
        return self._list_all(
            self._project(project_id).pipelines,
            Pipeline.from_dict,
            f"fetching pipelines for project {project_id} and branch {branch}",
            filters={"ref": branch},
        )

    def list_jobs(self, project_id: int, pipeline_id: int) -> List[Job]:
        """Get the jobs of a pipeline."""
        pipeline = self._project(project_id).pipelines.get(pipeline_id, lazy=True)
        return self._list_all(
            pipeline.jobs,
            Job.from_dict,
            f"fetching jobs for project {project_id} and pipeline {pipeline_id}",
        )

    def fetch_job_log(self, project_id: int, job_id: int) -> bytes:
        """Get the raw trace of a job."""
        with remote_call(f"fetching logs for job {job_id}"):
            job = self._project(project_id).jobs.get(job_id, lazy=True)
            trace = job.trace()
        if isinstance(trace, str):
            trace = trace.encode("utf-8")
        log.debug("Fetched %d bytes of log for job %s", len(trace), job_id)
        return trace

    def retry_job(self, project_id: int, job_id: int) -> None:
        """Retry a job. The new status is only visible after listing the jobs again."""
        with remote_call(f"retrying job {job_id}"):
            self._project(project_id).jobs.get(job_id, lazy=True).retry()
        log.info("Job %s in project %s retried", job_id, project_id)
