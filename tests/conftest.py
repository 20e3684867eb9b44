from typing import Dict, List, Optional

import pytest

from gitlab_browser.config import Config
from gitlab_browser.errors import RemoteError
from gitlab_browser.models import Branch, Group, Job, Pipeline, Project


class FakeResourceClient:
    """In-memory ResourceClient that records calls and fails on demand."""

    def __init__(self):
        self.groups: List[Group] = [Group(1, "Alpha"), Group(2, "beta")]
        self.projects: Dict[int, List[Project]] = {
            1: [Project(42, "api")],
            2: [Project(43, "web")],
        }
        self.branches: Dict[int, List[Branch]] = {
            42: [Branch("main", default=True), Branch("develop")],
            43: [Branch("main", default=True)],
        }
        self.pipelines: Dict[tuple, List[Pipeline]] = {
            (42, "main"): [Pipeline(7, "failed", ref="main"), Pipeline(6, "success", ref="main")],
            (42, "develop"): [Pipeline(8, "running", ref="develop")],
        }
        self.jobs: Dict[tuple, List[Job]] = {
            (42, 7): [Job(99, "test", "failed", stage="test"), Job(100, "build", "success", stage="build")],
        }
        self.logs: Dict[int, bytes] = {99: b"\x1b[31mAssertionError\x1b[0m\n"}
        self.retry_status = "pending"
        self.calls: List[tuple] = []
        self.failures: Dict[str, Exception] = {}

    def fail(self, method: str, message: str = "connection refused"):
        self.failures[method] = RemoteError(f"Error in {method}", ConnectionError(message))

    def heal(self, method: Optional[str] = None):
        if method is None:
            self.failures.clear()
        else:
            self.failures.pop(method, None)

    def _record(self, method, *args):
        self.calls.append((method,) + args)
        if method in self.failures:
            raise self.failures[method]

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)

    def list_groups(self, filter_text=None):
        self._record("list_groups", filter_text)
        needle = (filter_text or "").lower()
        return [g for g in self.groups if needle in g.name.lower()]

    def list_projects(self, group_id):
        self._record("list_projects", group_id)
        return list(self.projects.get(group_id, []))

    def list_branches(self, project_id):
        self._record("list_branches", project_id)
        return list(self.branches.get(project_id, []))

    def list_pipelines(self, project_id, branch):
        self._record("list_pipelines", project_id, branch)
        return list(self.pipelines.get((project_id, branch), []))

    def list_jobs(self, project_id, pipeline_id):
        self._record("list_jobs", project_id, pipeline_id)
        return list(self.jobs.get((project_id, pipeline_id), []))

    def fetch_job_log(self, project_id, job_id):
        self._record("fetch_job_log", project_id, job_id)
        return self.logs.get(job_id, b"")

    def retry_job(self, project_id, job_id):
        self._record("retry_job", project_id, job_id)
        for key, jobs in self.jobs.items():
            if key[0] != project_id:
                continue
            self.jobs[key] = [
                Job(j.id, j.name, self.retry_status, j.stage, j.duration) if j.id == job_id else j
                for j in jobs
            ]


@pytest.fixture
def config(tmp_path):
    return Config(
        config_dir=tmp_path / "config",
        environ={"GITLAB_PERSONAL_TOKEN": "glpat-test", "GITLAB_URL": "https://gitlab.example.com"},
    )


@pytest.fixture
def fake_client():
    return FakeResourceClient()
