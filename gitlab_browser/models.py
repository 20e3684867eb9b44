# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Read-only projections of the GitLab entities the browser displays"""

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated listing, with the server's pagination state"""

    items: List[T]
    current_page: int
    total_pages: Optional[int] = None
    next_page: Optional[int] = None


@dataclass(frozen=True)
class Group:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Group":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
        )


@dataclass(frozen=True)
class Project:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
        )


@dataclass(frozen=True)
class Branch:
    name: str
    default: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Branch":
        return cls(name=data["name"], default=bool(data.get("default", False)))


@dataclass(frozen=True)
class Pipeline:
    id: int
    status: str
    ref: str = ""
    source: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pipeline":
        return cls(
            id=data["id"],
            status=data.get("status", "unknown"),
            ref=data.get("ref", ""),
            source=data.get("source") or "",
            updated_at=data.get("updated_at") or "",
        )


@dataclass(frozen=True)
class Job:
    id: int
    name: str
    status: str
    stage: str = ""
    duration: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            status=data.get("status", "unknown"),
            stage=data.get("stage", ""),
            duration=data.get("duration"),
        )


@dataclass(frozen=True)
class GroupNode:
    """A group together with the projects listed under it"""

    group: Group
    projects: Tuple[Project, ...] = ()
