# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Exception types shared by the client, navigator and CLI"""

from typing import Optional


class GitLabBrowserError(Exception):
    """Base class for all browser errors"""


class ConfigError(GitLabBrowserError):
    """Required configuration is missing or invalid"""


class RemoteError(GitLabBrowserError):
    """A GitLab request failed (network, HTTP status or response decoding)"""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self):
        if self.cause is not None:
            return f"{self.args[0]}: {self.cause}"
        return self.args[0]


class NavigationReferenceError(GitLabBrowserError):
    """A selected node does not carry a key that is valid for the current view"""
