"""Inspector exceptions.

Expected failures of a run derive from ``InspectorError``; the entry point
reports their message and fails the job. Anything else raised by the diff
engine propagates unchanged.
"""

from __future__ import annotations


class InspectorError(Exception):
    pass


class ConfigurationError(InspectorError):
    pass


class FileLoadError(InspectorError):
    def __init__(self, *, ref: str | None, path: str, reason: str):
        self.ref = ref
        self.path = path
        self.reason = reason
        where = f"{ref}:{path}" if ref else path
        super().__init__(f"Failed to load {where}: {reason}")


class BuildError(InspectorError):
    def __init__(self, *, side: str, message: str):
        self.side = side
        self.message = message
        super().__init__(f"Failed to build {side} schema: {message}")


class GitHubAPIError(InspectorError):
    def __init__(self, *, status: int | None, url: str, message: str):
        self.status = status
        self.url = url
        super().__init__(f"GitHub API request failed ({status or 'no response'}) {url}: {message}")
