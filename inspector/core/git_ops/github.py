from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from inspector.core.config.settings import DEFAULT_API_URL
from inspector.core.errors import GitHubAPIError
from inspector.core.pointer import PullRequestContext

log = logging.getLogger("inspector.github")

RAW_MEDIA_TYPE = "application/vnd.github.raw+json"
JSON_MEDIA_TYPE = "application/vnd.github+json"
API_VERSION = "2022-11-28"


class GitHubClient:
    """Thin REST client for the two endpoints the action needs."""

    def __init__(
        self,
        token: str,
        *,
        repository: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        owner, _, repo = (repository or "").partition("/")
        self.owner = owner
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": "graphql-inspector-action",
        })

    def _url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/{path.lstrip('/')}"

    def _get(self, path: str, *, params: Optional[Dict[str, Any]] = None, accept: str = JSON_MEDIA_TYPE) -> requests.Response:
        url = self._url(path)
        try:
            resp = self.session.get(url, params=params, headers={"Accept": accept}, timeout=self.timeout)
        except requests.RequestException as e:
            raise GitHubAPIError(status=None, url=url, message=str(e)) from e

        log.debug("GET %s params=%s status=%s", url, params, resp.status_code)
        if resp.status_code >= 400:
            raise GitHubAPIError(status=resp.status_code, url=url, message=resp.text[:500])
        return resp

    def list_pull_requests_for_commit(self, commit_sha: str) -> List[Dict[str, Any]]:
        resp = self._get(f"commits/{commit_sha}/pulls")
        data = resp.json()
        return data if isinstance(data, list) else []

    def get_file_contents(self, path: str, ref: Optional[str]) -> str:
        params = {"ref": ref} if ref else None
        resp = self._get(f"contents/{path.lstrip('/')}", params=params, accept=RAW_MEDIA_TYPE)
        resp.encoding = resp.encoding or "utf-8"
        return resp.text


def pull_request_from_payload(pr: Dict[str, Any]) -> PullRequestContext:
    base = pr.get("base") or {}
    head = pr.get("head") or {}
    labels = frozenset(
        label.get("name")
        for label in (pr.get("labels") or [])
        if isinstance(label, dict) and label.get("name")
    )
    return PullRequestContext(
        state=str(pr.get("state") or "closed"),
        number=int(pr["number"]),
        base_ref=base.get("ref") or None,
        head_sha=head.get("sha") or None,
        labels=labels,
    )


def get_associated_pull_request(client: GitHubClient, commit_sha: Optional[str]) -> Optional[PullRequestContext]:
    if not commit_sha:
        return None
    pulls = client.list_pull_requests_for_commit(commit_sha)
    if not pulls:
        log.debug("no pull request associated with %s", commit_sha)
        return None
    return pull_request_from_payload(pulls[0])
