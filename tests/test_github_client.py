import pytest
import requests

from inspector.core.errors import FileLoadError, GitHubAPIError
from inspector.core.git_ops.files import RepositoryFileLoader
from inspector.core.git_ops.github import GitHubClient, get_associated_pull_request


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.encoding = "utf-8"

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = responses
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        result = self.responses[url]
        if isinstance(result, Exception):
            raise result
        return result


API = "https://api.github.com/repos/octo/repo"


def _client(responses):
    session = FakeSession(responses)
    return GitHubClient("tok", repository="octo/repo", timeout=5, session=session), session


def test_headers_are_set():
    _, session = _client({})
    assert session.headers["Authorization"] == "Bearer tok"
    assert "X-GitHub-Api-Version" in session.headers


def test_associated_pull_request_uses_first_result():
    client, session = _client({
        f"{API}/commits/abc/pulls": FakeResponse(payload=[
            {
                "number": 5,
                "state": "open",
                "base": {"ref": "main"},
                "head": {"sha": "abc"},
                "labels": [{"name": "approved-breaking-change"}, {"name": "docs"}],
            },
            {"number": 6, "state": "open"},
        ]),
    })

    pr = get_associated_pull_request(client, "abc")

    assert pr.number == 5
    assert pr.is_open
    assert pr.base_ref == "main"
    assert pr.has_label("approved-breaking-change")
    assert session.requests[0]["timeout"] == 5


def test_no_pull_request():
    client, _ = _client({f"{API}/commits/abc/pulls": FakeResponse(payload=[])})
    assert get_associated_pull_request(client, "abc") is None
    assert get_associated_pull_request(client, None) is None


def test_error_status_raises():
    client, _ = _client({f"{API}/commits/abc/pulls": FakeResponse(status_code=403, text="rate limited")})

    with pytest.raises(GitHubAPIError) as exc:
        client.list_pull_requests_for_commit("abc")

    assert exc.value.status == 403


def test_transport_error_raises():
    client, _ = _client({f"{API}/commits/abc/pulls": requests.ConnectionError("boom")})

    with pytest.raises(GitHubAPIError):
        client.list_pull_requests_for_commit("abc")


def test_file_contents_at_ref():
    client, session = _client({f"{API}/contents/schema.graphql": FakeResponse(text="type Query { a: Int }")})

    assert client.get_file_contents("schema.graphql", "master") == "type Query { a: Int }"
    assert session.requests[0]["params"] == {"ref": "master"}
    assert "raw" in session.requests[0]["headers"]["Accept"]


def test_loader_maps_missing_remote_file():
    client, _ = _client({f"{API}/contents/schema.graphql": FakeResponse(status_code=404, text="Not Found")})

    with pytest.raises(FileLoadError, match="master:schema.graphql: file not found"):
        RepositoryFileLoader(client).load(ref="master", path="schema.graphql")


def test_loader_reads_workspace(tmp_path):
    (tmp_path / "schema.graphql").write_text("type Query { a: Int }", encoding="utf-8")
    client, session = _client({})

    text = RepositoryFileLoader(client).load(ref="abc", path="schema.graphql", workspace=str(tmp_path))

    assert text == "type Query { a: Int }"
    assert session.requests == []


def test_loader_missing_workspace_file(tmp_path):
    client, _ = _client({})

    with pytest.raises(FileLoadError, match="file not found"):
        RepositoryFileLoader(client).load(ref="abc", path="nope.graphql", workspace=str(tmp_path))


def test_loader_rejects_invalid_utf8(tmp_path):
    (tmp_path / "schema.graphql").write_bytes(b"type Query { a: \xff }")
    client, _ = _client({})

    with pytest.raises(FileLoadError, match="not valid UTF-8"):
        RepositoryFileLoader(client).load(ref="abc", path="schema.graphql", workspace=str(tmp_path))
