from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from inspector.core.config.settings import ActionInputs, RunEnvironment
from inspector.core.pointer import PullRequestContext

FIXTURES = Path(__file__).parent / "fixtures"

OLD_SDL = """
type Query {
  oldQuery: OldType @deprecated(reason: "use newQuery")
  newQuery: Int!
}

type OldType {
  field: String!
}
"""

NEW_SDL = """
type Query {
  newQuery: Int!
}
"""


class RecordingReporter:
    def __init__(self):
        self.records: List[Tuple[str, str]] = []
        self.outputs: Dict[str, str] = {}
        self.annotations = []
        self.failed = False
        self.failure_message: Optional[str] = None

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value

    def set_failed(self, message: str) -> None:
        self.failed = True
        self.failure_message = message
        self.records.append(("failed", message))

    def annotate(self, annotation) -> None:
        self.annotations.append(annotation)

    def messages(self, kind: str) -> List[str]:
        return [m for k, m in self.records if k == kind]


class FakeLoader:
    """Serves schema text by ref; records every call."""

    def __init__(self, by_ref: Dict[Optional[str], str]):
        self.by_ref = by_ref
        self.calls: List[Dict[str, Optional[str]]] = []

    def load(self, *, ref: Optional[str], path: str, workspace: Optional[str] = None) -> str:
        self.calls.append({"ref": ref, "path": path, "workspace": workspace})
        if ref not in self.by_ref:
            raise AssertionError(f"unexpected ref {ref!r}")
        return self.by_ref[ref]


@pytest.fixture()
def reporter():
    return RecordingReporter()


@pytest.fixture()
def make_inputs():
    def _make(**overrides) -> ActionInputs:
        data = {"github_token": "MOCK_GITHUB_TOKEN", "schema_pointer": "master:schema.graphql"}
        data.update(overrides)
        return ActionInputs(**data)

    return _make


@pytest.fixture()
def run_env(tmp_path: Path):
    return RunEnvironment(
        sha="abc123",
        commit_sha="abc123",
        workspace=str(tmp_path),
        repository="some-owner/graphql-inspector",
    )


@pytest.fixture()
def open_pr():
    return PullRequestContext(state="open", number=1, base_ref="master")
