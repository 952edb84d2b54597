from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from inspector.core.errors import ConfigurationError


@dataclass(frozen=True)
class SchemaPointer:
    ref: str
    path: str


@dataclass(frozen=True)
class PullRequestContext:
    state: str  # "open" | "closed"
    number: int
    base_ref: Optional[str] = None
    head_sha: Optional[str] = None
    labels: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_open(self) -> bool:
        return self.state == "open"

    def has_label(self, name: str) -> bool:
        return bool(name) and name in self.labels


@dataclass(frozen=True)
class Targets:
    head_ref: Optional[str]
    base_ref: str
    path: str
    workspace: Optional[str]
    merge_ref_used: bool = False
    base_ref_overridden: bool = False


def merge_ref(number: int) -> str:
    return f"refs/pull/{number}/merge"


def parse_pointer(raw: str) -> SchemaPointer:
    """
    Split ``"ref:path"`` on the first colon.

    The ref may be empty, the path may not.
    """
    raw = (raw or "").strip()
    if not raw:
        raise ConfigurationError("Failed to find `schema` variable")

    ref, sep, path = raw.partition(":")
    ref, path = ref.strip(), path.strip()
    if not sep or not path:
        raise ConfigurationError(
            f"Invalid `schema` pointer '{raw}'. Expected <ref>:<path>, e.g. master:schema.graphql"
        )
    return SchemaPointer(ref=ref, path=path)


def resolve_targets(
    pointer: SchemaPointer,
    pull_request: Optional[PullRequestContext],
    *,
    merge_enabled: bool = True,
    head_ref: Optional[str] = None,
    workspace: Optional[str] = None,
) -> Targets:
    """
    Decide which refs the old and new schema are read from.

    With merge mode on and an open pull request the new schema comes from the
    PR merge ref (fetched remotely, so no workspace) and the old schema from
    the PR target branch when it is known.
    """
    if not (merge_enabled and pull_request is not None and pull_request.is_open):
        return Targets(
            head_ref=head_ref,
            base_ref=pointer.ref,
            path=pointer.path,
            workspace=workspace,
        )

    base_ref = pointer.ref
    overridden = False
    if pull_request.base_ref:
        base_ref = pull_request.base_ref
        overridden = True

    return Targets(
        head_ref=merge_ref(pull_request.number),
        base_ref=base_ref,
        path=pointer.path,
        workspace=None,
        merge_ref_used=True,
        base_ref_overridden=overridden,
    )
