from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Protocol, Tuple

from inspector.core.errors import FileLoadError, GitHubAPIError
from inspector.core.git_ops.github import GitHubClient
from inspector.core.pointer import Targets

log = logging.getLogger("inspector.files")


class FileLoader(Protocol):
    def load(self, *, ref: Optional[str], path: str, workspace: Optional[str] = None) -> str:
        ...


class RepositoryFileLoader:
    """
    Reads a schema file either from the checked-out workspace or, when no
    workspace is given, from the repository at ``ref`` through the API.
    """

    def __init__(self, client: GitHubClient):
        self.client = client

    def load(self, *, ref: Optional[str], path: str, workspace: Optional[str] = None) -> str:
        if workspace:
            fp = Path(workspace) / path
            try:
                return fp.read_text(encoding="utf-8")
            except FileNotFoundError as e:
                raise FileLoadError(ref=None, path=str(fp), reason="file not found") from e
            except UnicodeDecodeError as e:
                raise FileLoadError(ref=None, path=str(fp), reason=f"not valid UTF-8 ({e.reason})") from e
            except OSError as e:
                raise FileLoadError(ref=None, path=str(fp), reason=str(e)) from e

        try:
            return self.client.get_file_contents(path, ref)
        except GitHubAPIError as e:
            reason = "file not found" if e.status == 404 else str(e)
            raise FileLoadError(ref=ref, path=path, reason=reason) from e


def load_pair(loader: FileLoader, targets: Targets) -> Tuple[str, str]:
    """
    Load the old and new schema concurrently. Either failure aborts;
    the first exception raised is propagated.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="inspector-load") as pool:
        old_future = pool.submit(loader.load, ref=targets.base_ref, path=targets.path)
        new_future = pool.submit(
            loader.load,
            ref=targets.head_ref,
            path=targets.path,
            workspace=targets.workspace,
        )
        old_text = old_future.result()
        new_text = new_future.result()

    log.debug("loaded old=%s bytes new=%s bytes", len(old_text), len(new_text))
    return old_text, new_text
