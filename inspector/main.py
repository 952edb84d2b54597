from __future__ import annotations

import logging
import os
import sys
import traceback
from pathlib import Path
from typing import Mapping, Optional

from inspector.core.config.settings import load_settings
from inspector.core.errors import InspectorError
from inspector.core.git_ops.files import RepositoryFileLoader
from inspector.core.git_ops.github import GitHubClient, get_associated_pull_request
from inspector.core.pipeline import run
from inspector.core.reporting.reporter import GitHubActionsReporter

log = logging.getLogger("inspector.main")


def configure_logging(environ: Mapping[str, str]) -> None:
    level_name = environ.get("INSPECTOR_LOG_LEVEL", "WARNING").upper()
    if environ.get("RUNNER_DEBUG") == "1":
        level_name = "DEBUG"
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    environ = os.environ if environ is None else environ
    configure_logging(environ)

    reporter = GitHubActionsReporter(
        output_file=Path(environ["GITHUB_OUTPUT"]) if environ.get("GITHUB_OUTPUT") else None,
    )

    try:
        inputs, env = load_settings(environ)
        client = GitHubClient(
            inputs.github_token,
            repository=env.repository or "",
            api_url=env.api_url,
            timeout=env.http_timeout,
        )
        run(
            inputs,
            env,
            reporter=reporter,
            loader=RepositoryFileLoader(client),
            find_pull_request=lambda sha: get_associated_pull_request(client, sha),
        )
    except InspectorError as e:
        reporter.set_failed(str(e))
    except Exception as e:
        log.error("Unhandled error: %s\n%s", str(e), traceback.format_exc())
        reporter.set_failed(f"GraphQL Inspector failed: {e}")

    return reporter.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
