"""
CI platform output.

``GitHubActionsReporter`` speaks the GitHub Actions workflow-command
protocol: plain lines for info, ``::error``/``::warning``/``::notice`` for
messages and annotations, and ``name=value`` records appended to the file
named by ``GITHUB_OUTPUT`` for step outputs.
"""

from __future__ import annotations

import logging
import sys
import uuid
from pathlib import Path
from typing import IO, Dict, Optional, Protocol

from inspector.core.diff.invoke import Annotation

log = logging.getLogger("inspector.reporting")

_ANNOTATION_COMMANDS = {
    "failure": "error",
    "warning": "warning",
    "notice": "notice",
}


class Reporter(Protocol):
    failed: bool

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def set_output(self, name: str, value: str) -> None:
        ...

    def set_failed(self, message: str) -> None:
        ...

    def annotate(self, annotation: Annotation) -> None:
        ...


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


class GitHubActionsReporter:
    def __init__(self, *, stream: Optional[IO[str]] = None, output_file: Optional[Path] = None):
        self.stream = stream or sys.stdout
        self.output_file = Path(output_file) if output_file else None
        self.outputs: Dict[str, str] = {}
        self.failed = False
        self.failure_message: Optional[str] = None

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def _command(self, command: str, message: str, properties: Optional[Dict[str, object]] = None) -> None:
        props = ""
        if properties:
            props = " " + ",".join(
                f"{k}={escape_property(str(v))}" for k, v in properties.items() if v is not None
            )
        self._write(f"::{command}{props}::{escape_data(message)}")

    def info(self, message: str) -> None:
        self._write(message)

    def error(self, message: str) -> None:
        self._command("error", message)

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value
        if self.output_file is None:
            log.debug("GITHUB_OUTPUT not set; output %s=%s not persisted", name, value)
            return
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with self.output_file.open("a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    def set_failed(self, message: str) -> None:
        self.failed = True
        self.failure_message = message
        self.error(message)

    def annotate(self, annotation: Annotation) -> None:
        self._command(
            _ANNOTATION_COMMANDS.get(annotation.level, "notice"),
            annotation.message,
            {
                "file": annotation.path,
                "line": annotation.start_line,
                "endLine": annotation.end_line,
            },
        )

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
