"""
Action configuration.

All reads of the process environment happen here. The pipeline receives an
``ActionInputs`` / ``RunEnvironment`` pair and never touches ``os.environ``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from inspector.core.errors import ConfigurationError

log = logging.getLogger("inspector.config")

DEFAULT_NAME = "GraphQL Inspector"
DEFAULT_APPROVE_LABEL = "approved-breaking-change"
DEFAULT_API_URL = "https://api.github.com"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def cast_to_boolean(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
    return default


def split_lines(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(x) for x in value]
    else:
        items = str(value).splitlines()
    return [x.strip() for x in items if x and x.strip()]


def _env_int(environ: Mapping[str, str], key: str, default: int) -> int:
    try:
        return int(environ.get(key, str(default)))
    except (TypeError, ValueError):
        return default


def _env_float(environ: Mapping[str, str], key: str, default: float) -> float:
    try:
        return float(environ.get(key, str(default)))
    except (TypeError, ValueError):
        return default


class ActionInputs(BaseModel):
    github_token: str
    name: str = DEFAULT_NAME
    schema_pointer: str = ""
    experimental_merge: bool = True
    fail_on_breaking: bool = False
    approve_label: str = DEFAULT_APPROVE_LABEL
    rules: List[str] = Field(default_factory=list)
    get_usage: Optional[str] = None

    @field_validator("experimental_merge", mode="before")
    @classmethod
    def _merge_flag(cls, v: Any) -> bool:
        return cast_to_boolean(v, True)

    @field_validator("fail_on_breaking", mode="before")
    @classmethod
    def _fail_flag(cls, v: Any) -> bool:
        return cast_to_boolean(v, False)

    @field_validator("rules", mode="before")
    @classmethod
    def _rules_list(cls, v: Any) -> List[str]:
        return split_lines(v)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return (v or "").strip() or DEFAULT_NAME

    @field_validator("approve_label", mode="before")
    @classmethod
    def _approve_label(cls, v: Any) -> str:
        return (v or "").strip() or DEFAULT_APPROVE_LABEL

    @field_validator("get_usage", mode="before")
    @classmethod
    def _get_usage(cls, v: Any) -> Optional[str]:
        if isinstance(v, str):
            v = v.strip()
        return v or None


class RunEnvironment(BaseModel):
    sha: Optional[str] = None
    commit_sha: Optional[str] = None
    workspace: Optional[str] = None
    repository: Optional[str] = None
    event_name: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    output_file: Optional[str] = None
    summary_limit: int = 100
    http_timeout: float = 30.0

    @property
    def owner(self) -> str:
        return (self.repository or "").partition("/")[0]

    @property
    def repo(self) -> str:
        return (self.repository or "").partition("/")[2]

    def require_workspace(self) -> str:
        if not self.workspace:
            raise ConfigurationError("Failed to resolve workspace directory. GITHUB_WORKSPACE is missing")
        return self.workspace


# field name -> action input name
_INPUT_NAMES = {
    "github_token": "github-token",
    "name": "name",
    "schema_pointer": "schema",
    "experimental_merge": "experimental_merge",
    "fail_on_breaking": "fail-on-breaking",
    "approve_label": "approve-label",
    "rules": "rules",
    "get_usage": "getUsage",
}


def input_env_key(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(environ: Mapping[str, str], name: str) -> str:
    return (environ.get(input_env_key(name)) or "").strip()


def load_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def load_inputs(environ: Mapping[str, str], *, base_dir: Optional[Path] = None) -> ActionInputs:
    """
    Read action inputs from ``INPUT_*`` variables.

    When the ``config`` input names a YAML file, its keys (same names as the
    action inputs) fill in inputs that were not set explicitly.
    """
    raw: Dict[str, Any] = {}

    config_ref = get_input(environ, "config")
    file_values: Dict[str, Any] = {}
    if config_ref:
        config_path = Path(config_ref)
        if not config_path.is_absolute() and base_dir is not None:
            config_path = base_dir / config_path
        file_values = load_config_file(config_path)
        log.debug("loaded config file %s keys=%s", config_path, sorted(file_values))

    for field_name, input_name in _INPUT_NAMES.items():
        value: Any = get_input(environ, input_name)
        if value == "" and input_name in file_values:
            value = file_values[input_name]
        raw[field_name] = value

    if not raw["github_token"]:
        raise ConfigurationError("Input required and not supplied: github-token")

    try:
        return ActionInputs(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid action inputs: {e}") from e


def _event_head_sha(event_path: Optional[str]) -> Optional[str]:
    if not event_path:
        return None
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.debug("event payload %s unreadable: %s", event_path, e)
        return None
    pr = payload.get("pull_request") if isinstance(payload, dict) else None
    if isinstance(pr, dict):
        head = pr.get("head") or {}
        return head.get("sha") or None
    return None


def load_environment(environ: Mapping[str, str]) -> RunEnvironment:
    sha = environ.get("GITHUB_SHA") or None
    event_name = environ.get("GITHUB_EVENT_NAME") or None
    head_sha = None
    if event_name in ("pull_request", "pull_request_target"):
        head_sha = _event_head_sha(environ.get("GITHUB_EVENT_PATH"))

    return RunEnvironment(
        sha=sha,
        commit_sha=head_sha or sha,
        workspace=environ.get("GITHUB_WORKSPACE") or None,
        repository=environ.get("GITHUB_REPOSITORY") or None,
        event_name=event_name,
        api_url=(environ.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/"),
        output_file=environ.get("GITHUB_OUTPUT") or None,
        summary_limit=_env_int(environ, "INSPECTOR_SUMMARY_LIMIT", 100),
        http_timeout=_env_float(environ, "INSPECTOR_HTTP_TIMEOUT", 30.0),
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> tuple[ActionInputs, RunEnvironment]:
    environ = os.environ if environ is None else environ
    env = load_environment(environ)
    base_dir = Path(env.workspace) if env.workspace else None
    return load_inputs(environ, base_dir=base_dir), env
