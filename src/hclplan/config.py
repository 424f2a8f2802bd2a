"""
Project configuration for a plan synthesis run.

Holds the per-project settings (path, plan flags, input variables) and the
resolution of input variables from those settings.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field
from ruamel.yaml import YAML

from .exceptions import InputVarsError, ModuleTreeLoadError, VarFlagSyntaxError

logger = logging.getLogger(__name__)

_yaml_parser = YAML(typ="safe")


@dataclass
class InputVars:
    """Input variables to hand over to the parser, in precedence order."""

    vars: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)


class ProjectConfig(BaseModel):
    """Settings for a single project directory."""

    path: Path = Field(
        default=Path("."), description="Directory holding the configuration."
    )
    terraform_plan_flags: str = Field(
        default="",
        description="Raw flags, as passed to `terraform plan`, to mine for vars.",
    )
    terraform_vars: list[str] = Field(
        default_factory=list, description="Explicit K=V input variables."
    )
    terraform_var_files: list[str] = Field(
        default_factory=list, description="Explicit variable file paths."
    )

    model_config = ConfigDict(extra="forbid")


def load_project_config(file_path: Path) -> ProjectConfig:
    """
    Load a project configuration from a YAML or JSON file.

    A relative ``path`` entry is resolved against the file's directory.

    Args:
        file_path: Path to the configuration file

    Returns:
        The validated ProjectConfig

    Raises:
        ModuleTreeLoadError: If the file cannot be read or is invalid
    """
    if not file_path.exists():
        raise ModuleTreeLoadError(f"Config file not found: {file_path}", str(file_path))

    raw_text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data: Any = json.loads(raw_text)
        else:
            data = _yaml_parser.load(raw_text)
    except Exception as exc:
        raise ModuleTreeLoadError(
            f"Cannot parse {file_path.name}: {exc}", str(file_path)
        ) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ModuleTreeLoadError("Top-level object must be a mapping", str(file_path))

    try:
        config = ProjectConfig.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ModuleTreeLoadError(
            f"Invalid project config in {file_path.name}: {exc}", str(file_path)
        ) from exc

    if not config.path.is_absolute():
        config.path = (file_path.parent / config.path).resolve()

    logger.debug(f"Loaded project config for {config.path}")
    return config


def resolve_input_vars(config: ProjectConfig) -> InputVars:
    """
    Combine flag-derived input variables with the explicit config lists.

    Flag-derived entries come first; explicit ones are appended so that they
    win on conflicting keys downstream.

    Raises:
        InputVarsError: If the plan flags string is malformed
    """
    from .flags import parse_var_flags

    try:
        input_vars = parse_var_flags(config.terraform_plan_flags)
    except VarFlagSyntaxError as e:
        raise InputVarsError(
            f"could not parse vars from plan flags: {e}", str(config.path)
        ) from e

    input_vars.files.extend(config.terraform_var_files)
    input_vars.vars.extend(config.terraform_vars)

    logger.debug(
        f"Resolved {len(input_vars.vars)} var(s) and "
        f"{len(input_vars.files)} var file(s)"
    )
    return input_vars
