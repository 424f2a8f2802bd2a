"""Synthesize Terraform plan JSON from a parsed HCL module tree."""

from .config import InputVars, ProjectConfig, load_project_config, resolve_input_vars
from .exceptions import HCLPlanError
from .plan.models import PlanDocument
from .provider import HCLPlanProvider

__all__ = [
    "HCLPlanProvider",
    "HCLPlanError",
    "InputVars",
    "PlanDocument",
    "ProjectConfig",
    "load_project_config",
    "resolve_input_vars",
]
