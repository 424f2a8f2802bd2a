"""
HCL Plan Exception Classes

Custom exceptions for error handling across plan synthesis, tree loading
and input variable handling.
"""

from typing import Any


class HCLPlanError(Exception):
    """Base exception for all hclplan errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg = f"{base_msg} (Context: {context_str})"
        return base_msg


class ModuleTreeLoadError(HCLPlanError):
    """Raised when a parsed module tree cannot be read or validated."""

    def __init__(self, message: str, path: str | None = None) -> None:
        context = {}
        if path:
            context["path"] = path
        super().__init__(message, "MODULE_TREE_LOAD_ERROR", context)


class VarFlagSyntaxError(HCLPlanError):
    """Raised when a raw plan flags string is malformed."""

    def __init__(self, message: str, flags: str | None = None) -> None:
        context = {}
        if flags is not None:
            context["flags"] = flags
        super().__init__(message, "VAR_FLAG_SYNTAX_ERROR", context)


class InputVarsError(HCLPlanError):
    """Raised when input variables cannot be resolved from the project config."""

    def __init__(self, message: str, project_path: str | None = None) -> None:
        context = {}
        if project_path:
            context["project_path"] = project_path
        super().__init__(message, "INPUT_VARS_ERROR", context)


class PlanSerializationError(HCLPlanError):
    """Raised when the synthesized plan document cannot be serialized."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "PLAN_SERIALIZATION_ERROR")


class ModuleGraphError(HCLPlanError):
    """Base for malformed module graphs found while walking the tree."""


class ModuleCycleError(ModuleGraphError):
    """Raised when a module is re-entered while it is still being walked."""

    def __init__(self, message: str, module_path: list[str] | None = None) -> None:
        context = {}
        if module_path:
            context["module_path"] = " -> ".join(module_path)
        super().__init__(message, "MODULE_CYCLE_DETECTED", context)


class ModuleDepthError(ModuleGraphError):
    """Raised when module nesting goes deeper than the walker allows."""

    def __init__(self, message: str, max_depth: int | None = None) -> None:
        context = {}
        if max_depth is not None:
            context["max_depth"] = max_depth
        super().__init__(message, "MODULE_DEPTH_EXCEEDED", context)


class ValidationError(HCLPlanError):
    """Raised when command line input validation fails."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        expected_type: type | None = None,
        actual_value: Any = None,
    ) -> None:
        context = {}
        if field_name:
            context["field_name"] = field_name
        if expected_type:
            context["expected_type"] = expected_type.__name__
        if actual_value is not None:
            context["actual_value"] = str(actual_value)
        super().__init__(message, "VALIDATION_ERROR", context)

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the validation error."""
        if "field_name" in self.context and "expected_type" in self.context:
            field = self.context["field_name"]
            expected = self.context["expected_type"]
            return f"Ensure '{field}' is of type {expected}"
        return "Check the command line arguments and input paths"
