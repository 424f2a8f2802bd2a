"""
models.py – synthesized plan document
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Pydantic models mirroring the JSON written by ``terraform show -json`` for a
plan, restricted to the parts a downstream cost estimator reads.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)

FORMAT_VERSION: str = "1.0"
TERRAFORM_VERSION: str = "1.1.0"

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, dict)) and not value)


class PlanElement(BaseModel):
    """
    Base for every plan document node.

    Optional fields that are ``None`` or empty are left out of the dump;
    fields listed in ``always_emit`` are written even when empty.
    """

    always_emit: ClassVar[frozenset[str]] = frozenset()

    model_config = ConfigDict(extra="forbid")

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if key in self.always_emit or not _is_empty(value)
        }


# ---------------------------------------------------------------------------
# Planned values
# ---------------------------------------------------------------------------


class ResourceJSON(PlanElement):
    """Snapshot of a resource instance as it will exist after apply."""

    always_emit: ClassVar[frozenset[str]] = frozenset({"values"})

    address: str = Field(..., description="Full address including the index.")
    mode: Literal["managed"] = "managed"
    type: str
    name: str = Field(..., description="Name label without the index suffix.")
    index: int | None = None
    schema_version: int = 0
    values: dict[str, Any] | None = Field(default_factory=dict)


class PlanModule(PlanElement):
    """Planned-value tree node; mirrors one module."""

    resources: list[ResourceJSON] = Field(default_factory=list)
    address: str | None = None
    child_modules: list[PlanModule] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Resource changes
# ---------------------------------------------------------------------------


class Change(PlanElement):
    """Action list plus before/after values; always a plain create here."""

    always_emit: ClassVar[frozenset[str]] = frozenset({"before", "after"})

    actions: list[str] = Field(default_factory=lambda: ["create"])
    before: Any = None
    after: dict[str, Any] | None = None


class ResourceChange(PlanElement):
    """Entry of the flat ``resource_changes`` list."""

    address: str
    module_address: str | None = None
    mode: Literal["managed"] = "managed"
    type: str
    name: str
    index: int | None = None
    change: Change = Field(default_factory=Change)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class CountExpression(PlanElement):
    """Repetition expression: references or a constant, never both."""

    references: list[str] | None = None
    constant_value: int | None = None

    @model_validator(mode="after")
    def _exclusive(self) -> CountExpression:
        if self.references and self.constant_value is not None:
            raise ValueError(
                "CountExpression takes either references or a constant_value"
            )
        return self


class ResourceData(PlanElement):
    """Static configuration entry for a resource (index stripped)."""

    always_emit: ClassVar[frozenset[str]] = frozenset({"provider_config_key"})

    address: str
    mode: Literal["managed"] = "managed"
    type: str
    name: str
    provider_config_key: str = ""
    expressions: dict[str, Any] = Field(default_factory=dict)
    schema_version: int = 0
    count_expression: CountExpression | None = None


class ModuleCall(PlanElement):
    """A ``module`` call: where it comes from and its configuration."""

    always_emit: ClassVar[frozenset[str]] = frozenset({"source", "module"})

    source: str = ""
    module: ModuleConfig = Field(default_factory=lambda: ModuleConfig())


class ModuleConfig(PlanElement):
    """Configuration tree node; mirrors one module."""

    resources: list[ResourceData] = Field(default_factory=list)
    module_calls: dict[str, ModuleCall] = Field(default_factory=dict)


class ProviderConfig(PlanElement):
    """A declared provider configuration."""

    name: str
    expressions: dict[str, Any] = Field(default_factory=dict)


class Configuration(PlanElement):
    always_emit: ClassVar[frozenset[str]] = frozenset({"provider_config", "root_module"})

    provider_config: dict[str, ProviderConfig] = Field(default_factory=dict)
    root_module: ModuleConfig = Field(default_factory=ModuleConfig)


class PlannedValues(PlanElement):
    always_emit: ClassVar[frozenset[str]] = frozenset({"root_module"})

    root_module: PlanModule = Field(default_factory=PlanModule)


class PlanDocument(PlanElement):
    """The complete synthesized plan."""

    always_emit: ClassVar[frozenset[str]] = frozenset(
        {"planned_values", "resource_changes", "configuration"}
    )

    format_version: str = FORMAT_VERSION
    terraform_version: str = TERRAFORM_VERSION
    planned_values: PlannedValues = Field(default_factory=PlannedValues)
    resource_changes: list[ResourceChange] = Field(default_factory=list)
    configuration: Configuration = Field(default_factory=Configuration)


ModuleCall.model_rebuild()
