"""
blocks.py – parsed configuration tree
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Validated models for the block/module tree handed over by the HCL parser.
They satisfy the protocols in ``hclplan.core.protocols`` and can be built
from a plain dict (e.g. a JSON or YAML dump of a parsed directory).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class BlockKind(str, Enum):
    """Block kinds the plan synthesizer distinguishes."""

    RESOURCE = "resource"
    MODULE = "module"
    PROVIDER = "provider"
    DYNAMIC = "dynamic"
    DEPENDS_ON = "depends_on"
    NESTED = "nested"

    @classmethod
    def classify(cls, kind: str) -> BlockKind:
        """Map a raw block kind to a member; unknown kinds are NESTED."""
        try:
            return cls(kind)
        except ValueError:
            return cls.NESTED

    @property
    def is_meta(self) -> bool:
        """True for kinds that carry no plannable state."""
        return self in (BlockKind.DYNAMIC, BlockKind.DEPENDS_ON)


class ReferenceKind(str, Enum):
    """Kind of address a reference points at."""

    RESOURCE = "resource"
    DATA = "data"
    VARIABLE = "variable"
    LOCAL = "local"
    MODULE = "module"
    CONTEXT = "context"


# prefixes as they appear in expressions
_PREFIX_KINDS: dict[str, ReferenceKind] = {
    "var": ReferenceKind.VARIABLE,
    "variable": ReferenceKind.VARIABLE,
    "local": ReferenceKind.LOCAL,
    "data": ReferenceKind.DATA,
    "module": ReferenceKind.MODULE,
}
_CONTEXT_PREFIXES = {"count", "each", "path", "self", "terraform"}


# ---------------------------------------------------------------------------
# Core building blocks
# ---------------------------------------------------------------------------


class Reference(BaseModel):
    """Symbolic pointer from an attribute to another configuration address."""

    kind: ReferenceKind = Field(..., description="What the reference points at.")
    label: str = Field(
        ..., description="Address without the kind prefix (e.g. 'ami_id')."
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _accept_text(cls, data: Any) -> Any:
        if isinstance(data, str):
            return cls._split(data)
        return data

    @field_validator("label")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("Reference.label must not be empty")
        return v

    @staticmethod
    def _split(text: str) -> dict[str, Any]:
        text = text.strip()
        prefix, _, rest = text.partition(".")
        if prefix in _PREFIX_KINDS and rest:
            return {"kind": _PREFIX_KINDS[prefix], "label": rest}
        if prefix in _CONTEXT_PREFIXES:
            return {"kind": ReferenceKind.CONTEXT, "label": text}
        return {"kind": ReferenceKind.RESOURCE, "label": text}

    @classmethod
    def parse(cls, text: str) -> Reference:
        """Build a reference from ``var.x``, ``variable.x``, ``aws_vpc.main.id``..."""
        return cls.model_validate(text)

    def __str__(self) -> str:
        if self.kind in (ReferenceKind.RESOURCE, ReferenceKind.CONTEXT):
            return self.label
        return f"{self.kind.value}.{self.label}"

    def json_string(self) -> str:
        if self.kind is ReferenceKind.VARIABLE:
            return f"var.{self.label}"
        return str(self)


class Attribute(BaseModel):
    """A named attribute of a block with its resolved value."""

    name: str = Field(..., description="Attribute name as written in config.")
    value: Any = Field(None, description="Resolved, JSON-compatible value.")
    references: list[Reference] = Field(
        default_factory=list,
        description="References extracted from the attribute expression.",
    )

    model_config = ConfigDict(extra="forbid")

    def all_references(self) -> list[Reference]:
        seen: set[Reference] = set()
        unique = []
        for ref in self.references:
            if ref not in seen:
                seen.add(ref)
                unique.append(ref)
        return unique


class Block(BaseModel):
    """One declaration unit: a resource, provider, module call or sub-block."""

    kind: str = Field(..., description="Raw block kind, e.g. 'resource'.")
    labels: list[str] = Field(
        default_factory=list, description="Block labels (type, name)."
    )
    attributes: list[Attribute] = Field(default_factory=list)
    children: list[Block] = Field(default_factory=list)
    index: NonNegativeInt | None = Field(
        None, description="Repetition index for count-expanded instances."
    )
    module_address: str = Field(
        "", description="Address of the owning module; empty for the root."
    )

    model_config = ConfigDict(extra="forbid")

    # ----- identity ----------------------------------------------------------
    @property
    def block_kind(self) -> BlockKind:
        return BlockKind.classify(self.kind)

    @property
    def type_label(self) -> str:
        return self.labels[0] if self.labels else ""

    @property
    def name_label(self) -> str:
        name = self.labels[1] if len(self.labels) > 1 else ""
        if self.index is not None:
            name = f"{name}[{self.index}]"
        return name

    @property
    def repetition_index(self) -> int | None:
        return self.index

    @property
    def local_address(self) -> str:
        if self.block_kind is BlockKind.RESOURCE:
            return f"{self.type_label}.{self.name_label}"

        parts = [self.kind, *self.labels]
        if self.index is not None:
            parts[-1] = f"{parts[-1]}[{self.index}]"
        return ".".join(parts)

    @property
    def full_address(self) -> str:
        if self.module_address:
            return f"{self.module_address}.{self.local_address}"
        return self.local_address

    @property
    def module_name(self) -> str:
        """Module call path without the ``module.`` keywords (``a.b``)."""
        return ".".join(self.module_address.split(".")[1::2])

    @property
    def is_inside_non_root_module(self) -> bool:
        return bool(self.module_address)

    # ----- provider ----------------------------------------------------------
    @property
    def explicit_provider_label(self) -> str:
        attribute = self.get_attribute("provider")
        if attribute is None:
            return ""

        references = attribute.all_references()
        if references:
            return str(references[0])
        if isinstance(attribute.value, str):
            return attribute.value
        return ""

    @property
    def provider_name(self) -> str:
        return self.explicit_provider_label or self.type_label.split("_", 1)[0]

    # ----- attributes --------------------------------------------------------
    def get_attribute(self, name: str) -> Attribute | None:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def values(self) -> dict[str, Any]:
        return {attribute.name: attribute.value for attribute in self.attributes}

    def assign_module_address(self, module_address: str) -> None:
        """Set the owning module address on this block and all sub-blocks."""
        self.module_address = module_address
        for child in self.children:
            child.assign_module_address(module_address)


class Module(BaseModel):
    """A scope of blocks plus its child module calls."""

    name: str = Field(
        "", description="Full module name (module.a.module.b); empty for root."
    )
    source: str = Field("", description="Module source as written in the call.")
    blocks: list[Block] = Field(default_factory=list)
    modules: list[Module] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _propagate_module_address(self) -> Module:
        if self.name:
            for block in self.blocks:
                if not block.module_address:
                    block.assign_module_address(self.name)
        return self

    @property
    def call_name(self) -> str:
        """Key under which the parent lists this module call."""
        return self.name.split(".")[-1]
