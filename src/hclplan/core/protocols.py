from collections.abc import Mapping, Sequence
from typing import Any, Protocol


class ConfigReference(Protocol):
    """Defines the contract for a symbolic pointer to another address."""

    def __str__(self) -> str:
        """Canonical form used by the parser (e.g. ``variable.region``)."""
        ...

    def json_string(self) -> str:
        """Form used inside plan documents (e.g. ``var.region``)."""
        ...


class ConfigAttribute(Protocol):
    """Defines the contract for a single attribute of a parsed block."""

    @property
    def name(self) -> str: ...

    @property
    def value(self) -> Any:
        """The resolved, JSON-compatible value of the attribute."""
        ...

    def all_references(self) -> Sequence[ConfigReference]:
        """
        Returns every symbolic reference found in the attribute expression.

        Returns:
            References in encounter order, without duplicates.
        """
        ...


class ConfigBlock(Protocol):
    """Defines the contract for a parsed configuration block."""

    @property
    def kind(self) -> str:
        """Block kind (e.g. "resource", "provider", "ebs_block_device")."""
        ...

    @property
    def type_label(self) -> str: ...

    @property
    def name_label(self) -> str:
        """Name label, including the ``[n]`` suffix for repeated instances."""
        ...

    @property
    def full_address(self) -> str: ...

    @property
    def local_address(self) -> str: ...

    @property
    def module_address(self) -> str: ...

    @property
    def module_name(self) -> str: ...

    @property
    def repetition_index(self) -> int | None: ...

    @property
    def explicit_provider_label(self) -> str:
        """Label set through the ``provider`` attribute; empty when absent."""
        ...

    @property
    def provider_name(self) -> str:
        """Explicit provider label if set, else inferred from the type prefix."""
        ...

    @property
    def is_inside_non_root_module(self) -> bool: ...

    @property
    def attributes(self) -> Sequence[ConfigAttribute]: ...

    @property
    def children(self) -> Sequence["ConfigBlock"]: ...

    def get_attribute(self, name: str) -> ConfigAttribute | None: ...

    def values(self) -> Mapping[str, Any] | None:
        """Returns the attribute values keyed by attribute name."""
        ...


class ConfigModule(Protocol):
    """Defines the contract for a node of the parsed module tree."""

    @property
    def name(self) -> str:
        """Full module name (``module.a.module.b``); empty for the root."""
        ...

    @property
    def source(self) -> str: ...

    @property
    def blocks(self) -> Sequence[ConfigBlock]: ...

    @property
    def call_name(self) -> str:
        """Key under which the parent lists this module call."""
        ...

    @property
    def modules(self) -> Sequence["ConfigModule"]: ...


class ModuleParser(Protocol):
    """Defines the contract for the parser producing the module tree."""

    def parse_directory(self) -> ConfigModule:
        """Parses the project directory into its root module."""
        ...
