import logging
from collections.abc import Iterable

from ..core.protocols import ConfigBlock
from ..hcl.blocks import BlockKind
from .models import ProviderConfig

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Records declared provider configurations for one translation.

    The first provider registered, whatever its type, becomes the default
    key for resources that do not name a provider.
    """

    def __init__(self) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self.provider_configs: dict[str, ProviderConfig] = {}
        self.default_key: str = ""

    def register(self, block: ConfigBlock) -> str:
        """
        Record one provider block.

        Args:
            block: A block of kind "provider"

        Returns:
            The provider key, ``<type>`` or ``<type>.<alias>``
        """
        key = block.type_label
        alias = block.get_attribute("alias")
        if alias is not None and isinstance(alias.value, str) and alias.value:
            key = f"{key}.{alias.value}"

        region = ""
        region_attr = block.get_attribute("region")
        if region_attr is not None and isinstance(region_attr.value, str):
            region = region_attr.value

        self.provider_configs[key] = ProviderConfig(
            name=key,
            expressions={"region": {"constant_value": region}},
        )
        self._logger.debug(f"Registered provider '{key}' (region={region!r})")

        if not self.default_key:
            self.default_key = key
            self._logger.debug(f"Default provider key set to '{key}'")

        return key

    def register_all(self, blocks: Iterable[ConfigBlock]) -> list[str]:
        """Register every provider block among ``blocks``; others are ignored."""
        return [
            self.register(block)
            for block in blocks
            if BlockKind.classify(block.kind) is BlockKind.PROVIDER
        ]

    def resolve_key(self, block: ConfigBlock) -> str:
        """
        Return the provider key a resource uses.

        An explicit ``provider`` attribute wins: its reference when it is
        one, else its literal string. Otherwise the default key applies.
        """
        return block.explicit_provider_label or self.default_key
