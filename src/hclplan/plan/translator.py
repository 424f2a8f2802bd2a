"""Translation of a single resource block into its three plan records."""

import logging
import re
from dataclasses import dataclass

from ..core.protocols import ConfigBlock
from .marshal import marshal_values
from .models import Change, ResourceChange, ResourceData, ResourceJSON
from .providers import ProviderRegistry
from .references import block_to_references, count_expression

logger = logging.getLogger(__name__)

_INDEX_SUFFIX = re.compile(r"\[\d+\]$")


def strip_count(address: str) -> str:
    """Remove a trailing ``[n]`` repetition index from an address or name."""
    return _INDEX_SUFFIX.sub("", address)


@dataclass
class ResourceOutput:
    """The records produced for one resource block."""

    planned: ResourceJSON
    change: ResourceChange
    configuration: ResourceData


class BlockTranslator:
    """Turns resource blocks into planned value, change and config records."""

    def __init__(self, providers: ProviderRegistry) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self._providers = providers

    def translate(self, block: ConfigBlock) -> ResourceOutput:
        """
        Translate one resource block.

        Args:
            block: A block of kind "resource"

        Returns:
            ResourceOutput with the planned value snapshot, the create change
            and the static configuration entry
        """
        address = block.full_address
        name = strip_count(block.name_label)
        index = block.repetition_index

        values = marshal_values(block)

        planned = ResourceJSON(
            address=address,
            type=block.type_label,
            name=name,
            index=index,
            values=values,
        )
        change = ResourceChange(
            address=address,
            module_address=block.module_address or None,
            type=block.type_label,
            name=name,
            index=index,
            change=Change(actions=["create"], before=None, after=values),
        )

        if block.is_inside_non_root_module:
            config_address = strip_count(block.local_address)
            provider_key = f"{block.module_name}:{block.provider_name}"
        else:
            config_address = strip_count(address)
            provider_key = self._providers.resolve_key(block)

        configuration = ResourceData(
            address=config_address,
            type=block.type_label,
            name=name,
            provider_config_key=provider_key,
            expressions=block_to_references(block),
            count_expression=count_expression(block),
        )

        self._logger.debug(
            f"Translated '{address}' (config '{config_address}', "
            f"provider '{provider_key}')"
        )
        return ResourceOutput(planned=planned, change=change, configuration=configuration)
