"""Conversion of block attribute values into plan document value trees."""

import copy
import logging
from collections.abc import Mapping
from typing import Any

from ..core.protocols import ConfigBlock
from ..hcl.blocks import BlockKind

logger = logging.getLogger(__name__)

# handled through the count expression of the configuration record
COUNT_ATTRIBUTE = "count"


def marshal_attribute_values(
    block_kind: str, values: Mapping[str, Any] | None
) -> dict[str, Any] | None:
    """
    Convert a block's attribute values into a JSON-compatible mapping.

    Args:
        block_kind: Raw kind of the block owning the values
        values: Attribute values keyed by name, or None

    Returns:
        The value mapping, or None when the block carries no value
    """
    if values is None:
        return None

    kind = BlockKind.classify(block_kind)
    drop_count = kind in (BlockKind.RESOURCE, BlockKind.MODULE)

    result: dict[str, Any] = {}
    for key, value in values.items():
        if drop_count and key == COUNT_ATTRIBUTE:
            continue
        result[key] = copy.deepcopy(value)
    return result


def marshal_block(block: ConfigBlock, json_values: dict[str, Any]) -> None:
    """
    Fold the child blocks of ``block`` into ``json_values``.

    Each child is marshalled on its own and appended to a list stored under
    the child's kind, in encounter order. Dynamic and depends_on children are
    skipped together with everything below them.
    """
    for child in block.children:
        key = child.kind
        if BlockKind.classify(key).is_meta:
            logger.debug(f"Skipping meta block '{key}' in {block.full_address}")
            continue

        child_values = marshal_attribute_values(key, child.values()) or {}
        if child.children:
            marshal_block(child, child_values)

        existing = json_values.get(key)
        if isinstance(existing, list):
            existing.append(child_values)
        else:
            json_values[key] = [child_values]


def marshal_values(block: ConfigBlock) -> dict[str, Any] | None:
    """Marshal a block's own attributes and nested blocks in one go."""
    json_values = marshal_attribute_values(block.kind, block.values())
    if json_values is None:
        return None

    marshal_block(block, json_values)
    return json_values
