"""
Reference extraction for configuration records.

Builds the ``expressions`` mapping (attribute name -> references) and the
``count_expression`` of a resource from its parsed block.
"""

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.protocols import ConfigBlock
from ..hcl.blocks import BlockKind
from .marshal import COUNT_ATTRIBUTE
from .models import CountExpression

logger = logging.getLogger(__name__)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_VARIABLE_PREFIX = "variable."
_VAR_PREFIX = "var."


def block_to_references(block: ConfigBlock) -> dict[str, Any]:
    """
    Collect the references of every attribute of ``block`` and its children.

    Attributes without references are left out; so is the count attribute,
    which gets its own expression. Child blocks are grouped into lists under
    their kind, the same way values are folded.

    Returns:
        Mapping such as ``{"ami": {"references": ["var.ami_id"]},
        "ebs_block_device": [{"volume_size": {"references": [...]}}]}``
    """
    expressions: dict[str, Any] = {}

    for attribute in block.attributes:
        if attribute.name == COUNT_ATTRIBUTE:
            continue

        references = attribute.all_references()
        if references:
            expressions[attribute.name] = {
                "references": [ref.json_string() for ref in references]
            }

    child_expressions: dict[str, list[dict[str, Any]]] = {}
    for child in block.children:
        if BlockKind.classify(child.kind).is_meta:
            continue

        child_references = block_to_references(child)
        if child_references:
            child_expressions.setdefault(child.kind, []).append(child_references)

    expressions.update(child_expressions)
    return expressions


def count_expression(block: ConfigBlock) -> CountExpression | None:
    """
    Build the count expression of a block.

    Returns:
        An expression holding the count references, or the constant count
        when it has none; None when the block has no count attribute or the
        constant cannot be read as a number
    """
    attribute = block.get_attribute(COUNT_ATTRIBUTE)
    if attribute is None:
        return None

    references = attribute.all_references()
    if references:
        rewritten: list[str] = []
        for ref in references:
            text = _shorten_variable_prefix(str(ref))
            if text not in rewritten:
                rewritten.append(text)
        return CountExpression(references=rewritten)

    constant = to_int64(attribute.value)
    if constant is None:
        logger.warning(
            f"Count of '{block.full_address}' is not a number "
            f"({attribute.value!r}); leaving out its count expression"
        )
        return None

    return CountExpression(constant_value=constant)


def to_int64(value: Any) -> int | None:
    """Truncate a numeric value toward zero, clamped to the int64 range."""
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        number = int(value)
    elif isinstance(value, str):
        try:
            decimal = Decimal(value.strip())
        except (InvalidOperation, ValueError):
            return None
        if not decimal.is_finite():
            return None
        # clamp while still a Decimal
        decimal = max(Decimal(_INT64_MIN), min(Decimal(_INT64_MAX), decimal))
        number = int(decimal)
    else:
        return None

    return max(_INT64_MIN, min(_INT64_MAX, number))


def _shorten_variable_prefix(reference: str) -> str:
    if reference.startswith(_VARIABLE_PREFIX):
        return _VAR_PREFIX + reference[len(_VARIABLE_PREFIX) :]
    return reference
