"""Interfaces the translation core depends on."""

from .protocols import (
    ConfigAttribute,
    ConfigBlock,
    ConfigModule,
    ConfigReference,
    ModuleParser,
)

__all__ = [
    "ConfigReference",
    "ConfigAttribute",
    "ConfigBlock",
    "ConfigModule",
    "ModuleParser",
]
