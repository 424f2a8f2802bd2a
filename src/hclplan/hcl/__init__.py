"""Parsed HCL module trees and the loaders reading them from dumps."""

from .blocks import Attribute, Block, BlockKind, Module, Reference, ReferenceKind
from .loader import LoaderFactory, ModuleTreeFileLoader, TreeFileParser

__all__ = [
    "Attribute",
    "Block",
    "BlockKind",
    "Module",
    "Reference",
    "ReferenceKind",
    "LoaderFactory",
    "ModuleTreeFileLoader",
    "TreeFileParser",
]
