"""Loaders reading dumps of a parsed module tree (YAML / JSON) from disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, ClassVar, Final, Protocol, cast, runtime_checkable

import pydantic
from ruamel.yaml import YAML

from ..config import InputVars
from ..exceptions import ModuleTreeLoadError
from .blocks import Module

logger = logging.getLogger(__name__)

_YAML_EXTS: Final[set[str]] = {".yaml", ".yml"}
_JSON_EXTS: Final[set[str]] = {".json"}

# marker suffix used to find the tree dump inside a project directory
TREE_FILE_STEM: Final[str] = ".tree"

_yaml_parser = YAML(typ="safe")  # safe loader, YAML 1.2


@runtime_checkable
class LoaderProtocol(Protocol):
    """Required signature for every concrete loader."""

    supported_exts: ClassVar[set[str]]

    @staticmethod
    def load(path: str | Path) -> Module: ...


class ModuleTreeFileLoader:
    """Read a module tree dump from disk and return the root :class:`Module`."""

    supported_exts: ClassVar[set[str]] = _YAML_EXTS | _JSON_EXTS

    @staticmethod
    def load(path: str | Path) -> Module:
        file_path = Path(path)

        # validation
        if not file_path.exists():
            logger.error("File not found: %s", file_path)
            raise ModuleTreeLoadError(f"File not found: {file_path}", str(file_path))

        suffix = file_path.suffix.lower()
        if suffix not in ModuleTreeFileLoader.supported_exts:
            raise ModuleTreeLoadError(
                f"Unsupported extension '{file_path.suffix}'. "
                f"Supported: {', '.join(sorted(ModuleTreeFileLoader.supported_exts))}",
                str(file_path),
            )

        raw_text = file_path.read_text(encoding="utf-8")

        # parse
        try:
            if suffix in _YAML_EXTS:
                data: Any = _yaml_parser.load(raw_text)
            else:  # .json
                data = json.loads(raw_text)
        except Exception as exc:
            raise ModuleTreeLoadError(
                f"Cannot parse {file_path.name}: {exc}", str(file_path)
            ) from exc

        if not isinstance(data, dict):
            raise ModuleTreeLoadError(
                "Top-level object must be a mapping", str(file_path)
            )

        try:
            module = Module.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ModuleTreeLoadError(
                f"Invalid module tree in {file_path.name}: {exc}", str(file_path)
            ) from exc

        logger.debug(
            "Module tree loaded (%d blocks, %d child modules)",
            len(module.blocks),
            len(module.modules),
        )
        return module


class LoaderFactory:
    """Resolve the concrete loader for a path; first match wins."""

    _LOADERS: tuple[type[LoaderProtocol], ...] = (ModuleTreeFileLoader,)

    @classmethod
    def resolve(cls, path: str | Path) -> type[LoaderProtocol]:
        """Return the first loader that *claims* to support the given path."""
        for loader in cls._LOADERS:
            if Path(path).suffix.lower() in loader.supported_exts:
                return cast(type[LoaderProtocol], loader)

        raise ModuleTreeLoadError(f"No loader found for: {path}", str(path))


class TreeFileParser:
    """
    Module parser backed by a tree dump instead of raw ``.tf`` sources.

    Accepts either the dump file itself or a project directory holding
    exactly one ``*.tree.json`` / ``*.tree.yaml`` / ``*.tree.yml`` file.
    Input variables are kept for introspection: values in a dump have
    already been evaluated by whatever produced it.
    """

    def __init__(self, path: str | Path, input_vars: InputVars | None = None):
        self.path = Path(path)
        self.input_vars = input_vars or InputVars()
        self._logger = logger.getChild(self.__class__.__name__)

    def find_tree_file(self) -> Path:
        """
        Locate the tree dump for the configured path.

        Returns:
            Path of the dump file

        Raises:
            ModuleTreeLoadError: If no single dump file can be found
        """
        if not self.path.exists():
            raise ModuleTreeLoadError(f"Path not found: {self.path}", str(self.path))

        if self.path.is_file():
            return self.path

        candidates = sorted(
            candidate
            for candidate in self.path.iterdir()
            if candidate.is_file()
            and candidate.suffix.lower() in ModuleTreeFileLoader.supported_exts
            and candidate.stem.endswith(TREE_FILE_STEM)
        )
        if len(candidates) != 1:
            raise ModuleTreeLoadError(
                f"Expected exactly one module tree dump in {self.path}, "
                f"found {len(candidates)}",
                str(self.path),
            )
        return candidates[0]

    def parse_directory(self) -> Module:
        tree_file = self.find_tree_file()
        self._logger.info(f"Loading module tree: {tree_file}")

        if self.input_vars.vars or self.input_vars.files:
            self._logger.debug(
                f"Tree dumps are pre-evaluated; {len(self.input_vars.vars)} var(s) "
                f"and {len(self.input_vars.files)} var file(s) recorded only"
            )

        loader = LoaderFactory.resolve(tree_file)
        return loader.load(tree_file)

    def get_parser_info(self) -> dict[str, Any]:
        """
        Get information about this parser.

        Returns:
            Dictionary containing parser information
        """
        return {
            "class_name": self.__class__.__name__,
            "path": str(self.path),
            "supported_extensions": sorted(ModuleTreeFileLoader.supported_exts),
            "vars": list(self.input_vars.vars),
            "var_files": list(self.input_vars.files),
        }
