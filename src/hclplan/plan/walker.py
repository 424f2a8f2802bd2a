"""
Module tree traversal.

Walks a parsed module tree depth-first, pre-order, and assembles the plan
document: the planned-value tree, the flat change list and the configuration
tree with its nested module calls.
"""

import logging
from dataclasses import dataclass, field

from ..core.protocols import ConfigBlock, ConfigModule
from ..exceptions import ModuleCycleError, ModuleDepthError
from ..hcl.blocks import BlockKind
from .models import ModuleCall, ModuleConfig, PlanDocument, PlanModule
from .providers import ProviderRegistry
from .translator import BlockTranslator

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


@dataclass
class TranslationContext:
    """
    Mutable state of one translation.

    Holds the plan document under construction and the provider registry.
    A context is never shared between translations.
    """

    document: PlanDocument = field(default_factory=PlanDocument)
    providers: ProviderRegistry = field(default_factory=ProviderRegistry)
    module_path: list[str] = field(default_factory=list)
    _active: set[int] = field(default_factory=set, repr=False)

    def enter(self, module: ConfigModule) -> None:
        """Push ``module`` on the current path, rejecting re-entry."""
        label = module.name or "<root>"
        if id(module) in self._active:
            raise ModuleCycleError(
                "module cycle detected", module_path=[*self.module_path, label]
            )
        self._active.add(id(module))
        self.module_path.append(label)

    def leave(self, module: ConfigModule) -> None:
        self._active.discard(id(module))
        self.module_path.pop()


class ModuleTreeWalker:
    """Builds a plan document from a module tree."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self.max_depth = max_depth

    def walk(
        self, root: ConfigModule, context: TranslationContext | None = None
    ) -> PlanDocument:
        """
        Translate a whole module tree.

        Args:
            root: Root module of the parsed tree
            context: Translation state; a fresh one is created when omitted

        Returns:
            The completed plan document

        Raises:
            ModuleCycleError: If a module is reached again below itself
            ModuleDepthError: If modules nest deeper than ``max_depth``
        """
        context = context or TranslationContext()
        translator = BlockTranslator(context.providers)

        self._logger.info(f"Walking module tree rooted at '{root.name or '<root>'}'")
        planned, config = self._walk_module(root, context, translator, depth=0)

        document = context.document
        document.planned_values.root_module = planned
        document.configuration.root_module = config
        document.configuration.provider_config = dict(
            context.providers.provider_configs
        )

        self._logger.info(
            f"Plan assembled: {len(document.resource_changes)} resource change(s), "
            f"{len(document.configuration.provider_config)} provider config(s)"
        )
        return document

    def _walk_module(
        self,
        module: ConfigModule,
        context: TranslationContext,
        translator: BlockTranslator,
        depth: int,
    ) -> tuple[PlanModule, ModuleConfig]:
        if depth > self.max_depth:
            raise ModuleDepthError(
                f"Module nesting deeper than {self.max_depth} levels at "
                f"'{module.name}'",
                max_depth=self.max_depth,
            )

        context.enter(module)
        try:
            self._logger.debug(f"Entering module '{module.name or '<root>'}'")

            # providers first so resources see this module's declarations
            context.providers.register_all(module.blocks)

            planned = PlanModule(address=module.name or None)
            config = ModuleConfig()
            seen: set[str] = set()

            for block in self._resource_blocks(module):
                output = translator.translate(block)

                context.document.resource_changes.append(output.change)
                planned.resources.append(output.planned)

                config_address = output.configuration.address
                if config_address in seen:
                    self._logger.debug(
                        f"Configuration for '{config_address}' already recorded"
                    )
                    continue
                seen.add(config_address)
                config.resources.append(output.configuration)

            for child in module.modules:
                child_planned, child_config = self._walk_module(
                    child, context, translator, depth + 1
                )
                planned.child_modules.append(child_planned)
                config.module_calls[child.call_name] = ModuleCall(
                    source=child.source, module=child_config
                )
        finally:
            context.leave(module)

        return planned, config

    @staticmethod
    def _resource_blocks(module: ConfigModule) -> list[ConfigBlock]:
        return [
            block
            for block in module.blocks
            if BlockKind.classify(block.kind) is BlockKind.RESOURCE
        ]
