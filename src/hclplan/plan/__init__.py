"""Plan document models and the module tree walker producing them."""

from .models import PlanDocument
from .providers import ProviderRegistry
from .translator import BlockTranslator, ResourceOutput
from .walker import ModuleTreeWalker, TranslationContext

__all__ = [
    "PlanDocument",
    "ProviderRegistry",
    "BlockTranslator",
    "ResourceOutput",
    "ModuleTreeWalker",
    "TranslationContext",
]
