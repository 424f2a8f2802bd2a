import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .config import InputVars, ProjectConfig, resolve_input_vars
from .core.protocols import ConfigModule, ModuleParser
from .exceptions import PlanSerializationError
from .hcl.loader import TreeFileParser
from .plan.models import PlanDocument
from .plan.walker import DEFAULT_MAX_DEPTH, ModuleTreeWalker, TranslationContext

logger = logging.getLogger(__name__)

ParserFactory = Callable[[Path, InputVars], ModuleParser]

SERIALIZATION_ERROR_CONTEXT = "error handling built plan json from hcl"


class HCLPlanProvider:
    """
    Synthesizes a plan document from a Terraform directory without running
    Terraform.

    The directory is parsed into a module tree by the parser produced by
    ``parser_factory``; the tree is then walked into plan JSON.
    """

    def __init__(
        self,
        config: ProjectConfig,
        parser_factory: ParserFactory = TreeFileParser,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._logger = logger.getChild(self.__class__.__name__)
        self.config = config
        self.max_depth = max_depth

        # InputVarsError surfaces here, before any translation starts
        self.input_vars = resolve_input_vars(config)
        self.parser = parser_factory(config.path, self.input_vars)

    @property
    def type(self) -> str:
        return "terraform_hcl"

    @property
    def display_type(self) -> str:
        return "Terraform directory (HCL)"

    def get_provider_info(self) -> dict[str, Any]:
        """
        Get information about this provider.

        Returns:
            Dictionary containing provider information
        """
        return {
            "type": self.type,
            "display_type": self.display_type,
            "path": str(self.config.path),
            "vars": list(self.input_vars.vars),
            "var_files": list(self.input_vars.files),
            "parser": self.parser.__class__.__name__,
            "max_depth": self.max_depth,
        }

    def load_plan(self) -> PlanDocument:
        """Parse the configured directory and synthesize its plan document."""
        self._logger.info(f"Parsing {self.display_type}: {self.config.path}")
        root = self.parser.parse_directory()
        return self.modules_to_plan(root)

    def load_plan_json(self) -> str:
        """
        Parse the configured directory and return its plan as indented JSON.

        Raises:
            ModuleTreeLoadError: Propagated unchanged from the parser
            ModuleGraphError: If the module tree is cyclic or too deep
            PlanSerializationError: If the plan cannot be serialized
        """
        return self.serialize(self.load_plan())

    def modules_to_plan(self, root: ConfigModule) -> PlanDocument:
        """Walk an already-parsed module tree with a fresh translation context."""
        walker = ModuleTreeWalker(max_depth=self.max_depth)
        return walker.walk(root, TranslationContext())

    def modules_to_plan_json(self, root: ConfigModule) -> str:
        """Same as :meth:`modules_to_plan`, serialized to indented JSON."""
        return self.serialize(self.modules_to_plan(root))

    def serialize(self, document: PlanDocument) -> str:
        try:
            payload = document.model_dump(mode="json")
            return json.dumps(payload, indent=2)
        except (TypeError, ValueError) as e:
            self._logger.error(f"Plan serialization failed: {e}")
            raise PlanSerializationError(f"{SERIALIZATION_ERROR_CONTEXT}: {e}") from e
