"""
Command-line interface for synthesizing Terraform plan JSON from HCL.

Loads a parsed module tree, walks it into a plan document and writes the
document as JSON, without running Terraform.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from .config import ProjectConfig, load_project_config
from .exceptions import (
    HCLPlanError,
    InputVarsError,
    ModuleGraphError,
    ModuleTreeLoadError,
    PlanSerializationError,
    ValidationError,
)
from .provider import HCLPlanProvider


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure application logging.

    Logs go to stderr so that plan JSON written to stdout stays clean.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable verbose logging from the translation modules if True.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.INFO
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,  # Override existing configuration
    )

    if not verbose and not debug:
        # Quiet mode: only warnings from the library, INFO from the CLI itself
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger(__name__).setLevel(logging.INFO)


def validate_inputs(source: Path, output_file: Path | None) -> None:
    """Validate command line inputs.

    Args:
        source: Tree dump file or project directory.
        output_file: Optional output path for the plan JSON.

    Raises:
        ValidationError: If inputs are invalid.
    """
    if not source.exists():
        raise ValidationError(
            f"Source path does not exist: {source}", field_name="source"
        )

    if output_file is None:
        return

    if output_file.suffix.lower() != ".json":
        raise ValidationError(
            f"Output file must have .json extension, got: {output_file.suffix}",
            field_name="output_file",
        )

    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise ValidationError(
            f"Cannot create output directory: {e}", field_name="output_file"
        ) from e


def build_project_config(
    source: Path,
    config_file: Path | None = None,
    plan_flags: str | None = None,
    var_args: list[str] | None = None,
    var_files: list[str] | None = None,
) -> ProjectConfig:
    """
    Merge the optional project file with the command line options.

    Command line vars and var files are appended after the ones from the
    project file; ``plan_flags`` replaces the file's flags when given.
    """
    config = load_project_config(config_file) if config_file else ProjectConfig()

    update: dict = {"path": source}
    if plan_flags is not None:
        update["terraform_plan_flags"] = plan_flags
    if var_args:
        update["terraform_vars"] = [*config.terraform_vars, *var_args]
    if var_files:
        update["terraform_var_files"] = [*config.terraform_var_files, *var_files]

    return config.model_copy(update=update)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="hclplan",
        description="Synthesize Terraform plan JSON from a parsed HCL module tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write the plan of a project directory to stdout
  hclplan examples/network

  # Write to a file, with variables taken from plan flags
  hclplan examples/network -o out/plan.json --plan-flags "-var=env=prod"

  # Use a project config file and debug output
  hclplan examples/network --config hclplan.yml --debug

Source Requirements:
  - SOURCE is a module tree dump (.json, .yaml, .yml) or a directory
    holding exactly one *.tree.json / *.tree.yaml / *.tree.yml file
        """,
    )

    parser.add_argument(
        "source",
        type=Path,
        help="Module tree dump file or project directory",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_file",
        type=Path,
        help="Path where the plan JSON will be saved (default: stdout)",
    )
    parser.add_argument(
        "--config",
        dest="config_file",
        type=Path,
        help="Project config file (YAML or JSON)",
    )
    parser.add_argument(
        "--plan-flags",
        dest="plan_flags",
        metavar="STR",
        help="Raw 'terraform plan' flags to extract -var/-var-file from",
    )
    parser.add_argument(
        "--var",
        dest="vars",
        action="append",
        default=[],
        metavar="K=V",
        help="Input variable (repeatable)",
    )
    parser.add_argument(
        "--var-file",
        dest="var_files",
        action="append",
        default=[],
        metavar="PATH",
        help="Input variable file (repeatable)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging from the translation modules",
    )

    return parser.parse_args(argv)


def run_translation(args: argparse.Namespace) -> NoReturn:
    """Execute the plan synthesis.

    Args:
        args: Parsed command line arguments.

    Raises:
        SystemExit: Always exits with appropriate code (0 for success, >0 for errors).
    """
    configure_logging(args.debug, args.verbose)
    logger = logging.getLogger(__name__)

    if args.verbose or args.debug:
        logger.info(f"Source: {args.source}")
        logger.info(f"Output: {args.output_file or '<stdout>'}")

    try:
        validate_inputs(args.source, args.output_file)

        config = build_project_config(
            args.source,
            config_file=args.config_file,
            plan_flags=args.plan_flags,
            var_args=args.vars,
            var_files=args.var_files,
        )
        provider = HCLPlanProvider(config)
        plan_json = provider.load_plan_json()

        if args.output_file:
            args.output_file.write_text(plan_json + "\n", encoding="utf-8")
            logger.info(f"Plan JSON saved to: {args.output_file}")
        else:
            sys.stdout.write(plan_json + "\n")

        sys.exit(0)

    except ValidationError as e:
        logger.error(f"Input validation failed: {e}")
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        sys.exit(1)
    except ModuleTreeLoadError as e:
        logger.error(f"Module tree load error: {e}")
        sys.exit(2)
    except InputVarsError as e:
        logger.error(f"Input variable error: {e}")
        sys.exit(3)
    except ModuleGraphError as e:
        logger.error(f"Module graph error: {e}")
        sys.exit(4)
    except PlanSerializationError as e:
        logger.error(f"Plan serialization error: {e}")
        sys.exit(5)
    except HCLPlanError as e:
        logger.error(f"hclplan error: {e}")
        sys.exit(6)
    except (PermissionError, FileNotFoundError, OSError) as e:
        logger.error(f"File system error: {e}")
        sys.exit(8)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            logger.exception("Full traceback:")
        sys.exit(9)


def run(argv: list[str] | None = None) -> NoReturn:
    """Console script entry point."""
    run_translation(parse_arguments(argv))


if __name__ == "__main__":
    run()
