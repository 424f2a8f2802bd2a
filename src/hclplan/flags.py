"""Extraction of ``-var`` / ``-var-file`` flags from a raw plan flags string."""

import argparse
import logging
import shlex

from .config import InputVars
from .exceptions import VarFlagSyntaxError

logger = logging.getLogger(__name__)


def _build_flag_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="terraform plan",
        add_help=False,
        allow_abbrev=False,
        exit_on_error=False,
    )
    parser.add_argument(
        "-var", "--var", dest="vars", action="append", default=[], metavar="K=V"
    )
    parser.add_argument(
        "-var-file",
        "--var-file",
        dest="files",
        action="append",
        default=[],
        metavar="PATH",
    )
    return parser


def parse_var_flags(plan_flags: str) -> InputVars:
    """
    Extract input variables from a string of Terraform plan flags.

    Both ``-var=k=v`` and ``-var k=v`` spellings are accepted, as are their
    double-dash forms. Tokens that are not ``-var``/``-var-file`` flags are
    ignored.

    Args:
        plan_flags: Raw flags as they would appear on a command line

    Returns:
        InputVars with vars and files in encounter order

    Raises:
        VarFlagSyntaxError: If quoting is unterminated or a flag lacks its value
    """
    try:
        tokens = shlex.split(plan_flags or "")
    except ValueError as e:
        raise VarFlagSyntaxError(f"Malformed plan flags: {e}", plan_flags) from e

    try:
        namespace, ignored = _build_flag_parser().parse_known_args(tokens)
    except argparse.ArgumentError as e:
        raise VarFlagSyntaxError(f"Malformed plan flags: {e}", plan_flags) from e

    if ignored:
        logger.debug(f"Ignoring unrelated plan flags: {ignored}")

    return InputVars(vars=list(namespace.vars), files=list(namespace.files))
