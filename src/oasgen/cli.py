"""CLI for oasgen.

Turns command-line tokens into one generator run: parse the options, show
the help screen on usage errors, then analyse the given paths and write the
OpenAPI document to stdout or to ``--output``.

oasgen/src/oasgen/cli.py
"""

from __future__ import annotations

import logging
import os
import runpy
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import click

from .analysers import (AttributeAnnotationFactory, DocBlockAnnotationFactory,
                        ReflectionAnalyser, TokenAnalyser)
from .config import Config, load_config
from .diagnostics import ERROR, NOTICE, Logger
from .discovery import SourceFinder
from .errors import ConfigError, ParseError
from .faults import FaultPolicy
from .generator import Generator
from .options import DEFAULT_PATTERN, default_options, parse_options
from .processors import resolve_processor

__all__ = ["cli", "main", "run", "USAGE", "DEFAULT_FILENAME"]

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "openapi.yaml"

USAGE = """
Usage: oasgen [--option value] [/path/to/project ...]

Options:
  --legacy (-l)     Use legacy TokenAnalyser; default is the new ReflectionAnalyser
  --output (-o)     Path to store the generated documentation.
                    ex: --output openapi.yaml
  --exclude (-e)    Exclude path(s).
                    ex: --exclude vendor,library/Zend
  --pattern (-n)    Pattern of files to scan.
                    ex: --pattern "*.py" or --pattern "/\\.(py|pyi)$/"
  --bootstrap (-b)  Bootstrap a python file for defining constants, etc.
                    ex: --bootstrap config/constants.py
  --processor       Register an additional processor.
  --format          Force yaml or json.
  --debug (-d)      Show additional error information.
  --version         The OpenAPI version; defaults to 3.0.0.
  --help (-h)       Display this help message.
"""

FaultPolicyFactory = Callable[[Logger, int], FaultPolicy]


def normalize_exclude(exclude: List[str], diagnostics: Logger) -> List[str]:
    """Flatten a comma-separated first ``--exclude`` value into separate entries."""
    if not exclude or "," not in exclude[0]:
        return list(exclude)
    segments = exclude[0].split(",")
    diagnostics.notice(
        "Comma-separated exclude paths are deprecated, use multiple --exclude statements: "
        + " ".join(f"--exclude {segment}" for segment in segments),
        "Deprecated",
    )
    return [segments[0], *exclude[1:], *segments[1:]]


def _is_readable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


def _generate(options: Dict[str, Any], paths: List[str], diagnostics: Logger) -> None:
    exclude = normalize_exclude(options["exclude"], diagnostics)
    pattern = options["pattern"] or DEFAULT_PATTERN

    generator = Generator(diagnostics)
    for name in options["processor"]:
        generator.add_processor(resolve_processor(name))

    if options["legacy"]:
        analyser = TokenAnalyser()
    else:
        analyser = ReflectionAnalyser([DocBlockAnnotationFactory(), AttributeAnnotationFactory()])

    document = generator.generate(
        SourceFinder(paths, exclude, pattern),
        analyser=analyser,
        version=options["version"],
    )

    if diagnostics.called():
        diagnostics.log(NOTICE, "", "")

    output = options["output"]
    if not output:
        if str(options["format"]).lower() == "json":
            click.echo(document.to_json())
        else:
            click.echo(document.to_yaml())
        return

    if os.path.isdir(output):
        output = os.path.join(output, DEFAULT_FILENAME)
    document.save_as(output, options["format"])


def run(
    argv: Sequence[str],
    config: Optional[Config] = None,
    fault_policy_factory: FaultPolicyFactory = FaultPolicy,
) -> int:
    """Run oasgen for ``argv`` and return the process exit code.

    Fatal runtime errors raise ``SystemExit`` with their own code through the
    fault policy.
    """
    config = config or Config(project_root=None, config_dict={})
    error_reporting = config.error_reporting

    options = default_options()
    paths: List[str] = []
    error = ""
    try:
        parse_options(argv, config.option_defaults(), options, paths)
    except ParseError as e:
        error = str(e)

    diagnostics = Logger(debug=bool(options["debug"]))
    policy = fault_policy_factory(diagnostics, error_reporting)

    bootstrap = options["bootstrap"]
    if bootstrap:
        if _is_readable(bootstrap):
            logger.debug(f"Running bootstrap file {bootstrap}")
            with policy.installed():
                runpy.run_path(bootstrap, run_name="__oasgen_bootstrap__")
        else:
            error = f"Invalid `--bootstrap` value: `{bootstrap}`"

    if not error and not paths:
        error = "Specify at least one path."

    if not options["help"] and error:
        diagnostics.log(ERROR, "", "")
        diagnostics.error(error)
        options["help"] = True

    if options["help"]:
        diagnostics.info(USAGE)
        return 1

    with policy.installed():
        _generate(options, paths, diagnostics)

    return 1 if diagnostics.called() else 0


@click.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_extra_args": True,
        "help_option_names": [],
    }
)
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def cli(ctx: click.Context, argv: tuple[str, ...]) -> None:
    """oasgen: generate OpenAPI documents from annotated Python sources."""
    debug = "--debug" in argv or "-d" in argv
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING)

    try:
        config = load_config(Path.cwd())
        if config.is_present():
            logger.debug(f"Using [tool.oasgen] from {config.project_root / 'pyproject.toml'}")
        code = run(list(argv), config)
    except ConfigError as e:
        Logger(debug=debug).error(str(e))
        code = e.exit_code
    ctx.exit(code)


def main() -> None:
    """Entry point for oasgen CLI."""
    try:
        cli(prog_name="oasgen")
    except SystemExit as e:
        sys.exit(e.code)


if __name__ == "__main__":
    main()
