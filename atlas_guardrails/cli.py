"""
Atlas Guard Rails CLI Entry Point.

Usage:
    atlas-guardrails check --parameters config/atlas-parameters.json
    atlas-guardrails check -p params.json -c guardrails.yaml --mode strict
    atlas-guardrails deploy-args -p params.json -- --profile prod
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from atlas_guardrails import __version__
from atlas_guardrails.constants import DEFAULT_PARAMETERS_FILE, DEFAULT_STAGE_ID
from atlas_guardrails.core.governance.config import (
    GuardRailConfig,
    GuardRailConfigError,
    load_guardrail_config,
)
from atlas_guardrails.core.governance.diagnostics import EnforcementMode, Severity
from atlas_guardrails.core.governance.stage import GuardRailReport, GuardRailStage
from atlas_guardrails.core.stacks.atlas_cluster_stack import (
    ClusterStackParameters,
    build_atlas_cluster_stack,
    build_stage_tree,
)
from atlas_guardrails.core.stacks.parameters import (
    ParameterFileError,
    load_parameter_file,
    to_deploy_arguments,
)

console = Console()

EXIT_OK = 0
EXIT_BLOCKED = 1
EXIT_CONFIG_ERROR = 2


def print_report(report: GuardRailReport) -> None:
    """Print the diagnostics of a guard rail report."""
    if report.diagnostics:
        table = Table(title=f"Guard rail findings for {report.stage_path}")
        table.add_column("Severity")
        table.add_column("Construct")
        table.add_column("Message")
        for diagnostic in report.diagnostics:
            style = "red" if diagnostic.severity is Severity.ERROR else "yellow"
            table.add_row(
                f"[{style}]{diagnostic.severity.value}[/{style}]",
                escape(diagnostic.node_path),
                escape(diagnostic.message),
            )
        console.print(table)

    border = "red" if report.blocked else "green"
    console.print(Panel.fit(escape(report.summary()), title="Guard rails", border_style=border))


def run_check(args: argparse.Namespace) -> int:
    try:
        config = load_guardrail_config(args.config) if args.config else GuardRailConfig()
        raw_parameters = load_parameter_file(args.parameters)
        parameters = ClusterStackParameters(**raw_parameters)
    except (GuardRailConfigError, ParameterFileError, ValidationError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_CONFIG_ERROR

    try:
        tree = build_stage_tree(
            [build_atlas_cluster_stack(parameters, stage_path=args.stage)],
            stage_id=args.stage,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] invalid stage {args.stage!r}: {escape(str(e))}")
        return EXIT_CONFIG_ERROR

    stage = GuardRailStage(config, enforcement=EnforcementMode(args.mode))
    report = stage.synth(tree, raise_on_block=False)

    print_report(report)
    return EXIT_BLOCKED if report.blocked else EXIT_OK


def run_deploy_args(args: argparse.Namespace) -> int:
    try:
        parameters = load_parameter_file(args.parameters)
    except ParameterFileError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_CONFIG_ERROR

    # Everything after "--" is passed through to cdk deploy
    passthrough = list(args.cdk_args)
    if passthrough and passthrough[0] == "--":
        passthrough = passthrough[1:]

    command = ["cdk", "deploy"] + to_deploy_arguments(parameters) + passthrough
    console.print(" ".join(command), markup=False, soft_wrap=True)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atlas-guardrails",
        description="Atlas Guard Rails - governance checks for MongoDB Atlas cluster stages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  atlas-guardrails check
  atlas-guardrails check -p config/atlas-parameters.json -c guardrails.yaml
  atlas-guardrails check --mode advisory
  atlas-guardrails deploy-args -p config/atlas-parameters.json
  atlas-guardrails deploy-args -- --profile prod --require-approval never
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"atlas-guardrails {__version__}",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate the cluster stack against the guard rails")
    check.add_argument(
        "--parameters", "-p",
        default=DEFAULT_PARAMETERS_FILE,
        help=f"Stack parameter file (default: {DEFAULT_PARAMETERS_FILE})",
    )
    check.add_argument(
        "--config", "-c",
        default=None,
        help="Guard rail configuration YAML (default: built-in limits)",
    )
    check.add_argument(
        "--mode",
        choices=[mode.value for mode in EnforcementMode],
        default=EnforcementMode.BLOCK_ON_ERROR.value,
        help="How findings affect the exit code (default: block_on_error)",
    )
    check.add_argument(
        "--stage",
        default=DEFAULT_STAGE_ID,
        help=f"Stage identifier (default: {DEFAULT_STAGE_ID})",
    )
    check.set_defaults(handler=run_check)

    deploy_args = subparsers.add_parser("deploy-args", help="Print the deploy command for a parameter file")
    deploy_args.add_argument(
        "--parameters", "-p",
        default=DEFAULT_PARAMETERS_FILE,
        help=f"Stack parameter file (default: {DEFAULT_PARAMETERS_FILE})",
    )
    deploy_args.add_argument(
        "cdk_args",
        nargs=argparse.REMAINDER,
        help="Extra cdk deploy arguments, given after --",
    )
    deploy_args.set_defaults(handler=run_deploy_args)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
