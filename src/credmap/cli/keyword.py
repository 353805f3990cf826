"""
CLI commands for keyword derivation and resolution.

Shows how source names turn into keywords and how a keyword links to
detectors.

Commands:
    credmap keyword derive <name> --source rule|detector
    credmap keyword resolve <keyword> --trufflehog DIR
"""

from __future__ import annotations

import argparse

from rich.markup import escape
from rich.table import Table

from credmap.cli.ux import console, header
from credmap.core.errors import ConfigurationError, ExitCode, main_with_error_handling
from credmap.identity.deriver import (
    DETECTOR_SOURCE,
    RULE_SOURCE,
    DerivationStep,
    derive_with_steps,
)
from credmap.identity.normalizer import normalize_keyword
from credmap.identity.resolver import KeywordMatch, KeywordResolver
from credmap.sources.detectors import extract_detectors

# --- Derive subcommand ---


@main_with_error_handling()
def keyword_derive_command(
    name: str,
    source: str = RULE_SOURCE,
    verbose: bool = False,
    output_format: str = "table",
) -> int:
    """
    Show the keyword a source name derives to.

    Exit codes:
        0 - Success
        10 - Unknown source

    Args:
        name: Rule ID or detector directory name
        source: "rule" or "detector"
        verbose: If True, show each step
        output_format: Output format ("table" or "json")

    Returns:
        Exit code
    """
    if source not in (RULE_SOURCE, DETECTOR_SOURCE):
        raise ConfigurationError(
            f"unknown source {source!r}",
            details={"sources": f"{RULE_SOURCE}, {DETECTOR_SOURCE}"},
        )
    keyword, steps = derive_with_steps(name, source)

    if output_format == "json":
        console.print_json(
            data={
                "input": name,
                "source": source,
                "keyword": keyword,
                "normalized": normalize_keyword(keyword),
                "steps": [
                    {
                        "rule": s.rule_name,
                        "input": s.input_value,
                        "output": s.output_value,
                        "changed": s.changed,
                    }
                    for s in steps
                ],
            }
        )
    else:
        _print_derive_output(name, keyword, steps, verbose)

    return 0


def _print_derive_output(
    name: str, keyword: str, steps: list[DerivationStep], verbose: bool
) -> None:
    console.print()
    header(f"Keyword: {escape(name)}")
    console.print()

    if verbose:
        step_num = 0
        for step in steps:
            if step.changed:
                step_num += 1
                console.print(f"[bold]Step {step_num}:[/bold] {escape(step.rule_name)}")
                console.print(f"  {escape(step.input_value)} [dim]->[/dim] {escape(step.output_value)}")
                console.print()

        if step_num == 0:
            console.print("[muted]No transformations applied[/muted]")
            console.print()

    console.print(f"[bold]Keyword:[/bold] [cyan]{escape(keyword)}[/cyan]")
    console.print(f"[bold]Normalized:[/bold] {escape(normalize_keyword(keyword))}")
    console.print()


# --- Resolve subcommand ---


@main_with_error_handling()
def keyword_resolve_command(
    keyword: str,
    trufflehog: str,
    output_format: str = "table",
) -> int:
    """
    Resolve a rule-side keyword against a detector tree.

    Exit codes:
        0 - Match found
        1 - No match found
        11 - Detector tree could not be read

    Args:
        keyword: Rule-side display keyword
        trufflehog: Detector tree root
        output_format: Output format ("table" or "json")

    Returns:
        Exit code
    """
    result = extract_detectors(trufflehog)
    resolver = KeywordResolver.from_entities(result.detectors)
    match = resolver.resolve(keyword)

    if output_format == "json":
        data = match.to_dict()
        data["detectors"] = [e.to_dict() for e in resolver.entities_for(match)]
        console.print_json(data=data)
    else:
        _print_resolve_output(match, resolver)

    return ExitCode.SUCCESS if match.found else ExitCode.NO_MATCH


def _print_resolve_output(match: KeywordMatch, resolver: KeywordResolver) -> None:
    console.print()
    header(f"Keyword Resolution: {escape(match.query)}")
    console.print()

    if not match.found:
        console.print("[yellow]No detector match found[/yellow]")
        console.print(f"[muted]Normalized form: {escape(normalize_keyword(match.query))}[/muted]")
        console.print()
        return

    console.print(f"[bold]Match Type:[/bold] {match.match_type.value}")
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Detector")
    table.add_column("Keyword")
    table.add_column("Hosts", style="muted")
    for entity in resolver.entities_for(match):
        table.add_row(
            f"[cyan]{escape(entity.source_name)}[/cyan]",
            escape(entity.keyword),
            escape(", ".join(entity.hosts)),
        )

    console.print(table)
    console.print()


# --- Parser registration ---


def register_keyword_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register keyword subcommand parser with nested subcommands."""
    keyword_parser = subparsers.add_parser(
        "keyword",
        help="Keyword derivation and resolution",
    )
    keyword_subparsers = keyword_parser.add_subparsers(
        dest="keyword_command",
        help="Keyword subcommand",
    )

    derive_parser = keyword_subparsers.add_parser(
        "derive",
        help="Show the keyword a rule ID or detector name derives to",
    )
    derive_parser.add_argument("name", help="Rule ID or detector directory name")
    derive_parser.add_argument(
        "--source",
        choices=[RULE_SOURCE, DETECTOR_SOURCE],
        default=RULE_SOURCE,
        help="Naming convention of NAME (default: rule)",
    )
    derive_parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show each derivation step",
    )
    derive_parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    resolve_parser = keyword_subparsers.add_parser(
        "resolve",
        help="Resolve a rule-side keyword against a detector tree",
    )
    resolve_parser.add_argument("keyword", help="Rule-side keyword")
    resolve_parser.add_argument(
        "--trufflehog",
        required=True,
        help="Path to the detector tree",
    )
    resolve_parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )


def handle_keyword_command(args: argparse.Namespace) -> int:
    """Dispatch parsed keyword arguments."""
    if args.keyword_command == "derive":
        return keyword_derive_command(
            args.name,
            source=args.source,
            verbose=args.verbose,
            output_format=args.output_format,
        )
    if args.keyword_command == "resolve":
        return keyword_resolve_command(
            args.keyword,
            trufflehog=args.trufflehog,
            output_format=args.output_format,
        )
    console.print("Usage: credmap keyword {derive,resolve} ...")
    return 1
