"""
CLI command that builds the combined catalog and writes it out.

Commands:
    credmap export --trufflehog DIR --gitleaks FILE [--mode full|slim]
"""

from __future__ import annotations

import argparse
from typing import Optional

from rich.markup import escape

from credmap.catalog.merger import combine
from credmap.catalog.models import AggregateStats, HostEntity, RulePattern, SlimExport
from credmap.catalog.projection import to_slim_export
from credmap.cli.ux import err_console, header, print_table, success, warning
from credmap.config.settings import get_settings
from credmap.core.errors import ConfigurationError, ValidationError, main_with_error_handling
from credmap.export.writer import FORMATS, STDOUT, write_output
from credmap.logging import bind_context
from credmap.sources.detectors import ExtractOptions, extract_detectors
from credmap.sources.rules import extract_rules

MODES = ("full", "slim")


@main_with_error_handling()
def export_command(
    trufflehog: Optional[str] = None,
    gitleaks: Optional[str] = None,
    out: str = STDOUT,
    mode: str = "full",
    output_format: str = "json",
    force: bool = False,
    strict: bool = False,
    allow_ip_hosts: bool = False,
    max_warnings: int = 5,
) -> int:
    """
    Extract both sources, combine them and write the export.

    Exit codes:
        0 - Export written
        10 - Bad usage (no source, unknown mode)
        11 - A source could not be read
        12 - Extraction warnings under --strict
        13 - Output could not be written

    Args:
        trufflehog: Detector tree root
        gitleaks: Rules TOML file
        out: Output path, or '-' for stdout
        mode: 'full' (all data) or 'slim' (consumer projection)
        output_format: 'json' or 'yaml'
        force: Overwrite an existing output file
        strict: Treat extraction warnings as errors
        allow_ip_hosts: Keep routable IP-literal hosts
        max_warnings: How many warnings to show

    Returns:
        Exit code
    """
    if mode not in MODES:
        raise ConfigurationError(f"invalid mode {mode!r}: must be 'full' or 'slim'")
    if not trufflehog and not gitleaks:
        raise ConfigurationError("at least one of --trufflehog or --gitleaks is required")

    log = bind_context(command="export", mode=mode, out=out)
    detectors: list[HostEntity] = []
    rules: list[RulePattern] = []

    if trufflehog:
        result = extract_detectors(trufflehog, ExtractOptions(allow_ip_hosts=allow_ip_hosts))
        if result.skipped:
            warning(f"Detectors: skipped {len(result.skipped)}")
        if result.warnings:
            shown = min(len(result.warnings), max_warnings)
            warning(f"Detectors: {len(result.warnings)} warnings (showing up to {shown})")
            for message in result.warnings[:shown]:
                err_console.print(f"  - {message}", markup=False, highlight=False)
            if strict:
                raise ValidationError(
                    f"detector extraction produced {len(result.warnings)} warnings",
                    details={"first": result.warnings[0]},
                )
        detectors = result.detectors
        err_console.print(f"Detectors: extracted {len(detectors)} with hosts")

    if gitleaks:
        rules = extract_rules(gitleaks)
        err_console.print(f"Rules: extracted {len(rules)}")

    full = combine(detectors, rules)

    if mode == "slim":
        slim = to_slim_export(full)
        write_output(slim.to_dict(), out, output_format, force=force)
        _print_slim_summary(slim)
    else:
        write_output(full.to_dict(), out, output_format, force=force)

    _print_summary(full.stats)
    log.info("export_complete", services=full.stats.total_services)
    if out != STDOUT:
        success(f"Wrote {mode} export to {escape(out)}")
    return 0


def _print_slim_summary(slim: SlimExport) -> None:
    header("Slim Export", target=err_console)
    print_table(
        "",
        ["Item", "Count"],
        [
            ["Keyword→host mappings", str(len(slim.keyword_host_map))],
            ["Exact-name mappings", str(len(slim.exact_name_host_map))],
            [
                "Value patterns",
                f"{len(slim.value_patterns)} (with host linkage: {slim.linked_pattern_count})",
            ],
        ],
        target=err_console,
    )


def _print_summary(stats: AggregateStats) -> None:
    header("Summary", target=err_console)
    print_table(
        "",
        ["Item", "Count"],
        [
            ["Total services", str(stats.total_services)],
            [
                "  With hosts+rules",
                f"{stats.services_with_hosts} (exact:{stats.match_exact} "
                f"prefix:{stats.match_prefix} alias:{stats.match_alias})",
            ],
            ["  Rules only (no host)", str(stats.services_no_hosts)],
            ["  Hosts only (no rule)", str(stats.host_only_services)],
            ["Total rules", f"{stats.total_rules} ({stats.rules_with_hosts} with hosts)"],
        ],
        target=err_console,
    )


def register_export_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the export subcommand."""
    settings = get_settings()

    parser = subparsers.add_parser(
        "export",
        help="Combine detector hosts and regex rules into one dataset",
    )
    parser.add_argument("--trufflehog", help="Path to the detector tree (one dir per detector)")
    parser.add_argument("--gitleaks", help="Path to the rules TOML file")
    parser.add_argument(
        "--out",
        "-o",
        default=STDOUT,
        help="Output file path (or - for stdout)",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        default=settings.default_mode,
        help="Output mode: full (all data) or slim (consumer projection)",
    )
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=FORMATS,
        default=settings.default_format,
        help="Output format (default: json)",
    )
    parser.add_argument("--force", action="store_true", help="Overwrite --out if it exists")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=settings.strict,
        help="Treat detector extraction warnings as errors",
    )
    parser.add_argument(
        "--allow-ip-hosts",
        action="store_true",
        default=settings.allow_ip_hosts,
        help="Keep routable IP-literal hosts (unsafe)",
    )


def handle_export_command(args: argparse.Namespace) -> int:
    """Dispatch parsed export arguments."""
    return export_command(
        trufflehog=args.trufflehog,
        gitleaks=args.gitleaks,
        out=args.out,
        mode=args.mode,
        output_format=args.output_format,
        force=args.force,
        strict=args.strict,
        allow_ip_hosts=args.allow_ip_hosts,
        max_warnings=get_settings().max_reported_warnings,
    )
