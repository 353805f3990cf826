"""
Slim projection of the combined catalog for secret-aware env forwarding.

Contains only what the consumer needs:
  - keyword_host_map: keyword substring → API hosts (env var name matching)
  - exact_name_host_map: full env var name → API hosts (oddballs like DD_API_KEY)
  - value_patterns: regexes for value-based secret detection
"""

from __future__ import annotations

from credmap.catalog.models import CombinedExport, SlimExport, ValuePattern
from credmap.identity.tables import EXACT_NAME_HOSTS

SCHEMA_VERSION = 1


def _pattern_sort_key(pattern: ValuePattern) -> tuple[bool, str, str]:
    # Linked patterns first, then by keyword, then by id
    return (not pattern.keyword, pattern.keyword or "", pattern.id)


def to_slim_export(full: CombinedExport) -> SlimExport:
    """
    Project a CombinedExport onto the slim consumer format.

    A pattern carries its service keyword only when that service has hosts;
    an absent keyword means there is no host to corroborate the value.
    """
    keyword_hosts = {svc.keyword: svc.hosts for svc in full.services if svc.hosts}

    patterns = [
        ValuePattern(
            id=rule.id,
            regex=rule.regex,
            keyword=svc.keyword if svc.keyword in keyword_hosts else None,
            keywords=rule.keywords,
            secret_group=rule.secret_group,
        )
        for svc in full.services
        for rule in svc.rules
    ]
    patterns.sort(key=_pattern_sort_key)

    # Fresh copy so the module-level table is never handed out
    exact_names = {name: tuple(hosts) for name, hosts in sorted(EXACT_NAME_HOSTS.items())}

    return SlimExport(
        schema_version=SCHEMA_VERSION,
        generated_at=full.generated_at,
        keyword_host_map=keyword_hosts,
        exact_name_host_map=exact_names,
        value_patterns=tuple(patterns),
    )
