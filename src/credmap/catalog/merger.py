"""
Merge detector hosts and regex rules into one service catalog.

The matching strategy:
1. Index detector entities by normalized keyword
2. Group rules by normalized keyword (first-seen display keyword wins)
3. Resolve each group once (exact, alias, prefix)
4. Give each detector entity to one group: the strongest tier wins, then
   the smallest normalized keyword
5. Union the hosts of each group's entities; rules are sorted by ID
6. Detector entities never claimed by a group are kept as host-only

Exclusive claims keep every entity in exactly one place, at the cost of
a group whose matches were all taken by stronger groups reporting "none".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

import structlog

from credmap.catalog.models import (
    AggregateStats,
    CanonicalService,
    CombinedExport,
    HostEntity,
    RulePattern,
)
from credmap.identity.normalizer import normalize_keyword
from credmap.identity.resolver import KeywordMatch, KeywordResolver, MatchType

logger = structlog.get_logger()

# Lower rank claims first when two groups reach the same entity
_TIER_RANK = {MatchType.EXACT: 0, MatchType.ALIAS: 1, MatchType.PREFIX: 2}


@dataclass
class _RuleGroup:
    keyword: str
    rules: list[RulePattern] = field(default_factory=list)


def group_rules(rules: Iterable[RulePattern]) -> dict[str, _RuleGroup]:
    """Group rules by normalized keyword, keeping the first display keyword."""
    groups: dict[str, _RuleGroup] = {}
    for rule in rules:
        norm = normalize_keyword(rule.keyword)
        group = groups.get(norm)
        if group is None:
            group = groups[norm] = _RuleGroup(keyword=rule.keyword)
        group.rules.append(rule)
    return groups


def assign_entities(
    matches: dict[str, KeywordMatch],
    resolver: KeywordResolver,
) -> dict[str, list[HostEntity]]:
    """
    Give every matched entity to exactly one group.

    Args:
        matches: Resolution result per normalized group keyword
        resolver: Resolver that produced the matches

    Returns:
        Entities per normalized group keyword (empty list when a group
        lost all of its entities to stronger claims)
    """
    assigned: dict[str, list[HostEntity]] = {norm: [] for norm in matches}
    claimed: set[int] = set()  # id() of consumed entities

    order = sorted(
        (norm for norm, match in matches.items() if match.found),
        key=lambda norm: (_TIER_RANK[matches[norm].match_type], norm),
    )
    for norm in order:
        for entity in resolver.entities_for(matches[norm]):
            if id(entity) in claimed:
                continue
            claimed.add(id(entity))
            assigned[norm].append(entity)
    return assigned


def combine(
    detectors: Iterable[HostEntity],
    rules: Iterable[RulePattern],
    generated_at: datetime | None = None,
) -> CombinedExport:
    """
    Build the combined catalog from both sources.

    Args:
        detectors: Detector entities with hosts and derived keywords
        rules: Regex rules with derived keywords
        generated_at: Timestamp recorded in the export (defaults to now, UTC)

    Returns:
        CombinedExport with services sorted by normalized keyword
    """
    detectors = list(detectors)
    resolver = KeywordResolver.from_entities(detectors)
    groups = group_rules(rules)

    matches = {norm: resolver.resolve(group.keyword) for norm, group in groups.items()}
    assigned = assign_entities(matches, resolver)

    services: list[CanonicalService] = []
    for norm in sorted(groups):
        group = groups[norm]
        entities = assigned[norm]
        match_type = matches[norm].match_type if entities else MatchType.NONE

        hosts = {host for entity in entities for host in entity.hosts}
        services.append(
            CanonicalService(
                keyword=group.keyword,
                hosts=tuple(sorted(hosts)),
                match_type=match_type,
                matched_source_names=tuple(sorted(e.source_name for e in entities)),
                rules=tuple(sorted(group.rules, key=lambda r: r.id)),
            )
        )
        logger.debug(
            "service_matched",
            keyword=group.keyword,
            match_type=match_type.value,
            matched=len(entities),
            hosts=len(hosts),
        )

    claimed = {id(e) for entities in assigned.values() for e in entities}
    host_only = sorted(
        (d for d in detectors if id(d) not in claimed),
        key=lambda d: (d.keyword, d.source_name),
    )
    rules_without_hosts = sorted(s.keyword for s in services if not s.has_hosts)
    stats = AggregateStats.from_catalog(services, host_only)

    logger.debug(
        "catalog_combined",
        services=len(services),
        host_only=len(host_only),
        rules=stats.total_rules,
    )

    return CombinedExport(
        generated_at=generated_at or datetime.now(timezone.utc),
        stats=stats,
        services=tuple(services),
        host_only=tuple(host_only),
        rules_without_hosts=tuple(rules_without_hosts),
    )
