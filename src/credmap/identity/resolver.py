"""
Keyword resolver linking rule-side keywords to detector-side entities.

Resolution strategies (first success wins, tiers are never combined):
1. Exact normalized keyword match
2. Alias table lookup
3. Prefix match (every detector keyword extending the query)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from credmap.identity.normalizer import normalize_keyword
from credmap.identity.tables import MIN_PREFIX_QUERY, SERVICE_ALIASES

if TYPE_CHECKING:
    from credmap.catalog.models import HostEntity


class MatchType(str, Enum):
    """How a rule-side keyword was linked to detector-side entities."""

    EXACT = "exact"
    ALIAS = "alias"
    PREFIX = "prefix"
    NONE = "none"


def build_host_index(entities: Iterable[HostEntity]) -> Mapping[str, tuple[HostEntity, ...]]:
    """Index entities by normalized keyword, preserving input order per key."""
    grouped: dict[str, list[HostEntity]] = {}
    for entity in entities:
        grouped.setdefault(normalize_keyword(entity.keyword), []).append(entity)
    return MappingProxyType({k: tuple(v) for k, v in grouped.items()})


@dataclass(frozen=True)
class KeywordMatch:
    """Result of resolving one rule-side keyword."""

    query: str
    match_type: MatchType
    matched_keywords: tuple[str, ...] = ()  # Normalized detector keywords

    @property
    def found(self) -> bool:
        return self.match_type is not MatchType.NONE

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "query": self.query,
            "match_type": self.match_type.value,
            "matched_keywords": list(self.matched_keywords),
            "found": self.found,
        }


@dataclass
class KeywordResolver:
    """Resolves rule-side keywords against a detector host index."""

    index: Mapping[str, tuple[HostEntity, ...]]
    aliases: Mapping[str, str] = field(default_factory=lambda: SERVICE_ALIASES)
    min_prefix_length: int = MIN_PREFIX_QUERY

    @classmethod
    def from_entities(cls, entities: Iterable[HostEntity]) -> KeywordResolver:
        return cls(index=build_host_index(entities))

    def resolve(self, keyword: str) -> KeywordMatch:
        """
        Resolve a rule-side display keyword.

        Args:
            keyword: Keyword as derived from a rule ID (display form)

        Returns:
            KeywordMatch with the tier that succeeded and the normalized
            detector keywords it matched, or MatchType.NONE
        """
        norm = normalize_keyword(keyword)

        # Strategy 1: Exact
        if norm in self.index:
            return KeywordMatch(keyword, MatchType.EXACT, (norm,))

        # Strategy 2: Alias (keyed by display form)
        alias = self.aliases.get(keyword)
        if alias is not None:
            alias_norm = normalize_keyword(alias)
            if alias_norm in self.index:
                return KeywordMatch(keyword, MatchType.ALIAS, (alias_norm,))

        # Strategy 3: Prefix, for long enough queries only
        if len(norm) >= self.min_prefix_length:
            matches = sorted(k for k in self.index if k != norm and k.startswith(norm))
            if matches:
                return KeywordMatch(keyword, MatchType.PREFIX, tuple(matches))

        return KeywordMatch(keyword, MatchType.NONE)

    def entities_for(self, match: KeywordMatch) -> list[HostEntity]:
        """Entities behind a match, in matched-keyword order."""
        entities: list[HostEntity] = []
        for norm in match.matched_keywords:
            entities.extend(self.index.get(norm, ()))
        return entities


def resolve_match(keyword: str, index: Mapping[str, tuple[HostEntity, ...]]) -> KeywordMatch:
    """Resolve one keyword against an index with the default tables."""
    return KeywordResolver(index=index).resolve(keyword)
