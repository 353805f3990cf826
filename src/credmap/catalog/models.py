"""
Catalog models.

Every record is a frozen value object: built once from the extracted
sources, then serialized or projected. Collections are tuples so that
equality and ordering are explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

from credmap.identity.deriver import keyword_from_detector_name, keyword_from_rule_id
from credmap.identity.resolver import MatchType


@dataclass(frozen=True)
class HostEntity:
    """A detector with the verification hosts found in its source."""

    source_name: str  # Raw detector directory name
    keyword: str
    hosts: tuple[str, ...] = ()

    @classmethod
    def create(cls, source_name: str, hosts: Iterable[str]) -> HostEntity:
        """Build an entity, deriving its keyword and deduping its hosts."""
        return cls(
            source_name=source_name,
            keyword=keyword_from_detector_name(source_name),
            hosts=tuple(sorted(set(hosts))),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "keyword": self.keyword,
            "dir_name": self.source_name,
            "hosts": list(self.hosts),
        }


@dataclass(frozen=True)
class RulePattern:
    """A value-matching regex rule."""

    id: str
    keyword: str
    regex: str
    description: str = ""
    entropy: float = 0.0
    secret_group: int = 0
    keywords: tuple[str, ...] = ()  # Prefilter hints

    @classmethod
    def create(
        cls,
        rule_id: str,
        regex: str,
        description: str = "",
        entropy: float = 0.0,
        secret_group: int = 0,
        keywords: Iterable[str] = (),
    ) -> RulePattern:
        """Build a rule, deriving its keyword from the rule ID."""
        return cls(
            id=rule_id,
            keyword=keyword_from_rule_id(rule_id),
            regex=regex,
            description=description,
            entropy=entropy,
            secret_group=secret_group,
            keywords=tuple(keywords),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, omitting unset metadata."""
        data: dict[str, Any] = {"id": self.id}
        if self.description:
            data["description"] = self.description
        data["regex"] = self.regex
        if self.entropy:
            data["entropy"] = self.entropy
        if self.secret_group:
            data["secret_group"] = self.secret_group
        if self.keywords:
            data["keywords"] = list(self.keywords)
        return data


@dataclass(frozen=True)
class CanonicalService:
    """One logical service: its hosts plus its value-matching rules."""

    keyword: str  # Display form, first seen on the rule side
    hosts: tuple[str, ...]
    match_type: MatchType
    matched_source_names: tuple[str, ...]
    rules: tuple[RulePattern, ...]

    @property
    def has_hosts(self) -> bool:
        return bool(self.hosts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "keyword": self.keyword,
            "hosts": list(self.hosts),
            "match_type": self.match_type.value,
            "matched_sources": list(self.matched_source_names),
            "rules": [r.to_dict() for r in self.rules],
        }


@dataclass(frozen=True)
class AggregateStats:
    """Counts derived from a finished catalog."""

    total_services: int = 0  # Rule-side services plus host-only entities
    services_with_hosts: int = 0
    services_no_hosts: int = 0
    host_only_services: int = 0
    total_rules: int = 0
    rules_with_hosts: int = 0
    match_exact: int = 0
    match_prefix: int = 0
    match_alias: int = 0

    @classmethod
    def from_catalog(
        cls,
        services: Iterable[CanonicalService],
        host_only: Iterable[HostEntity],
    ) -> AggregateStats:
        """Compute stats from the final service and host-only collections."""
        services = list(services)
        host_only = list(host_only)
        with_hosts = [s for s in services if s.has_hosts]

        def count(match_type: MatchType) -> int:
            return sum(1 for s in with_hosts if s.match_type is match_type)

        return cls(
            total_services=len(services) + len(host_only),
            services_with_hosts=len(with_hosts),
            services_no_hosts=len(services) - len(with_hosts),
            host_only_services=len(host_only),
            total_rules=sum(len(s.rules) for s in services),
            rules_with_hosts=sum(len(s.rules) for s in with_hosts),
            match_exact=count(MatchType.EXACT),
            match_prefix=count(MatchType.PREFIX),
            match_alias=count(MatchType.ALIAS),
        )

    def to_dict(self) -> dict[str, int]:
        """Serialize to dictionary."""
        return {
            "total_services": self.total_services,
            "services_with_hosts": self.services_with_hosts,
            "services_no_hosts": self.services_no_hosts,
            "host_only_services": self.host_only_services,
            "total_rules": self.total_rules,
            "rules_with_hosts": self.rules_with_hosts,
            "match_exact": self.match_exact,
            "match_prefix": self.match_prefix,
            "match_alias": self.match_alias,
        }


@dataclass(frozen=True)
class CombinedExport:
    """The full merged dataset."""

    generated_at: datetime
    stats: AggregateStats
    services: tuple[CanonicalService, ...] = ()
    host_only: tuple[HostEntity, ...] = ()
    rules_without_hosts: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "generated_at": self.generated_at.isoformat(),
            "stats": self.stats.to_dict(),
            "services": [s.to_dict() for s in self.services],
            "host_only": [h.to_dict() for h in self.host_only],
            "rules_without_hosts": list(self.rules_without_hosts),
        }


@dataclass(frozen=True)
class ValuePattern:
    """A rule stripped to what a value-scanning consumer needs."""

    id: str
    regex: str
    keyword: str | None = None  # Set only when the service has hosts
    keywords: tuple[str, ...] = ()
    secret_group: int = 0

    @property
    def linked(self) -> bool:
        return bool(self.keyword)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, omitting the keyword when unlinked."""
        data: dict[str, Any] = {"id": self.id}
        if self.keyword:
            data["keyword"] = self.keyword
        data["regex"] = self.regex
        if self.keywords:
            data["keywords"] = list(self.keywords)
        if self.secret_group:
            data["secret_group"] = self.secret_group
        return data


@dataclass(frozen=True)
class SlimExport:
    """Consumer-oriented projection of a CombinedExport."""

    generated_at: datetime
    keyword_host_map: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    exact_name_host_map: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    value_patterns: tuple[ValuePattern, ...] = ()
    schema_version: int = 1

    @property
    def linked_pattern_count(self) -> int:
        return sum(1 for p in self.value_patterns if p.linked)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "schema_version": self.schema_version,
            "generated_at": self.generated_at.isoformat(),
            "keyword_host_map": {k: list(v) for k, v in self.keyword_host_map.items()},
            "exact_name_host_map": {k: list(v) for k, v in self.exact_name_host_map.items()},
            "value_patterns": [p.to_dict() for p in self.value_patterns],
        }
