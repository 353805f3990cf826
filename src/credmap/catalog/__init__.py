"""Merged service catalog: models, merger and slim projection."""

from credmap.catalog.merger import assign_entities, combine, group_rules
from credmap.catalog.models import (
    AggregateStats,
    CanonicalService,
    CombinedExport,
    HostEntity,
    RulePattern,
    SlimExport,
    ValuePattern,
)
from credmap.catalog.projection import SCHEMA_VERSION, to_slim_export

__all__ = [
    # Models
    "HostEntity",
    "RulePattern",
    "CanonicalService",
    "AggregateStats",
    "CombinedExport",
    "ValuePattern",
    "SlimExport",
    # Merger
    "combine",
    "group_rules",
    "assign_entities",
    # Projection
    "to_slim_export",
    "SCHEMA_VERSION",
]
