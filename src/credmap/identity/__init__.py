"""
Keyword identity for services named differently by each source.

Derives canonical keywords from rule IDs and detector directory names,
normalizes them for comparison, and links the two sides.
"""

from credmap.identity.deriver import (
    DerivationStep,
    derive_with_steps,
    keyword_from_detector_name,
    keyword_from_rule_id,
)
from credmap.identity.normalizer import normalize_keyword
from credmap.identity.resolver import (
    KeywordMatch,
    KeywordResolver,
    MatchType,
    build_host_index,
    resolve_match,
)

__all__ = [
    # Deriver
    "keyword_from_rule_id",
    "keyword_from_detector_name",
    "derive_with_steps",
    "DerivationStep",
    # Normalizer
    "normalize_keyword",
    # Resolver
    "KeywordMatch",
    "KeywordResolver",
    "MatchType",
    "build_host_index",
    "resolve_match",
]
