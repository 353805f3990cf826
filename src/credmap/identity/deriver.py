"""
Keyword derivation for the two source naming conventions.

Rule IDs are hyphenated ("cloudflare-global-api-key"); detector directory
names are concatenated ("cloudflareglobalapikey"). Both derive to the same
service keyword ("cloudflare") so the sources can be joined.
"""

from __future__ import annotations

from dataclasses import dataclass

from credmap.identity.tables import (
    CREDENTIAL_SUFFIXES,
    CREDENTIAL_WORDS,
    DETECTOR_KEYWORD_OVERRIDES,
    MIN_SUFFIX_RESIDUE,
    RULE_KEYWORD_OVERRIDES,
)

RULE_SOURCE = "rule"
DETECTOR_SOURCE = "detector"


@dataclass(frozen=True)
class DerivationStep:
    """A single step in a keyword derivation."""

    rule_name: str
    input_value: str
    output_value: str

    @property
    def changed(self) -> bool:
        return self.input_value != self.output_value


def keyword_from_rule_id(rule_id: str) -> str:
    """
    Derive a service keyword from a hyphenated rule ID.

    Examples:
        openai-api-key → openai
        github-fine-grained-pat → github
        cisco-meraki-api-key → cisco-meraki
        new-relic-user-api-key → newrelic
        private-key → private-key (nothing left to keep, so keep it whole)
    """
    keyword, _ = _derive_from_rule_id(rule_id)
    return keyword


def keyword_from_detector_name(name: str) -> str:
    """
    Derive a service keyword from a concatenated detector directory name.

    Examples:
        cloudflareapitoken → cloudflare
        airtablepersonalaccesstoken → airtable
        customerio → customerio
        npm → npm
    """
    keyword, _ = _derive_from_detector_name(name)
    return keyword


def derive_with_steps(name: str, source: str) -> tuple[str, list[DerivationStep]]:
    """Derive a keyword and return every step that was applied."""
    if source == RULE_SOURCE:
        return _derive_from_rule_id(name)
    if source == DETECTOR_SOURCE:
        return _derive_from_detector_name(name)
    raise ValueError(f"unknown source {source!r}")


def longest_credential_suffix(name: str) -> str | None:
    """
    Return the longest credential suffix that can be stripped from name.

    A suffix only qualifies when at least MIN_SUFFIX_RESIDUE characters
    remain; otherwise a shorter suffix may still apply.
    """
    best: str | None = None
    for suffix in CREDENTIAL_SUFFIXES:
        if not name.endswith(suffix) or len(name) - len(suffix) < MIN_SUFFIX_RESIDUE:
            continue
        if best is None or len(suffix) > len(best):
            best = suffix
    return best


def _derive_from_rule_id(rule_id: str) -> tuple[str, list[DerivationStep]]:
    steps: list[DerivationStep] = []
    current = rule_id.strip().lower()
    steps.append(DerivationStep("Trim and lowercase", rule_id, current))
    if not current:
        return "", steps

    service_parts: list[str] = []
    for part in current.split("-"):
        if part in CREDENTIAL_WORDS:
            break
        service_parts.append(part)

    if not service_parts:
        steps.append(DerivationStep("Keep whole (no service words)", current, current))
        return current, steps

    candidate = "-".join(service_parts)
    steps.append(DerivationStep("Cut at first credential word", current, candidate))

    override = RULE_KEYWORD_OVERRIDES.get(candidate)
    if override is not None:
        steps.append(DerivationStep("Override", candidate, override))
        return override, steps
    return candidate, steps


def _derive_from_detector_name(name: str) -> tuple[str, list[DerivationStep]]:
    steps: list[DerivationStep] = []
    current = name.strip().lower()
    steps.append(DerivationStep("Trim and lowercase", name, current))
    if not current:
        return "", steps

    override = DETECTOR_KEYWORD_OVERRIDES.get(current)
    if override is not None:
        steps.append(DerivationStep("Override", current, override))
        return override, steps

    suffix = longest_credential_suffix(current)
    if suffix is None:
        return current, steps

    base = current[: -len(suffix)]
    steps.append(DerivationStep(f"Strip suffix '{suffix}'", current, base))
    return base, steps
