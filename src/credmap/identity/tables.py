"""
Fixed heuristic data used for keyword derivation and matching.

All tables are read-only for the lifetime of the process. Mappings are
wrapped in MappingProxyType so no caller can mutate them by accident.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Shortest residue accepted after stripping a credential suffix.
MIN_SUFFIX_RESIDUE = 3

# Shortest normalized keyword allowed to take part in prefix matching.
MIN_PREFIX_QUERY = 4

# Concatenated credential-type words appended to detector directory names.
# Stored longest-first; the deriver picks the longest match regardless.
#   cloudflareapitoken -> strip "apitoken" -> cloudflare
#   airtablepersonalaccesstoken -> strip "personalaccesstoken" -> airtable
CREDENTIAL_SUFFIXES: tuple[str, ...] = (
    "personalaccesstoken",
    "personaltoken",
    "personalapikey",
    "organizationapi",
    "globalapikey",
    "apppassword",
    "consumerkey",
    "orgtoken",
    "bottoken",
    "accesstoken",
    "apitokenv2",
    "apitoken",
    "apikey",
    "api",
    "oauth2",
    "oauth",
    "webhook",
    "tokenv2",
    "tokenv3",
    "token",
    "cakey",
    "key",
    # Versions
    "v2",
    "v3",
    # Platform suffixes. "io" is deliberately absent: frame.io, fly.io,
    # keen.io and friends carry it as part of the brand.
    "cloud",
    "license",
)

# Words in hyphenated rule IDs that describe the credential, not the service.
CREDENTIAL_WORDS: frozenset[str] = frozenset(
    {
        # Core nouns
        "api", "key", "token", "secret", "password", "credential", "credentials",
        # Auth
        "access", "auth", "authentication", "oauth", "pat", "sso", "scim",
        # Roles / scopes
        "admin", "user", "client", "service", "bot", "app", "org", "organization",
        "account", "personal", "personnal",
        # Modifiers
        "public", "pub", "private", "global", "shared", "custom", "sensitive",
        "long", "short", "lived", "fine", "grained", "legacy", "workspace",
        "routable", "test", "batch", "bearer",
        # Infra / CI
        "deploy", "runner", "cicd", "job", "trigger", "registration", "pipeline",
        "feed", "incoming", "session", "cookie", "kubernetes", "agent", "feature",
        "flag", "cloud", "upload", "reference", "identity",
        # Crypto / format
        "signing", "encryption", "ca", "origin", "insert", "browser", "base64",
        "config", "refresh",
        # Web
        "webhook", "url", "header", "page",
        # GitLab abbreviations
        "ptt", "rrt",
    }
)  # fmt: skip

# Rule-side candidate keyword -> canonical keyword, for known-wrong splits.
RULE_KEYWORD_OVERRIDES: Mapping[str, str] = MappingProxyType(
    {
        "aws-amazon-bedrock": "aws",
        "contentful-delivery": "contentful",
        "curl": "curl",
        "hashicorp-tf": "hashicorp",
        "microsoft-teams": "microsoft-teams",
        "new-relic": "newrelic",
        "settlemint-application": "settlemint",
        "yandex-aws": "yandex",
    }
)

# Raw detector directory name -> canonical keyword, where stripping is wrong.
DETECTOR_KEYWORD_OVERRIDES: Mapping[str, str] = MappingProxyType(
    {
        "gcpapplicationdefaultcredentials": "gcp",
        "hubspot_apikey": "hubspot",
        # "io" is not a suffix, but these two are not .io brands
        "adafruitio": "adafruit",
        "adobeio": "adobe",
        "flyio": "flyio",
        "frameio": "frameio",
        # "key" would leave the generic "private"
        "privatekey": "privatekey",
        "sonarcloud": "sonar",
    }
)

# Rule-side display keyword -> detector-side keyword, where names diverge.
SERVICE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "cisco-meraki": "meraki",
        "maxmind-license": "maxmind",
        "private-key": "privatekey",
    }
)

# Environment variable names that keyword matching cannot place (too short,
# too generic, or not containing the service name). Keys are UPPER_CASE.
EXACT_NAME_HOSTS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "NODE_AUTH_TOKEN": ("registry.npmjs.org",),
        "DD_API_KEY": ("api.datadoghq.com", "*.datadoghq.com"),
        "HF_TOKEN": ("huggingface.co", "*.huggingface.co"),
        "CO_API_KEY": ("api.cohere.com",),
        "FLY_API_TOKEN": ("api.fly.io",),
        "RENDER_API_KEY": ("api.render.com",),
        "LINEAR_API_KEY": ("api.linear.app",),
        "TOGETHER_API_KEY": ("api.together.xyz",),
        "REPLICATE_API_TOKEN": ("api.replicate.com",),
    }
)
