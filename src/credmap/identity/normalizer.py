"""
Keyword normalization.

The normalized form is the join key for every comparison between the rule
side and the detector side. It is never shown to users.
"""

from __future__ import annotations


def normalize_keyword(keyword: str) -> str:
    """
    Collapse a keyword to its comparison form.

    Examples:
        Cloudflare → cloudflare
        new-relic → newrelic
        hubspot_apikey → hubspotapikey

    Idempotent: normalizing a normalized keyword returns it unchanged.
    """
    return keyword.lower().replace("-", "").replace("_", "")
