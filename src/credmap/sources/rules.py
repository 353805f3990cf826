"""
Rule extraction from a Gitleaks-style TOML rules file.

Regex patterns, prefilter keywords and metadata are kept; each rule gets a
service keyword derived from its hyphenated ID.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import toml

from credmap.catalog.models import RulePattern
from credmap.core.errors import ExtractionError

logger = structlog.get_logger()


def _field(table: dict[str, Any], key: str, types: tuple[type, ...], default: Any) -> Any:
    value = table.get(key, default)
    # bool is an int subclass, but `entropy = true` is still a typo
    if (isinstance(value, bool) and bool not in types) or not isinstance(value, types):
        raise ExtractionError(
            f"rule field {key!r} has type {type(value).__name__}",
            details={"rule": table.get("id", "?"), "field": key},
        )
    return value


def rule_from_table(table: dict[str, Any]) -> RulePattern | None:
    """
    Convert one [[rules]] table to a RulePattern.

    Returns None for rules that are not reported (skipReport) and for
    path-only rules without a regex.

    Raises:
        ExtractionError: If a field holds a value of the wrong type
    """
    if _field(table, "skipReport", (bool,), False):
        return None
    regex = _field(table, "regex", (str,), "")
    if not regex.strip():
        return None

    keywords = _field(table, "keywords", (list,), [])
    if not all(isinstance(k, str) for k in keywords):
        raise ExtractionError(
            "rule field 'keywords' must hold strings only",
            details={"rule": table.get("id", "?"), "field": "keywords"},
        )

    return RulePattern.create(
        rule_id=_field(table, "id", (str,), ""),
        regex=regex,
        description=_field(table, "description", (str,), ""),
        entropy=float(_field(table, "entropy", (int, float), 0.0)),
        secret_group=_field(table, "secretGroup", (int,), 0),
        keywords=keywords,
    )


def extract_rules(path: str | Path) -> list[RulePattern]:
    """
    Read a rules file and return its reportable rules.

    Args:
        path: Path to the TOML rules file

    Returns:
        Rules sorted by keyword, then ID

    Raises:
        ExtractionError: If the file is missing, not valid TOML, or holds
            a rule with a mistyped field
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            config = toml.load(f)
    except OSError as e:
        raise ExtractionError(
            f"cannot read rules file: {e.strerror or e}",
            details={"path": str(path)},
        ) from e
    except toml.TomlDecodeError as e:
        raise ExtractionError(f"invalid TOML: {e}", details={"path": str(path)}) from e

    tables = config.get("rules") or []
    if not isinstance(tables, list):
        raise ExtractionError("'rules' must be an array of tables", details={"path": str(path)})

    rules: list[RulePattern] = []
    skipped = 0
    for table in tables:
        try:
            rule = rule_from_table(table) if isinstance(table, dict) else None
        except ExtractionError as e:
            e.details["path"] = str(path)
            raise
        if rule is None:
            skipped += 1
            continue
        rules.append(rule)

    rules.sort(key=lambda r: (r.keyword, r.id))
    logger.info("rules_extracted", path=str(path), rules=len(rules), skipped=skipped)
    return rules
