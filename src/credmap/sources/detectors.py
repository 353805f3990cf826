"""
Host extraction from a detector source tree.

Each immediate subdirectory of the root is one detector; its name is the
raw source name. Go sources are scanned for http(s) string literals and
the hosts of those URLs are kept, minus noise.

Only URLs/hosts are extracted; detection regexes in the tree are ignored.
"""

from __future__ import annotations

import ast
import ipaddress
import re
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlsplit

import structlog

from credmap.catalog.models import HostEntity
from credmap.core.errors import ExtractionError

logger = structlog.get_logger()

_VERSION_DIR_RE = re.compile(r"^v(\d+)$")

# Comments and rune literals are matched only so that quotes inside them
# are not mistaken for string literals.
_GO_TOKEN_RE = re.compile(
    r"""
      //[^\n]*
    | /\*.*?\*/
    | '(?:[^'\\\n]|\\.)*'
    | "(?P<str>(?:[^"\\\n]|\\.)*)"
    | `(?P<raw>[^`]*)`
    """,
    re.VERBOSE | re.DOTALL,
)

_VALID_HOST_RE = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9\-]*[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9\-]*[a-zA-Z0-9])?)*$"
)

NOISE_URL_MARKERS = ("howtorotate.com", "github.com/truffle")
NOISE_HOSTS = frozenset({"localhost", "howtorotate.com", "github.com"})
INTERNAL_SUFFIXES = (
    ".local",
    ".localdomain",
    ".internal",
    ".lan",
    ".home",
    ".svc",
    ".cluster.local",
    ".svc.cluster.local",
)


@dataclass(frozen=True)
class ExtractOptions:
    """Options for host extraction."""

    allow_ip_hosts: bool = False


@dataclass
class ExtractionResult:
    """Detectors with hosts, plus what was skipped or looked suspicious."""

    detectors: list[HostEntity] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GoStringLiteral:
    """A decoded string literal and where it was found."""

    value: str
    path: Path
    line: int


def is_valid_host(host: str) -> bool:
    return bool(_VALID_HOST_RE.match(host))


def is_noise_url(url: str) -> bool:
    lower = url.lower()
    return any(marker in lower for marker in NOISE_URL_MARKERS)


def is_noise_host(host: str, allow_ip_hosts: bool = False) -> bool:
    """
    Decide whether a host should be dropped.

    IP literals are always dropped unless allow_ip_hosts is set, and even
    then non-routable ranges are dropped.
    """
    host = host.lower()
    if not host or host in NOISE_HOSTS or host.endswith("fsf.org"):
        return True

    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        ip = None
    if ip is not None:
        if not allow_ip_hosts:
            return True
        if ip.is_loopback or ip.is_private or ip.is_link_local or ip.is_unspecified or ip.is_multicast:
            return True

    if host.endswith(INTERNAL_SUFFIXES):
        return True

    # Regex fragments like "(" leak in from URLs embedded in patterns
    if not is_valid_host(host):
        return True

    return "." not in host


def choose_highest_version_dir(service_dir: Path) -> Path:
    """
    Select the highest versioned subdirectory (v1, v2, ...) if present.

    Raises:
        OSError: If the directory cannot be listed
    """
    best_version = -1
    best_dir = service_dir
    for child in service_dir.iterdir():
        if not child.is_dir():
            continue
        match = _VERSION_DIR_RE.match(child.name)
        if match and int(match.group(1)) > best_version:
            best_version = int(match.group(1))
            best_dir = child
    return best_dir


def iter_go_string_literals(source: str, path: Path, warnings: list[str]) -> list[GoStringLiteral]:
    """Return every string literal in a Go source file, decoded."""
    literals: list[GoStringLiteral] = []
    for match in _GO_TOKEN_RE.finditer(source):
        raw, interpreted = match.group("raw"), match.group("str")
        if raw is None and interpreted is None:
            continue
        line = source.count("\n", 0, match.start()) + 1
        if raw is not None:
            literals.append(GoStringLiteral(raw, path, line))
            continue
        # Python escapes are a superset of Go's; the extras (\N{...}) never
        # occur in URLs, so decoding with Python rules is close enough.
        try:
            value = ast.literal_eval(f'"{interpreted}"')
        except (SyntaxError, ValueError) as e:
            warnings.append(f"{path}:{line}: unquote string literal {match.group(0)!r}: {e}")
            continue
        literals.append(GoStringLiteral(value, path, line))
    return literals


def extract_hosts_from_package(
    package_dir: Path,
    options: ExtractOptions,
) -> tuple[list[str], list[str]]:
    """
    Extract hosts from http(s) literals in a directory's non-test Go files.

    Returns:
        Tuple of (hosts in first-seen order, warnings)

    Raises:
        OSError: If a source file cannot be read
    """
    hosts: list[str] = []
    seen: set[str] = set()
    warnings: list[str] = []

    for path in sorted(package_dir.glob("*.go")):
        if path.name.endswith("_test.go") or not path.is_file():
            continue
        source = path.read_text(encoding="utf-8", errors="replace")

        for literal in iter_go_string_literals(source, path, warnings):
            value = literal.value
            if not value.startswith(("https://", "http://")) or is_noise_url(value):
                continue
            try:
                host = (urlsplit(value).hostname or "").lower()
            except ValueError as e:
                warnings.append(f"{literal.path}:{literal.line}: parse url {value!r}: {e}")
                continue
            if is_noise_host(host, options.allow_ip_hosts) or host in seen:
                continue
            seen.add(host)
            hosts.append(host)

    return hosts, warnings


def extract_detectors(
    root: str | Path,
    options: ExtractOptions | None = None,
) -> ExtractionResult:
    """
    Walk a detector tree and extract verification hosts per detector.

    Args:
        root: Directory holding one subdirectory per detector
        options: Extraction options

    Returns:
        ExtractionResult with detectors sorted by source name

    Raises:
        ExtractionError: If the root directory cannot be listed
    """
    options = options or ExtractOptions()
    root = Path(root)
    try:
        entries = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as e:
        raise ExtractionError(
            f"cannot read detector directory: {e.strerror or e}",
            details={"path": str(root)},
        ) from e

    result = ExtractionResult()
    for service_dir in entries:
        name = service_dir.name
        try:
            package_dir = choose_highest_version_dir(service_dir)
            hosts, warnings = extract_hosts_from_package(package_dir, options)
        except OSError as e:
            result.skipped.append(f"{name}: {e}")
            logger.warning("detector_skipped", detector=name, error=str(e))
            continue

        result.warnings.extend(warnings)
        if hosts:
            result.detectors.append(HostEntity.create(name, hosts))

    result.detectors.sort(key=lambda d: d.source_name)
    result.skipped.sort()

    logger.info(
        "detectors_extracted",
        root=str(root),
        detectors=len(result.detectors),
        skipped=len(result.skipped),
        warnings=len(result.warnings),
    )
    return result
