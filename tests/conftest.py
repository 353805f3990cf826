"""Root test configuration."""

import logging

import pytest
import structlog

from credmap.config.settings import get_settings


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Isolate tests from CREDMAP_* variables in the environment."""
    import os

    for key in list(os.environ):
        if key.startswith("CREDMAP_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def detector_tree(tmp_path):
    """
    Build a small detector tree on disk.

    Layout mirrors a real checkout: one directory per detector, some with
    versioned subpackages, Go sources holding verification URLs.
    """
    root = tmp_path / "detectors"

    def write(rel: str, body: str) -> None:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")

    write(
        "stripe/stripe.go",
        'package stripe\n\nconst verifyURL = "https://api.stripe.com/v1/charges"\n',
    )
    write(
        "cloudflareapitoken/cloudflareapitoken.go",
        'package cloudflareapitoken\n\nvar u = "https://api.cloudflare.com/client/v4/user/tokens/verify"\n',
    )
    write(
        "cloudflareglobalapikey/cloudflareglobalapikey.go",
        "package cloudflareglobalapikey\n\nvar u = `https://api.cloudflare.com/client/v4/user`\n",
    )
    write(
        "meraki/meraki.go",
        'package meraki\n\nconst base = "https://api.meraki.com/api/v1/organizations"\n',
    )
    # Versioned detector: only v2 is scanned
    write("github/v1/github.go", 'package github\n\nvar u = "https://old.github-api.example.com/user"\n')
    write("github/v2/github.go", 'package github\n\nvar u = "https://api.github.com/user"\n')
    # Host-only detector
    write("abstract/abstract.go", 'package abstract\n\nvar u = "https://exchange-rates.abstractapi.com/v1/"\n')
    # Only noise: no detector emitted
    write(
        "noisy/noisy.go",
        "package noisy\n\n"
        '// see "https://ignored.example.com" in comments\n'
        'var a = "https://howtorotate.com/docs/tutorials/noisy/"\n'
        'var b = "http://localhost:8080/health"\n'
        'var c = "https://10.0.0.1/api"\n'
        'var d = "https://%s.internal/api"\n',
    )
    # Test files are ignored
    write("stripe/stripe_test.go", 'package stripe\n\nvar t = "https://test.stripe.example.com"\n')
    return root


@pytest.fixture
def rules_file(tmp_path):
    """Write a small rules TOML file."""
    path = tmp_path / "rules.toml"
    path.write_text(
        '''title = "test rules"

[[rules]]
id = "stripe-access-token"
description = "Stripe secret key"
regex = \'\'\'(?i)\\b((?:sk|rk)_(?:test|live|prod)_[a-zA-Z0-9]{10,99})\'\'\'
entropy = 2
keywords = ["sk_test", "sk_live"]

[[rules]]
id = "cloudflare-api-key"
regex = \'\'\'[a-f0-9]{37}\'\'\'
keywords = ["cloudflare"]

[[rules]]
id = "cisco-meraki-api-key"
regex = \'\'\'[0-9a-f]{40}\'\'\'
secretGroup = 1

[[rules]]
id = "age-secret-key"
regex = \'\'\'AGE-SECRET-KEY-1[QPZRY9X8GF2TVDW0S3JN54KHCE6MUA7L]{58}\'\'\'
keywords = ["age-secret-key-1"]

[[rules]]
id = "github-pat"
regex = \'\'\'ghp_[0-9a-zA-Z]{36}\'\'\'

[[rules]]
id = "generic-noisy"
regex = \'\'\'.*\'\'\'
skipReport = true

[[rules]]
id = "pkcs12-file"
path = \'\'\'(?i)(?:^|\\/)[^\\/]+\\.p(?:12|fx)$\'\'\'
''',
        encoding="utf-8",
    )
    return path
