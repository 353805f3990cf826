"""Tests for detector host extraction and rule extraction."""

from pathlib import Path

import pytest

from credmap.core.errors import ExtractionError
from credmap.sources import ExtractOptions, extract_detectors, extract_rules
from credmap.sources.detectors import (
    choose_highest_version_dir,
    extract_hosts_from_package,
    is_noise_host,
    is_noise_url,
    iter_go_string_literals,
)


class TestNoiseFilters:
    """Tests for host and URL noise filtering."""

    @pytest.mark.parametrize(
        "host",
        [
            "",
            "localhost",
            "github.com",
            "howtorotate.com",
            "www.fsf.org",
            "api.svc",
            "db.cluster.local",
            "printer.lan",
            "(",
            "%s.example.com",
            "bareword",
            "127.0.0.1",
            "8.8.8.8",
        ],
    )
    def test_noise_hosts(self, host):
        """Test hosts that are never exported."""
        assert is_noise_host(host) is True

    @pytest.mark.parametrize("host", ["api.stripe.com", "API.Cloudflare.com", "sentry.io"])
    def test_real_hosts(self, host):
        """Test real API hosts are kept."""
        assert is_noise_host(host) is False

    def test_ip_hosts_opt_in(self):
        """Test routable IPs are kept only when allowed."""
        assert is_noise_host("8.8.8.8", allow_ip_hosts=True) is False
        assert is_noise_host("10.0.0.1", allow_ip_hosts=True) is True
        assert is_noise_host("127.0.0.1", allow_ip_hosts=True) is True
        assert is_noise_host("169.254.1.1", allow_ip_hosts=True) is True

    def test_noise_urls(self):
        """Test documentation and upstream repo URLs are skipped."""
        assert is_noise_url("https://howtorotate.com/docs/x")
        assert is_noise_url("https://github.com/trufflesecurity/trufflehog")
        assert not is_noise_url("https://api.github.com/user")


class TestGoStringLiterals:
    """Tests for Go string literal scanning."""

    def test_interpreted_and_raw(self):
        """Test both literal kinds are found with line numbers."""
        source = 'package x\n\nvar a = "https://a.example.com"\nvar b = `https://b.example.com`\n'
        warnings = []
        literals = iter_go_string_literals(source, Path("x.go"), warnings)
        assert [(lit.value, lit.line) for lit in literals] == [
            ("https://a.example.com", 3),
            ("https://b.example.com", 4),
        ]
        assert warnings == []

    def test_escapes_decoded(self):
        """Test escape sequences in interpreted strings are decoded."""
        literals = iter_go_string_literals(r'var a = "https://x.example.com/\"q\"\t"', Path("x.go"), [])
        assert literals[0].value == 'https://x.example.com/"q"\t'

    def test_comments_and_runes_ignored(self):
        """Test quotes inside comments and rune literals are not strings."""
        source = (
            '// "https://comment.example.com"\n'
            '/* "https://block.example.com" */\n'
            "var r = '\"'\n"
            'var s = "https://real.example.com"\n'
        )
        literals = iter_go_string_literals(source, Path("x.go"), [])
        assert [lit.value for lit in literals] == ["https://real.example.com"]

    def test_bad_escape_becomes_warning(self):
        """Test an undecodable literal is reported, not raised."""
        warnings = []
        literals = iter_go_string_literals(r'var a = "\x"', Path("bad.go"), warnings)
        assert literals == []
        assert len(warnings) == 1
        assert warnings[0].startswith("bad.go:1:")


class TestExtractDetectors:
    """Tests for extract_detectors()."""

    def test_extracts_detectors(self, detector_tree):
        """Test detectors with hosts are returned, sorted by name."""
        result = extract_detectors(detector_tree)
        assert [d.source_name for d in result.detectors] == [
            "abstract",
            "cloudflareapitoken",
            "cloudflareglobalapikey",
            "github",
            "meraki",
            "stripe",
        ]

    def test_keywords_derived(self, detector_tree):
        """Test keywords come from the detector name."""
        result = extract_detectors(detector_tree)
        keywords = {d.source_name: d.keyword for d in result.detectors}
        assert keywords["cloudflareapitoken"] == "cloudflare"
        assert keywords["cloudflareglobalapikey"] == "cloudflare"

    def test_hosts(self, detector_tree):
        """Test hosts are extracted from both literal kinds."""
        hosts = {d.source_name: d.hosts for d in extract_detectors(detector_tree).detectors}
        assert hosts["stripe"] == ("api.stripe.com",)
        assert hosts["cloudflareglobalapikey"] == ("api.cloudflare.com",)

    def test_highest_version_only(self, detector_tree):
        """Test only the highest vN subpackage is scanned."""
        hosts = {d.source_name: d.hosts for d in extract_detectors(detector_tree).detectors}
        assert hosts["github"] == ("api.github.com",)
        assert choose_highest_version_dir(detector_tree / "github").name == "v2"
        assert choose_highest_version_dir(detector_tree / "stripe") == detector_tree / "stripe"

    def test_test_files_and_noise_skipped(self, detector_tree):
        """Test _test.go files and noise-only detectors produce nothing."""
        result = extract_detectors(detector_tree)
        names = [d.source_name for d in result.detectors]
        assert "noisy" not in names
        all_hosts = {h for d in result.detectors for h in d.hosts}
        assert "test.stripe.example.com" not in all_hosts

    def test_allow_ip_hosts(self, tmp_path):
        """Test routable IP literals are kept on request."""
        pkg = tmp_path / "root" / "ipservice"
        pkg.mkdir(parents=True)
        (pkg / "ip.go").write_text('var u = "https://93.184.216.34/api"\n')

        assert extract_detectors(tmp_path / "root").detectors == []
        result = extract_detectors(tmp_path / "root", ExtractOptions(allow_ip_hosts=True))
        assert result.detectors[0].hosts == ("93.184.216.34",)

    def test_hosts_deduped(self, tmp_path):
        """Test repeated hosts are reported once."""
        pkg = tmp_path / "svc"
        pkg.mkdir()
        (pkg / "a.go").write_text('var a = "https://api.svc-example.com/a"\nvar b = "https://API.svc-example.com/b"\n')
        hosts, warnings = extract_hosts_from_package(pkg, ExtractOptions())
        assert hosts == ["api.svc-example.com"]
        assert warnings == []

    def test_missing_root(self, tmp_path):
        """Test a missing root raises ExtractionError."""
        with pytest.raises(ExtractionError) as exc_info:
            extract_detectors(tmp_path / "nope")
        assert exc_info.value.details["path"] == str(tmp_path / "nope")


class TestExtractRules:
    """Tests for extract_rules()."""

    def test_extracts_reportable_rules(self, rules_file):
        """Test skipReport and path-only rules are dropped."""
        rules = extract_rules(rules_file)
        assert [r.id for r in rules] == [
            "age-secret-key",
            "cisco-meraki-api-key",
            "cloudflare-api-key",
            "github-pat",
            "stripe-access-token",
        ]

    def test_fields(self, rules_file):
        """Test rule metadata is carried over."""
        rules = {r.id: r for r in extract_rules(rules_file)}
        stripe = rules["stripe-access-token"]
        assert stripe.keyword == "stripe"
        assert stripe.description == "Stripe secret key"
        assert stripe.entropy == 2.0
        assert stripe.keywords == ("sk_test", "sk_live")
        assert stripe.regex.startswith("(?i)\\b(")
        assert rules["cisco-meraki-api-key"].keyword == "cisco-meraki"
        assert rules["cisco-meraki-api-key"].secret_group == 1

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ExtractionError."""
        with pytest.raises(ExtractionError):
            extract_rules(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        """Test malformed TOML raises ExtractionError."""
        path = tmp_path / "bad.toml"
        path.write_text('title = "unterminated\n[[rules]]\nid = "x"\n')
        with pytest.raises(ExtractionError, match="invalid TOML"):
            extract_rules(path)

    def test_mistyped_entropy(self, tmp_path):
        """Test a text entropy is an extraction error naming the rule."""
        path = tmp_path / "rules.toml"
        path.write_text('[[rules]]\nid = "stripe-access-token"\nregex = "sk_[a-z]+"\nentropy = "high"\n')
        with pytest.raises(ExtractionError) as exc_info:
            extract_rules(path)
        assert exc_info.value.details["rule"] == "stripe-access-token"
        assert exc_info.value.details["field"] == "entropy"
        assert exc_info.value.details["path"] == str(path)

    def test_scalar_keywords(self, tmp_path):
        """Test a bare string for keywords is rejected, not split into letters."""
        path = tmp_path / "rules.toml"
        path.write_text('[[rules]]\nid = "stripe-access-token"\nregex = "sk_[a-z]+"\nkeywords = "sk_live"\n')
        with pytest.raises(ExtractionError, match="keywords"):
            extract_rules(path)

    @pytest.mark.parametrize(
        "line",
        ["secretGroup = 1.5", "secretGroup = true", "keywords = [1, 2]", "regex = 42"],
    )
    def test_other_mistyped_fields(self, tmp_path, line):
        """Test other wrong value types are extraction errors."""
        path = tmp_path / "rules.toml"
        regex = "" if line.startswith("regex") else 'regex = "x+"\n'
        path.write_text(f'[[rules]]\nid = "demo-api-key"\n{regex}{line}\n')
        with pytest.raises(ExtractionError):
            extract_rules(path)

    def test_integer_entropy_accepted(self, tmp_path):
        """Test an integer entropy is read as a float."""
        path = tmp_path / "rules.toml"
        path.write_text('[[rules]]\nid = "demo-api-key"\nregex = "x+"\nentropy = 3\n')
        assert extract_rules(path)[0].entropy == 3.0

    def test_no_rules(self, tmp_path):
        """Test a file without rules yields nothing."""
        path = tmp_path / "empty.toml"
        path.write_text('title = "empty"\n')
        assert extract_rules(path) == []
