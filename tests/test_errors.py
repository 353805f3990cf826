"""Tests for exit codes and the command error decorator."""

from credmap.core.errors import (
    ExitCode,
    ExtractionError,
    format_error_message,
    main_with_error_handling,
)


class TestMainWithErrorHandling:
    """Tests for main_with_error_handling()."""

    def test_passes_through_exit_code(self):
        """Test a normal return value is kept."""

        @main_with_error_handling()
        def command() -> int:
            return ExitCode.NO_MATCH

        assert command() == ExitCode.NO_MATCH

    def test_credmap_error(self, capsys):
        """Test a CredmapError becomes its exit code and a one-line message."""

        @main_with_error_handling()
        def command() -> int:
            raise ExtractionError("cannot read rules file", details={"path": "rules.toml"})

        assert command() == ExitCode.EXTRACTION_ERROR
        assert "error: cannot read rules file (path=rules.toml)\n" in capsys.readouterr().err

    def test_interrupt(self):
        """Test Ctrl-C returns the interrupt code."""

        @main_with_error_handling()
        def command() -> int:
            raise KeyboardInterrupt

        assert command() == ExitCode.INTERRUPTED == 130

    def test_unexpected_error(self, capsys):
        """Test any other exception is an unknown error."""

        @main_with_error_handling()
        def command() -> int:
            raise RuntimeError("boom")

        assert command() == ExitCode.UNKNOWN_ERROR
        assert "RuntimeError: boom" in capsys.readouterr().err


def test_format_error_message_without_details():
    """Test an error without details is its message."""
    assert format_error_message(ExtractionError("bad")) == "bad"
