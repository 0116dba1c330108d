"""Tests for text sanitization."""

from quant_engine.utils.sanitize import sanitize_text


class TestSanitizeText:
    """Tests for sanitize_text function."""

    def test_sanitize_none(self) -> None:
        """Test sanitize returns None for None input."""
        assert sanitize_text(None) is None

    def test_sanitize_basic(self) -> None:
        """Test a plain trade intent passes through."""
        assert sanitize_text("Buy 20 AAPL at market price") == "Buy 20 AAPL at market price"

    def test_sanitize_strips_whitespace(self) -> None:
        """Test surrounding whitespace is stripped."""
        assert sanitize_text("  Sell TSLA  ") == "Sell TSLA"

    def test_sanitize_removes_control_chars(self) -> None:
        """Test control characters are removed."""
        assert sanitize_text("Buy\x00 AAPL\x1f!") == "Buy AAPL!"

    def test_sanitize_removes_carriage_return(self) -> None:
        """Test carriage return is removed."""
        assert sanitize_text("Hello\rWorld") == "HelloWorld"

    def test_sanitize_removes_high_control_chars(self) -> None:
        """Test high control characters (0x7f-0x9f) are removed."""
        assert sanitize_text("Hello\x7fWorld\x9f!") == "HelloWorld!"

    def test_sanitize_collapses_newlines_and_tabs(self) -> None:
        """Test newlines, tabs and runs of spaces become single spaces."""
        assert sanitize_text("Buy\n20\t\tAAPL   now") == "Buy 20 AAPL now"

    def test_sanitize_truncates_long_text(self) -> None:
        """Test long text is truncated."""
        result = sanitize_text("A" * 600, max_length=500)

        assert len(result) == 503  # 500 + "..."
        assert result.endswith("...")

    def test_sanitize_custom_max_length(self) -> None:
        """Test custom max length."""
        assert sanitize_text("Hello World", max_length=5) == "Hello..."

    def test_sanitize_empty(self) -> None:
        """Test empty and whitespace-only input become empty strings."""
        assert sanitize_text("") == ""
        assert sanitize_text(" \n\t ") == ""
