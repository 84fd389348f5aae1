# ABOUTME: Tests for credential validation.
# ABOUTME: Covers is_blank, validate_url and validate_credentials.
from ccswitch.utils.validation import ValidationError, is_blank, validate_credentials, validate_url


class TestIsBlank:
    """Tests for is_blank."""

    def test_blank_values(self):
        """Test None, empty and whitespace strings."""
        assert is_blank(None)
        assert is_blank("")
        assert is_blank("   ")

    def test_non_blank(self):
        """Test a normal string."""
        assert not is_blank("sk-abc")


class TestValidateUrl:
    """Tests for validate_url."""

    def test_valid_https(self):
        """Test that https URLs pass."""
        assert validate_url("https://api.example.com/v1") is None

    def test_valid_http(self):
        """Test that http URLs pass."""
        assert validate_url("http://localhost:8080") is None

    def test_non_http_scheme(self):
        """Test that other schemes are rejected."""
        error = validate_url("ftp://example.com")
        assert isinstance(error, ValidationError)
        assert error.field == "url"
        assert "HTTP or HTTPS" in error.message

    def test_missing_host(self):
        """Test that a URL without host is rejected."""
        error = validate_url("https://")
        assert error is not None
        assert "host" in error.message


class TestValidateCredentials:
    """Tests for validate_credentials."""

    def test_valid(self):
        """Test that good credentials produce nothing."""
        assert validate_credentials("sk-abc", "https://api.example.com", key_prefix="sk-") == []

    def test_blank_key_is_error(self):
        """Test that an empty key blocks."""
        errors = validate_credentials("", "https://api.example.com")
        assert [(e.field, e.severity) for e in errors] == [("key", "error")]

    def test_blank_url_is_error(self):
        """Test that an empty URL blocks."""
        errors = validate_credentials("key", "  ")
        assert [(e.field, e.severity) for e in errors] == [("url", "error")]

    def test_bad_url_is_only_warning(self):
        """Test that a malformed URL does not block."""
        errors = validate_credentials("key", "api.example.com")
        assert len(errors) == 1
        assert errors[0].severity == "warning"

    def test_missing_prefix_is_warning(self):
        """Test the key prefix hint."""
        errors = validate_credentials("abc", "https://api.example.com", key_prefix="sk-")
        assert len(errors) == 1
        assert errors[0].severity == "warning"
        assert "sk-" in errors[0].message

    def test_errors_sorted_first(self):
        """Test that errors come before warnings."""
        errors = validate_credentials("abc", "", key_prefix="sk-")
        assert [e.severity for e in errors] == ["error", "warning"]
