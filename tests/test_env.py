# Tests for environment variable expansion
import warnings

from ccswitch.utils.env import ENV_VAR_PATTERN, expand_env_vars


def test_expand_single_env_var(monkeypatch):
    """Test expanding a single environment variable."""
    monkeypatch.setenv("HOOK_ID", "abc123")

    result = expand_env_vars("https://hooks.example.com/${HOOK_ID}")
    assert result == "https://hooks.example.com/abc123"


def test_expand_multiple_vars(monkeypatch):
    """Test expanding multiple variables in one string."""
    monkeypatch.setenv("DAV_USER", "alice")
    monkeypatch.setenv("DAV_HOST", "dav.example.com")

    result = expand_env_vars("https://${DAV_USER}@${DAV_HOST}/")
    assert result == "https://alice@dav.example.com/"


def test_missing_var_returns_original(monkeypatch):
    """Test that missing variables are preserved with warning."""
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter("always")
        result = expand_env_vars("secret-${MISSING_VAR}")

        assert result == "secret-${MISSING_VAR}"
        assert len(w) == 1
        assert "MISSING_VAR" in str(w[0].message)
        assert "not found" in str(w[0].message)


def test_no_vars_in_string():
    """Test string without variables passes through unchanged."""
    assert expand_env_vars("plain-password") == "plain-password"


def test_empty_string():
    """Test empty string handling."""
    assert expand_env_vars("") == ""


def test_pattern_ignores_lowercase_and_bare_dollar():
    """Test that only ${UPPER_CASE} references are recognized."""
    assert ENV_VAR_PATTERN.search("${lower}") is None
    assert ENV_VAR_PATTERN.search("$HOME") is None
    assert ENV_VAR_PATTERN.search("${API_KEY_2}") is not None
