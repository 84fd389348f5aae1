# Environment variable expansion for webhook and WebDAV settings
import os
import re
import warnings

# ABOUTME: Pattern matches ${VAR_NAME} where VAR_NAME is uppercase with underscores
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Z_][A-Z0-9_]*)\}')


def expand_env_vars(value: str) -> str:
    """Expand environment variables in ${VAR} format.

    ABOUTME: Lets users keep webhook URLs and WebDAV passwords out of JSON files
    ABOUTME: Returns original reference if variable not found (with warning)

    Args:
        value: String potentially containing ${VAR} references

    Returns:
        String with environment variables expanded

    Examples:
        >>> expand_env_vars("https://hooks.example.com/${HOOK_ID}")
        'https://hooks.example.com/abc123'
        >>> expand_env_vars("${UNSET_VAR}")
        '${UNSET_VAR}'  # with warning
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name in os.environ:
            return os.environ[var_name]
        warnings.warn(
            f"Environment variable '{var_name}' not found, keeping original",
            UserWarning,
            stacklevel=3
        )
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)
