# .env (KEY=VALUE) parsing and serialization
import re

# ABOUTME: Variable names are letters, digits and underscores only
ENV_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def parse_env_file(content: str) -> dict[str, str]:
    """Parse KEY=VALUE lines.

    ABOUTME: Splits each line on the first '=' only, so values may contain '='
    ABOUTME: Blank lines, '#' comments and lines with invalid keys are ignored

    Args:
        content: Raw .env file text

    Returns:
        Mapping of variable name to value (both trimmed)

    Examples:
        >>> parse_env_file("# comment\\nGEMINI_API_KEY=sk-1\\nURL=https://x?a=b\\n")
        {'GEMINI_API_KEY': 'sk-1', 'URL': 'https://x?a=b'}
    """
    result: dict[str, str] = {}

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if ENV_KEY_PATTERN.match(key):
            result[key] = value.strip()

    return result


def serialize_env_file(env: dict[str, str]) -> str:
    """Emit KEY=VALUE lines with keys sorted for reproducible diffs."""
    lines = [f"{key}={env[key]}" for key in sorted(env)]
    return "\n".join(lines) + "\n" if lines else ""
