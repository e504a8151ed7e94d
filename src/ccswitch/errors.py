# Error taxonomy for ccswitch
# ABOUTME: Every engine failure derives from AppError; str(err) is the user-facing message
# ABOUTME: Content/validation errors also subclass ValueError
from pathlib import Path

# ABOUTME: Expected SSOT top-level shape, embedded in the legacy-format message
EXPECTED_SHAPE = '{"version": 2, "claude": {...}, "codex": {...}, "gemini": {...}, "mcp": {...}}'


class AppError(Exception):
    """Base class for all ccswitch errors."""


class ConfigError(AppError, ValueError):
    """A stored payload or document fails its shape contract."""


class LegacyConfigError(ConfigError):
    """The SSOT file uses the retired single-profile layout.

    ABOUTME: No runtime migration is attempted
    ABOUTME: Message carries remediation steps because nothing is fixed automatically
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Detected legacy v1 config at {path}. "
            "Runtime auto-migration is no longer supported.\n\n"
            "Solutions:\n"
            "1. Install a release that still ships the one-time migration and start it once\n"
            f"2. Or manually edit {path} so the top-level structure becomes:\n"
            f"   {EXPECTED_SHAPE}\n"
        )


class InvalidInputError(AppError, ValueError):
    """A caller-supplied argument is unusable (blank id, deleting the current provider...)."""


class ProviderNotFoundError(AppError):
    """The provider id is absent from the client's provider map."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Provider not found: {provider_id}")


class McpValidationError(AppError, ValueError):
    """An MCP server entry fails type/field checks."""


class FileIOError(AppError):
    """Filesystem failure (or undecodable file content) with path context."""

    def __init__(self, path: Path, source: OSError | UnicodeDecodeError) -> None:
        self.path = path
        self.source = source
        super().__init__(f"IO error: {path}: {source}")


class JsonParseError(AppError, ValueError):
    """A JSON file could not be parsed."""

    def __init__(self, path: Path, detail: object) -> None:
        self.path = path
        super().__init__(f"Invalid JSON in {path}: {detail}")


class TomlParseError(AppError, ValueError):
    """A TOML file or text could not be parsed."""

    def __init__(self, path: Path | None, detail: object) -> None:
        self.path = path
        where = f" in {path}" if path is not None else ""
        super().__init__(f"Invalid TOML{where}: {detail}")


class LockError(AppError):
    """Internal synchronization misuse on the config store lock."""
