# Platform adapter registry
from ccswitch.models import AppType, LiveAdapter
from ccswitch.platforms.claude import ClaudeAdapter
from ccswitch.platforms.codex import CodexAdapter
from ccswitch.platforms.gemini import GeminiAdapter
from ccswitch.settings import AppSettings

# Registry of all available platform adapters
ALL_PLATFORMS: dict[str, type] = {
    "claude": ClaudeAdapter,
    "codex": CodexAdapter,
    "gemini": GeminiAdapter,
}

__all__ = [
    "LiveAdapter",
    "ClaudeAdapter",
    "CodexAdapter",
    "GeminiAdapter",
    "ALL_PLATFORMS",
    "get_adapter",
    "get_all_platforms",
]


def get_adapter(app: AppType, settings: AppSettings | None = None) -> LiveAdapter:
    """Instantiate the live file adapter for one client.

    ABOUTME: All adapters share the same AppSettings for path resolution

    Raises:
        KeyError: If app is not a known client
    """
    adapter: LiveAdapter = ALL_PLATFORMS[app](settings)
    return adapter


def get_all_platforms(settings: AppSettings | None = None) -> list[LiveAdapter]:
    """Instantiate and return all platform adapters.

    ABOUTME: Returns list for easy iteration
    """
    return [get_adapter(app, settings) for app in ALL_PLATFORMS]
