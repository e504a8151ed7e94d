# Provider management and switching
import copy
import logging
import time
from typing import Any

from ccswitch.errors import InvalidInputError, ProviderNotFoundError
from ccswitch.mcp import project_enabled
from ccswitch.models import AppType, ConfigRoot, CustomEndpoint, LiveAdapter, Provider, ProviderMeta
from ccswitch.platforms import get_adapter
from ccswitch.platforms.claude import normalize_claude_models
from ccswitch.settings import AppSettings
from ccswitch.store import ConfigStore

logger = logging.getLogger(__name__)

# ABOUTME: Id of the provider created from an existing live file
DEFAULT_PROVIDER_ID = "default"


def now_ms() -> int:
    return int(time.time() * 1000)


def normalize_endpoint_url(url: str) -> str:
    """Trim whitespace and trailing slashes.

    Examples:
        >>> normalize_endpoint_url("  https://api.example.com/v1/ ")
        'https://api.example.com/v1'
    """
    return url.strip().rstrip("/")


def _find_provider(root: ConfigRoot, app: AppType, provider_id: str) -> Provider:
    provider = root.get_manager(app).providers.get(provider_id)
    if provider is None:
        raise ProviderNotFoundError(provider_id)
    return provider


class ProviderService:
    """Provider operations over one ConfigStore.

    ABOUTME: switch() keeps the SSOT and the client's live file in agreement
    ABOUTME: Every mutation holds the store's write lock for its whole duration, file I/O included
    """

    def __init__(self, store: ConfigStore, settings: AppSettings | None = None) -> None:
        self.store = store
        self.settings = settings or AppSettings()

    def adapter(self, app: AppType) -> LiveAdapter:
        return get_adapter(app, self.settings)

    def list_providers(self, app: AppType) -> dict[str, Provider]:
        with self.store.reading() as root:
            return copy.deepcopy(root.apps[app].providers if app in root.apps else {})

    def current(self, app: AppType) -> str:
        with self.store.reading() as root:
            manager = root.apps.get(app)
            return manager.current if manager is not None else ""

    def switch(self, app: AppType, provider_id: str) -> None:
        """Make provider_id the active provider of a client.

        ABOUTME: 1. resolve target  2. backfill the outgoing provider from the live file
        ABOUTME: 3. validate target  4. write live  5. re-project MCP  6. read back
        ABOUTME: 7. set current  8. persist
        ABOUTME: Steps are individually atomic; there is no rollback across them

        Raises:
            ProviderNotFoundError: If provider_id is unknown
            ConfigError: If the target payload fails the client's shape check (nothing written)
            FileIOError, JsonParseError, TomlParseError: From live file I/O
        """
        adapter = self.adapter(app)

        with self.store.writing() as root:
            manager = root.get_manager(app)
            target = _find_provider(root, app, provider_id)

            backfill: Any = None
            current_id = manager.current
            outgoing = manager.providers.get(current_id) if current_id else None
            if current_id != provider_id and outgoing is not None and adapter.live_exists():
                backfill = adapter.read_live()

            adapter.validate_settings(provider_id, target.settings_config)

            if backfill is not None and outgoing is not None:
                outgoing.settings_config = backfill
                logger.info(f"Backfilled live {app} config into provider '{current_id}'")

            adapter.write_live(target.settings_config)
            project_enabled(root, app, adapter)
            target.settings_config = adapter.read_live()

            manager.current = provider_id
            self.store.persist()

        logger.info(f"Switched {app} to provider '{provider_id}'")

    def _sync_if_current(self, root: ConfigRoot, app: AppType, provider: Provider) -> None:
        if root.get_manager(app).current != provider.id:
            return
        adapter = self.adapter(app)
        adapter.write_live(provider.settings_config)
        project_enabled(root, app, adapter)

    def _prepare(self, app: AppType, provider: Provider) -> Provider:
        if not provider.id.strip():
            raise InvalidInputError("Provider id must not be empty")
        prepared = copy.deepcopy(provider)
        if app == "claude":
            normalize_claude_models(prepared.settings_config)
        self.adapter(app).validate_settings(prepared.id, prepared.settings_config)
        return prepared

    def add(self, app: AppType, provider: Provider) -> bool:
        """Insert a provider; when it is the current one its live file is rewritten too.

        Raises:
            InvalidInputError: If the id is blank
            ConfigError: If the payload fails the client's shape check
        """
        prepared = self._prepare(app, provider)
        with self.store.writing() as root:
            root.get_manager(app).providers[prepared.id] = prepared
            self._sync_if_current(root, app, prepared)
            self.store.persist()
        logger.info(f"Added {app} provider '{prepared.id}'")
        return True

    def update(self, app: AppType, provider: Provider) -> bool:
        """Replace an existing provider; a missing meta keeps the stored one.

        Raises:
            ProviderNotFoundError: If the provider does not exist
            ConfigError: If the payload fails the client's shape check
        """
        prepared = self._prepare(app, provider)
        with self.store.writing() as root:
            existing = _find_provider(root, app, prepared.id)
            if prepared.meta is None:
                prepared.meta = existing.meta
            root.get_manager(app).providers[prepared.id] = prepared
            self._sync_if_current(root, app, prepared)
            self.store.persist()
        logger.info(f"Updated {app} provider '{prepared.id}'")
        return True

    def delete(self, app: AppType, provider_id: str) -> None:
        """Delete a provider that is not the current one.

        Raises:
            InvalidInputError: If provider_id is the current provider
            ProviderNotFoundError: If the provider does not exist
        """
        with self.store.writing() as root:
            manager = root.get_manager(app)
            if manager.current == provider_id:
                raise InvalidInputError("Cannot delete the provider currently in use")
            if manager.providers.pop(provider_id, None) is None:
                raise ProviderNotFoundError(provider_id)
            self.store.persist()
        logger.info(f"Deleted {app} provider '{provider_id}'")

    def import_default_config(self, app: AppType) -> bool:
        """Seed a 'default' provider from the live file when the client has none.

        Returns:
            False if the client already has providers

        Raises:
            ConfigError: If the live file doesn't exist
        """
        adapter = self.adapter(app)
        with self.store.writing() as root:
            manager = root.get_manager(app)
            if manager.providers:
                return False

            settings = adapter.read_live()
            manager.providers[DEFAULT_PROVIDER_ID] = Provider(
                id=DEFAULT_PROVIDER_ID,
                name=DEFAULT_PROVIDER_ID,
                settings_config=settings,
                created_at=now_ms(),
            )
            manager.current = DEFAULT_PROVIDER_ID
            self.store.persist()

        logger.info(f"Imported live {app} config as provider '{DEFAULT_PROVIDER_ID}'")
        return True

    def read_live_settings(self, app: AppType) -> Any:
        """Live file content in settings-payload shape."""
        return self.adapter(app).read_live()

    def get_custom_endpoints(self, app: AppType, provider_id: str) -> list[CustomEndpoint]:
        """Stored endpoints, newest first."""
        with self.store.reading() as root:
            provider = _find_provider(root, app, provider_id)
            if provider.meta is None:
                return []
            endpoints = [copy.copy(ep) for ep in provider.meta.custom_endpoints.values()]
        return sorted(endpoints, key=lambda ep: ep.added_at, reverse=True)

    def add_custom_endpoint(self, app: AppType, provider_id: str, url: str) -> None:
        normalized = normalize_endpoint_url(url)
        if not normalized:
            raise InvalidInputError("URL must not be empty")

        with self.store.writing() as root:
            provider = _find_provider(root, app, provider_id)
            if provider.meta is None:
                provider.meta = ProviderMeta()
            provider.meta.custom_endpoints[normalized] = CustomEndpoint(
                url=normalized, added_at=now_ms()
            )
            self.store.persist()

    def remove_custom_endpoint(self, app: AppType, provider_id: str, url: str) -> None:
        normalized = normalize_endpoint_url(url)
        with self.store.writing() as root:
            provider = _find_provider(root, app, provider_id)
            if provider.meta is not None:
                provider.meta.custom_endpoints.pop(normalized, None)
            self.store.persist()

    def update_endpoint_last_used(self, app: AppType, provider_id: str, url: str) -> None:
        normalized = normalize_endpoint_url(url)
        with self.store.writing() as root:
            provider = _find_provider(root, app, provider_id)
            if provider.meta is None:
                return
            endpoint = provider.meta.custom_endpoints.get(normalized)
            if endpoint is None:
                return
            endpoint.last_used = now_ms()
            self.store.persist()

    def update_sort_order(self, app: AppType, updates: list[tuple[str, int]]) -> bool:
        """Set sort indices; unknown ids are ignored."""
        with self.store.writing() as root:
            providers = root.get_manager(app).providers
            for provider_id, sort_index in updates:
                provider = providers.get(provider_id)
                if provider is not None:
                    provider.sort_index = sort_index
            self.store.persist()
        return True
