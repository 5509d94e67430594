"""Provider registry for fluxtree.

Provides registration and lookup of configuration providers by table and
record type. Registration is explicit (at startup, via the ``@provider``
decorator or the ``fluxtree.providers`` entry point group) and idempotent
by provider name.
"""

import logging
from importlib.metadata import entry_points

from fluxtree.core.types import Record
from fluxtree.providers.types import ConfigurationProvider

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "fluxtree.providers"


class ProviderRegistry:
    """Registry for configuration provider instances.

    Example:
        @provider
        class TextMediaProvider(ConfigurationProvider):
            table = "tt_content"
            record_type = "textmedia"
    """

    _providers: dict[str, ConfigurationProvider] = {}

    @classmethod
    def register(cls, instance: ConfigurationProvider) -> None:
        """Register a provider instance.

        Idempotent: re-registering a provider name is a no-op.
        """
        if instance.name in cls._providers:
            return
        cls._providers[instance.name] = instance

    @classmethod
    def resolve(cls, table: str, record: Record | None = None) -> list[ConfigurationProvider]:
        """Providers matching ``table`` (and the record's type), highest priority first.

        Without a record, every provider of the table matches.
        """
        matching = [p for p in cls._providers.values() if p.matches(table, record)]
        return sorted(matching, key=lambda p: p.priority, reverse=True)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._providers

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered provider names."""
        return sorted(cls._providers.keys())

    @classmethod
    def load_entry_points(cls, group: str = ENTRY_POINT_GROUP) -> int:
        """Register providers advertised by installed distributions.

        Each entry point must reference a ConfigurationProvider subclass.

        Returns:
            Number of newly registered providers
        """
        before = len(cls._providers)
        for entry_point in entry_points(group=group):
            provider_class = entry_point.load()
            if not (isinstance(provider_class, type) and issubclass(provider_class, ConfigurationProvider)):
                logger.warning(
                    "Entry point '%s' is not a ConfigurationProvider, skipping", entry_point.name
                )
                continue
            cls.register(provider_class())
        return len(cls._providers) - before

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._providers.clear()


def provider(provider_class: type[ConfigurationProvider]) -> type[ConfigurationProvider]:
    """Class decorator registering one instance of a provider.

    Usage:
        @provider
        class GridProvider(ConfigurationProvider):
            table = "tt_content"
    """
    ProviderRegistry.register(provider_class())
    return provider_class
