"""fluxtree configuration providers.

Providers attach behaviour to the records of a table (optionally of one
record type) and are called at fixed points of the DataHandler run:

- pre_process_command / post_process_command: around cmdmap commands
- pre_process_record / post_process_record: around datamap field processing
- post_process_database_operation: after a datamap row was written
- clear_cache_command: once per unit of work when caches are flushed

Usage:
    from fluxtree.providers import ConfigurationProvider, ProviderContext, provider

    @provider
    class TeaserProvider(ConfigurationProvider):
        table = "tt_content"
        record_type = "teaser"

        def pre_process_record(self, context: ProviderContext) -> None:
            context.record.setdefault("header", "Teaser")
"""

from fluxtree.providers.cache import CacheSweeper, CacheSweepState
from fluxtree.providers.dispatcher import ProviderDispatcher
from fluxtree.providers.registry import ENTRY_POINT_GROUP, ProviderRegistry, provider
from fluxtree.providers.types import ConfigurationProvider, ProviderContext, ProviderMethod

__all__ = [
    "CacheSweepState",
    "CacheSweeper",
    "ConfigurationProvider",
    "ENTRY_POINT_GROUP",
    "ProviderContext",
    "ProviderDispatcher",
    "ProviderMethod",
    "ProviderRegistry",
    "provider",
]
