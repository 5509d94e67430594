"""Once-per-process provider cache clearing."""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from fluxtree.persistence.adapter import StoreError
from fluxtree.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass
class CacheSweepState:
    """Whether providers already cleared their caches in this unit of work.

    Owned by whatever composes the hooks and shared by every hook instance
    of that unit of work (a request, or a whole worker process).
    """

    cleared: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class CacheSweeper:
    """Fans a clear-cache command out to every provider of every table, once."""

    def __init__(
        self,
        state: CacheSweepState | None = None,
        registry: type[ProviderRegistry] = ProviderRegistry,
    ):
        self.state = state or CacheSweepState()
        self.registry = registry

    def sweep(self, tables: Iterable[str], command: Any) -> bool:
        """Ask providers to clear their caches.

        Returns:
            True if this call performed the sweep, False if it already happened.
        """
        # Claimed before the fan-out; a provider may trigger another clear-cache
        with self.state.lock:
            if self.state.cleared:
                return False
            self.state.cleared = True

        count = 0
        for table in tables:
            for instance in self.registry.resolve(table):
                try:
                    instance.clear_cache_command(command)
                except StoreError:
                    raise
                except Exception as e:
                    logger.error(
                        "Provider '%s' failed to clear caches for %s: %s",
                        instance.name,
                        table,
                        e,
                    )
                count += 1

        logger.info("Cleared caches of %d provider(s) for command %r", count, command)
        return True
