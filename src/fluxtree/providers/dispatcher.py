"""Provider callback dispatch for DataHandler hooks.

Resolves the providers of a record and runs one lifecycle callback on
each, in priority order. Each provider's update to the record is visible
to the next. A failing provider is logged and recorded on the operation;
it never blocks the remaining providers or the surrounding command.
"""

import logging
from typing import Any

from fluxtree.core.types import Record, is_placeholder_token, to_int
from fluxtree.datahandler.context import OperationContext, ProviderFailure
from fluxtree.persistence.adapter import RecordStore, StoreError
from fluxtree.providers.registry import ProviderRegistry
from fluxtree.providers.types import ProviderContext, ProviderMethod

logger = logging.getLogger(__name__)


class ProviderDispatcher:
    def __init__(self, store: RecordStore, registry: type[ProviderRegistry] = ProviderRegistry):
        self.store = store
        self.registry = registry

    def dispatch(
        self,
        method: ProviderMethod,
        table: str,
        id: Any,
        record: Record,
        arguments: dict[str, Any],
        context: OperationContext,
    ) -> Record:
        """Run ``method`` on every provider matching the record.

        Args:
            method: Lifecycle callback to run
            table: Table being processed
            id: Uid or NEW token of the record
            record: Field bundle handed to providers; reloaded when empty
            arguments: Callback-specific values, ``row`` is set to the record
            context: The running operation

        Returns:
            The record after all providers ran.
        """
        uid = self.resolve_record_uid(id, context)
        record = self.ensure_record_data_loaded(table, uid, record)
        arguments["row"] = record

        provider_context = ProviderContext(
            table=table, id=uid, record=record, arguments=arguments, operation=context
        )
        for provider in self.registry.resolve(table, record):
            try:
                provider.invoke(method, provider_context)
            except StoreError:
                raise
            except Exception as e:
                logger.error(
                    "Provider '%s' failed in %s for %s:%s: %s",
                    provider.name,
                    method.value,
                    table,
                    uid,
                    e,
                )
                context.errors.append(
                    ProviderFailure(provider=provider.name, method=method.value, message=str(e))
                )

        return provider_context.record

    def resolve_record_uid(self, id: Any, context: OperationContext) -> int | str:
        """Real uid for ``id``; NEW tokens without a substitution stay as they are."""
        if is_placeholder_token(id):
            substituted = context.substitute_id(id)
            return substituted if substituted else id
        return to_int(id)

    def ensure_record_data_loaded(self, table: str, uid: int | str, record: Record) -> Record:
        """Reload an empty field bundle when the uid is known."""
        if isinstance(uid, int) and uid > 0 and not record:
            loaded = self.store.get(table, uid)
            if loaded:
                return dict(loaded)
        return record
