"""DataHandler integration: operation context and hook entry points.

Import hook objects from ``fluxtree.datahandler.hooks``; this package only
re-exports the context types so that lower layers can use them without
pulling in the hooks.
"""

from fluxtree.datahandler.context import (
    ClipboardCommand,
    FlashMessage,
    FlashMessageQueue,
    OperationContext,
    ProviderFailure,
    RequestData,
    Severity,
)

__all__ = [
    "ClipboardCommand",
    "FlashMessage",
    "FlashMessageQueue",
    "OperationContext",
    "ProviderFailure",
    "RequestData",
    "Severity",
]
