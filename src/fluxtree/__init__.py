"""fluxtree: container tree consistency for DataHandler record operations.

Keeps content elements nested in columns of other content elements
consistent while the host engine copies, moves and localizes them:

- moves that would put a record inside its own subtree are rejected
- workspace placeholders and versions follow the live record's position
- configuration providers are called at every lifecycle point

Usage:
    from fluxtree.datahandler import OperationContext
    from fluxtree.datahandler.hooks import TceMainHooks

    hooks = TceMainHooks(store, tables=["tt_content", "pages"])
    result = hooks.process_cmdmap_pre_process("move", "tt_content", 10, -12, context)
"""

__version__ = "0.1.0"
