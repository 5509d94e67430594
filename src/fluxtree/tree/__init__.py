from fluxtree.tree.guard import TreeGuard

__all__ = ["TreeGuard"]
