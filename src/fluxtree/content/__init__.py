"""Moving nested content elements."""

from fluxtree.content.coordinator import MoveCoordinator, MoveOutcome
from fluxtree.content.service import ContentService
from fluxtree.content.targets import DropZone, MoveTarget, TargetKind

__all__ = [
    "ContentService",
    "DropZone",
    "MoveCoordinator",
    "MoveOutcome",
    "MoveTarget",
    "TargetKind",
]
