"""Where a record is being moved to."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fluxtree.core.types import to_int


class TargetKind(Enum):
    AFTER = "after"  # insert after a sibling record
    COLUMN = "column"  # first position of a page column
    PAGE = "page"  # into a page, details from request parameters
    IGNORED = "ignored"  # value the tree engine does not understand


@dataclass(frozen=True)
class MoveTarget:
    """A parsed move destination.

    The host encodes destinations in a single ``relative_to`` value: a
    negative integer means "after the record with uid abs(value)", a
    non-negative one a page id. Column moves arrive through a separate hook
    and carry the page column number instead.
    """

    kind: TargetKind
    value: int = 0
    parameters: list[Any] = field(default_factory=list)

    @classmethod
    def after(cls, uid: int, parameters: list[Any] | None = None) -> "MoveTarget":
        return cls(TargetKind.AFTER, abs(to_int(uid)), list(parameters or []))

    @classmethod
    def column(cls, column: int) -> "MoveTarget":
        return cls(TargetKind.COLUMN, to_int(column))

    @classmethod
    def page(cls, pid: int, parameters: list[Any] | None = None) -> "MoveTarget":
        return cls(TargetKind.PAGE, to_int(pid), list(parameters or []))

    @classmethod
    def from_relative_to(cls, relative_to: Any, parameters: list[Any] | None = None) -> "MoveTarget":
        """Parse a command map ``relative_to`` value."""
        # Grid extensions pass composite values like "12x3" the tree engine must leave alone
        if isinstance(relative_to, str) and "x" in relative_to:
            return cls(TargetKind.IGNORED, parameters=list(parameters or []))
        value = to_int(relative_to)
        if value < 0:
            return cls.after(-value, parameters)
        return cls.page(value, parameters)

    @property
    def checks_cycles(self) -> bool:
        """Column targets always leave the container tree; they cannot form a cycle."""
        return self.kind in (TargetKind.AFTER, TargetKind.PAGE)


@dataclass(frozen=True)
class DropZone:
    """A page-module drop zone descriptor.

    Format: ``colpos-<column>-page-<pid>-<token>-<position>-<parentUid>-<area>``
    """

    column: int
    pid: int
    position: str = ""
    parent_uid: int = 0
    area: str = ""

    @classmethod
    def parse(cls, descriptor: Any) -> "DropZone | None":
        if not isinstance(descriptor, str):
            return None
        parts = [part.strip() for part in descriptor.split("-")]
        parts += [""] * (8 - len(parts))
        prefix, column, page_prefix, pid, _, position, parent_uid, area = parts[:8]
        if prefix != "colpos" or page_prefix != "page":
            return None
        return cls(
            column=to_int(column),
            pid=to_int(pid),
            position=position,
            parent_uid=to_int(parent_uid),
            area=area,
        )
