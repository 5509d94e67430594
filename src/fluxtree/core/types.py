"""Record field names, version states and id helpers shared by all layers."""

from enum import IntEnum
from typing import Any

# A record row as handed around by the DataHandler: field name -> scalar value
Record = dict[str, Any]

CONTENT_TABLE = "tt_content"

# colPos value marking a content element that lives inside a container column
COLPOS_FLUXCONTENT = 18181

PARENT_FIELD = "tx_flux_parent"
COLUMN_FIELD = "tx_flux_column"
SORTING_FIELD = "sorting"
COLPOS_FIELD = "colPos"

# Fields written by a move; nothing else is ever persisted by the tree engine
POSITION_FIELDS = (COLPOS_FIELD, PARENT_FIELD, COLUMN_FIELD, SORTING_FIELD)

# Projection used when looking up the most recent workspace version
VERSION_FIELDS = ("uid", COLPOS_FIELD, PARENT_FIELD, COLUMN_FIELD, SORTING_FIELD, "t3ver_move_id")


class VersionState(IntEnum):
    """Values of the ``t3ver_state`` column."""

    DEFAULT = 0
    NEW_PLACEHOLDER = 1
    DELETE_PLACEHOLDER = 2
    MOVE_PLACEHOLDER = 3
    MOVE_POINTER = 4


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a loosely typed host value (int, numeric str, None) to int."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def is_placeholder_token(id: Any) -> bool:
    """True for temporary ids such as ``NEW5f3a`` assigned within a batch."""
    return isinstance(id, str) and "NEW" in id


def lookup(mapping: dict, key: Any) -> Any:
    """Look up an id-keyed host map regardless of int/str key spelling."""
    if key in mapping:
        return mapping[key]
    alternate = str(key) if isinstance(key, int) else to_int(key, default=-1)
    return mapping.get(alternate)


# Column storage types for the reference SQL adapters
STORAGE_TYPES: dict[str, str] = {
    "int": "INTEGER",
    "boolean": "INTEGER",
    "string": "TEXT",
    "text": "TEXT",
    "float": "REAL",
}


def get_storage_type(field_type: str) -> str:
    """Get the SQL storage type for a field type, TEXT when unknown."""
    return STORAGE_TYPES.get(field_type, "TEXT")
