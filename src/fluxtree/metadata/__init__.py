"""Table configuration loaded from YAML metadata."""

from fluxtree.metadata.loader import FieldDefinition, TableConfig, TableLoader

__all__ = ["FieldDefinition", "TableConfig", "TableLoader"]
