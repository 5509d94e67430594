"""Load table configuration (the TCA subset the tree engine needs) from YAML files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class FieldDefinition:
    name: str
    type: str = "string"
    default: Any = None
    primary_key: bool = False


@dataclass
class TableConfig:
    name: str
    fields: list[FieldDefinition]
    type_field: str = "CType"
    label_field: str | None = None
    primary_key: str = "uid"

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def has_field(self, name: str) -> bool:
        return name in self.field_names


class TableLoader:
    """Loads block and table definitions from YAML files.

    Layout::

        metadata/
            blocks/*.yaml   # block: versioning, fields: [...]
            tables/*.yaml   # table: tt_content, includes: [{block: versioning}], fields: [...]
    """

    def __init__(self, metadata_path: Path):
        self.metadata_path = metadata_path
        self.tables: dict[str, TableConfig] = {}
        self.blocks: dict[str, list[dict]] = {}

    def load_all(self) -> None:
        """Load all blocks and tables."""
        self._load_blocks()
        self._load_tables()

    def list_tables(self) -> list[str]:
        return sorted(self.tables.keys())

    def get_table(self, name: str) -> TableConfig | None:
        return self.tables.get(name)

    def _load_blocks(self) -> None:
        """Load reusable field blocks."""
        blocks_path = self.metadata_path / "blocks"
        if not blocks_path.exists():
            return

        for yaml_file in sorted(blocks_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "block" in data:
                    self.blocks[data["block"]] = data.get("fields", [])

    def _load_tables(self) -> None:
        tables_path = self.metadata_path / "tables"
        if not tables_path.exists():
            return

        for yaml_file in sorted(tables_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "table" in data:
                    table = self._resolve_table(data)
                    self.tables[table.name] = table

    def _resolve_table(self, data: dict) -> TableConfig:
        """Resolve a table definition, expanding blocks."""
        name = data["table"]
        if not str(name).replace("_", "").isalnum():
            raise ValueError(f"Table name '{name}' must be alphanumeric with underscores")

        all_fields: list[dict] = [{"name": "uid", "type": "int", "primaryKey": True}]

        for include in data.get("includes", []):
            block_name = include["block"]
            if block_name not in self.blocks:
                raise ValueError(f"Table '{name}' includes unknown block '{block_name}'")
            all_fields.extend(block_field.copy() for block_field in self.blocks[block_name])

        all_fields.extend(data.get("fields", []))

        fields: list[FieldDefinition] = []
        seen: set[str] = set()
        for field_data in all_fields:
            definition = self._resolve_field(field_data)
            # Later definitions (table's own fields) never duplicate a column
            if definition.name in seen:
                continue
            seen.add(definition.name)
            fields.append(definition)

        return TableConfig(
            name=name,
            fields=fields,
            type_field=data.get("typeField", "CType"),
            label_field=data.get("labelField"),
        )

    def _resolve_field(self, data: dict) -> FieldDefinition:
        name = data["name"]
        if not str(name).replace("_", "").isalnum():
            raise ValueError(f"Field name '{name}' must be alphanumeric with underscores")
        return FieldDefinition(
            name=name,
            type=data.get("type", "string"),
            default=data.get("default"),
            primary_key=data.get("primaryKey", False),
        )
