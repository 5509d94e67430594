"""Tests for YAML table metadata loading."""

import pytest
import yaml

from fluxtree.metadata.loader import TableLoader


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))


class TestShippedMetadata:
    def test_lists_tables(self, tables):
        assert tables.list_tables() == ["pages", "tt_content"]

    def test_content_table_has_tree_fields(self, tables):
        content = tables.get_table("tt_content")
        for name in (
            "pid",
            "sorting",
            "colPos",
            "tx_flux_parent",
            "tx_flux_column",
            "t3ver_oid",
            "t3ver_wsid",
            "t3ver_state",
            "t3ver_move_id",
            "sys_language_uid",
            "l18n_parent",
        ):
            assert content.has_field(name), name

    def test_uid_is_first_and_primary(self, tables):
        content = tables.get_table("tt_content")
        assert content.field_names[0] == "uid"
        assert content.fields[0].primary_key
        assert content.primary_key == "uid"

    def test_type_and_label_fields(self, tables):
        content = tables.get_table("tt_content")
        pages = tables.get_table("pages")
        assert (content.type_field, content.label_field) == ("CType", "header")
        assert (pages.type_field, pages.label_field) == ("doktype", "title")

    def test_unknown_table(self, tables):
        assert tables.get_table("sys_file") is None


class TestTableLoader:
    def test_blocks_are_expanded_in_order(self, tmp_path):
        write_yaml(tmp_path / "blocks" / "system.yaml", {"block": "system", "fields": [{"name": "pid", "type": "int"}]})
        write_yaml(
            tmp_path / "tables" / "news.yaml",
            {"table": "news", "includes": [{"block": "system"}], "fields": [{"name": "title"}]},
        )

        loader = TableLoader(tmp_path)
        loader.load_all()
        news = loader.get_table("news")

        assert news.field_names == ["uid", "pid", "title"]
        assert news.fields[2].type == "string"
        assert news.type_field == "CType"

    def test_duplicate_field_keeps_first_definition(self, tmp_path):
        write_yaml(tmp_path / "blocks" / "system.yaml", {"block": "system", "fields": [{"name": "pid", "type": "int", "default": 0}]})
        write_yaml(
            tmp_path / "tables" / "news.yaml",
            {
                "table": "news",
                "includes": [{"block": "system"}],
                "fields": [{"name": "pid", "type": "string"}, {"name": "uid", "type": "string"}],
            },
        )

        loader = TableLoader(tmp_path)
        loader.load_all()
        news = loader.get_table("news")

        assert news.field_names == ["uid", "pid"]
        assert news.fields[1].type == "int"

    def test_unknown_block_raises(self, tmp_path):
        write_yaml(tmp_path / "tables" / "news.yaml", {"table": "news", "includes": [{"block": "nope"}]})
        with pytest.raises(ValueError, match="unknown block 'nope'"):
            TableLoader(tmp_path).load_all()

    @pytest.mark.parametrize(
        "data",
        [
            {"table": "news; DROP", "fields": []},
            {"table": "news", "fields": [{"name": 'bad"name'}]},
        ],
    )
    def test_unsafe_names_are_rejected(self, tmp_path, data):
        write_yaml(tmp_path / "tables" / "news.yaml", data)
        with pytest.raises(ValueError, match="alphanumeric"):
            TableLoader(tmp_path).load_all()

    def test_missing_directories_load_nothing(self, tmp_path):
        loader = TableLoader(tmp_path)
        loader.load_all()
        assert loader.list_tables() == []

    def test_files_without_table_key_are_skipped(self, tmp_path):
        write_yaml(tmp_path / "tables" / "notes.yaml", {"comment": "not a table"})
        loader = TableLoader(tmp_path)
        loader.load_all()
        assert loader.tables == {}
