"""Tests for the DataHandler hook entry points."""

import json

import pytest

from conftest import snapshot
from fluxtree.core.types import COLPOS_FLUXCONTENT
from fluxtree.datahandler.context import OperationContext, RequestData
from fluxtree.datahandler.hooks import CommandResult, TceMainHooks
from fluxtree.providers import (
    CacheSweepState,
    ConfigurationProvider,
    ProviderMethod,
    ProviderRegistry,
)


class RecordingProvider(ConfigurationProvider):
    table = "tt_content"

    def __init__(self):
        self.calls = []

    def invoke(self, method, context):
        self.calls.append((method, context.id, dict(context.arguments)))
        super().invoke(method, context)


@pytest.fixture
def hooks(store):
    return TceMainHooks(store, tables=["tt_content", "pages"])


@pytest.fixture
def recorder():
    instance = RecordingProvider()
    ProviderRegistry.register(instance)
    return instance


def paste(target="1", update=None):
    """Request of a clipboard paste into ``target``."""
    clipboard = {"paste": f"tt_content|{target}"}
    if update is not None:
        clipboard["update"] = update
    return RequestData(query={"CB": clipboard})


# =============================================================================
# cmdmap pre-process
# =============================================================================


class TestCmdmapPreProcess:
    def test_pasting_into_own_child_is_cancelled(self, hooks, store, nested, recorder):
        context = OperationContext(
            cmdmap={"tt_content": {10: {"move": -13}}}, request=paste("-13")
        )
        before = snapshot(store)

        result = hooks.process_cmdmap_pre_process("move", "tt_content", 10, -13, context)

        assert result.cancelled
        assert snapshot(store) == before
        assert context.cmdmap["tt_content"] == {}
        assert len(context.messages.errors()) == 1
        assert recorder.calls == []

    def test_paste_with_update_into_own_child_is_cancelled(self, hooks, nested):
        context = OperationContext(request=paste(update={"tx_flux_parent": 13}))

        result = hooks.process_cmdmap_pre_process("move", "tt_content", 10, 1, context)

        assert result.cancelled

    def test_valid_paste_merges_clipboard_update(self, hooks, store, nested, recorder):
        context = OperationContext(request=paste(update={"header": "pasted"}))

        result = hooks.process_cmdmap_pre_process("move", "tt_content", 30, -12, context)

        assert not result.cancelled
        assert result.command == "move"
        assert result.record["header"] == "pasted"
        assert store.get("tt_content", 30)["tx_flux_parent"] == 0
        method, uid, arguments = recorder.calls[0]
        assert method is ProviderMethod.PRE_PROCESS_COMMAND
        assert uid == 30
        assert arguments["relative_to"] == -12

    def test_copy_paste_is_not_validated(self, hooks, nested):
        context = OperationContext(request=paste("-13"))
        result = hooks.process_cmdmap_pre_process("copy", "tt_content", 10, -13, context)
        assert not result.cancelled
        assert len(context.messages) == 0

    def test_providers_may_rewrite_command(self, hooks, nested):
        class DeleteInsteadProvider(ConfigurationProvider):
            table = "tt_content"

            def pre_process_command(self, context):
                context.arguments["command"] = "delete"
                context.arguments["relative_to"] = 0

        ProviderRegistry.register(DeleteInsteadProvider())

        result = hooks.process_cmdmap_pre_process("move", "tt_content", 30, -12, OperationContext())

        assert result == CommandResult(
            command="delete", relative_to=0, record=result.record
        )


# =============================================================================
# cmdmap post-process
# =============================================================================


class TestCmdmapPostProcess:
    def test_pasted_move_is_performed(self, hooks, store, nested, recorder):
        context = OperationContext(request=paste("-12"))

        result = hooks.process_cmdmap_post_process("move", "tt_content", 30, -12, context)

        stored = store.get("tt_content", 30)
        assert stored["tx_flux_parent"] == 11
        assert stored["colPos"] == COLPOS_FLUXCONTENT
        assert result.record["tx_flux_parent"] == 11
        assert recorder.calls[0][0] is ProviderMethod.POST_PROCESS_COMMAND

    def test_pasted_copy_moves_the_copy(self, hooks, store, nested, add):
        add(31, sorting=768)
        context = OperationContext(
            copy_mapping={"tt_content": {30: 31}}, request=paste("-12")
        )

        hooks.process_cmdmap_post_process("copy", "tt_content", 30, -12, context)

        assert store.get("tt_content", 31)["tx_flux_parent"] == 11
        assert store.get("tt_content", 30)["tx_flux_parent"] == 0

    def test_pasted_copy_without_mapping_is_skipped(self, hooks, store, nested, recorder, caplog):
        context = OperationContext(request=paste("-12"))
        before = snapshot(store)

        result = hooks.process_cmdmap_post_process("copy", "tt_content", 30, -12, context)

        assert not result.cancelled
        assert snapshot(store) == before
        assert "No copy of tt_content:30" in caplog.text
        assert len(recorder.calls) == 1

    def test_pasted_move_into_own_child_is_cancelled(self, hooks, store, nested):
        context = OperationContext(request=paste("-13"))
        before = snapshot(store)

        result = hooks.process_cmdmap_post_process("move", "tt_content", 10, -13, context)

        assert result.cancelled
        assert snapshot(store) == before

    def test_localize_positions_translation(self, hooks, store, nested, add):
        add(41, sys_language_uid=1, l18n_parent=11)
        add(70, sys_language_uid=1, l18n_parent=12)
        context = OperationContext(copy_mapping={"tt_content": {12: 70}})

        hooks.process_cmdmap_post_process("localize", "tt_content", 12, 1, context)

        stored = store.get("tt_content", 70)
        assert stored["tx_flux_parent"] == 41
        assert stored["colPos"] == COLPOS_FLUXCONTENT

    def test_other_tables_only_reach_providers(self, hooks, store, nested):
        class PagesProvider(RecordingProvider):
            table = "pages"

        pages = PagesProvider()
        ProviderRegistry.register(pages)
        store.insert("pages", {"uid": 1, "title": "Home"})
        before = snapshot(store)

        hooks.process_cmdmap_post_process(
            "move", "pages", 1, -2, OperationContext(request=paste("-12"))
        )

        assert snapshot(store) == before
        assert [call[0] for call in pages.calls] == [ProviderMethod.POST_PROCESS_COMMAND]


# =============================================================================
# datamap
# =============================================================================


class TestDatamapHooks:
    def test_pre_process_applies_override_parent(self, hooks, recorder):
        incoming = {"header": "new"}
        context = OperationContext(
            request=RequestData(query={"overrideVals": {"tt_content": {"tx_flux_parent": "11"}}})
        )

        result = hooks.process_datamap_pre_process_field_array(incoming, "tt_content", "NEW1", context)

        assert result is incoming
        assert incoming["tx_flux_parent"] == 11
        assert incoming["colPos"] == COLPOS_FLUXCONTENT
        assert recorder.calls[0][0] is ProviderMethod.PRE_PROCESS_RECORD

    def test_pre_process_keeps_provider_changes(self, hooks):
        class DefaultHeaderProvider(ConfigurationProvider):
            table = "tt_content"

            def pre_process_record(self, context):
                context.record.setdefault("header", "Untitled")

        ProviderRegistry.register(DefaultHeaderProvider())
        incoming = {"bodytext": "x"}

        hooks.process_datamap_pre_process_field_array(incoming, "tt_content", 5, OperationContext())

        assert incoming == {"bodytext": "x", "header": "Untitled"}

    def test_post_process_passes_status(self, hooks, recorder):
        fields = {"header": "changed"}

        hooks.process_datamap_post_process_field_array(
            "update", "tt_content", 5, fields, OperationContext()
        )

        method, uid, arguments = recorder.calls[0]
        assert method is ProviderMethod.POST_PROCESS_RECORD
        assert uid == 5
        assert arguments["status"] == "update"

    def test_new_record_is_attached_to_container(self, hooks, store, nested, add, recorder):
        add(31, tx_flux_parent=11)
        fields = {"tx_flux_parent": 11, "colPos": 0}
        context = OperationContext(substituted_ids={"NEW1": 31})

        hooks.process_datamap_after_database_operations("new", "tt_content", "NEW1", fields, context)

        assert store.get("tt_content", 31)["colPos"] == COLPOS_FLUXCONTENT
        assert fields["colPos"] == COLPOS_FLUXCONTENT
        method, uid, _ = recorder.calls[0]
        assert method is ProviderMethod.POST_PROCESS_DATABASE_OPERATION
        assert uid == 31

    def test_updated_record_is_left_alone(self, hooks, store, add):
        add(31, tx_flux_parent=11, colPos=0)

        hooks.process_datamap_after_database_operations(
            "update", "tt_content", 31, {"tx_flux_parent": 11}, OperationContext()
        )

        assert store.get("tt_content", 31)["colPos"] == 0


# =============================================================================
# Move hooks
# =============================================================================


class TestMoveRecordFirstElement:
    def test_requested_record_moves_to_column(self, hooks, store, nested):
        context = OperationContext(
            request=RequestData(query={"data": {"tt_content": {"12": {"colPos": "2"}}}})
        )
        row = store.get("tt_content", 12)

        hooks.move_record_first_element_post_process("tt_content", 12, 1, {}, row, context)

        stored = store.get("tt_content", 12)
        assert stored["colPos"] == 2
        assert stored["tx_flux_parent"] == 0
        assert stored["tx_flux_column"] == ""

    def test_children_fired_for_are_skipped(self, hooks, store, nested):
        context = OperationContext(
            request=RequestData(query={"data": {"tt_content": {"12": {"colPos": "2"}}}})
        )
        before = store.get("tt_content", 13)

        hooks.move_record_first_element_post_process(
            "tt_content", 13, 1, {}, dict(before), context
        )

        assert store.get("tt_content", 13) == before

    def test_placeholder_is_found_through_original_uid(self, hooks, store, nested, add):
        add(50, t3ver_state=3, t3ver_move_id=12, t3ver_wsid=1)
        context = OperationContext(
            workspace=1,
            request=RequestData(query={"data": {"tt_content": {12: {"colPos": 4}}}}),
        )

        hooks.move_record_first_element_post_process(
            "tt_content", 50, 1, {}, store.get("tt_content", 50), context
        )

        assert store.get("tt_content", 50)["colPos"] == 4


class TestMoveRecordAfterAnotherElement:
    def test_record_takes_sibling_position(self, hooks, store, nested):
        update_fields = {"pid": 1, "sorting": 99}

        result = hooks.move_record_after_another_element_post_process(
            "tt_content", 30, 1, -12, {}, update_fields, OperationContext()
        )

        assert result is update_fields
        assert update_fields["uid"] == 30
        assert update_fields["tx_flux_parent"] == 11
        assert update_fields["tx_flux_column"] == "main"
        assert update_fields["colPos"] == COLPOS_FLUXCONTENT
        assert update_fields["sorting"] == 257
        assert store.get("tt_content", 30)["sorting"] == 257

    def test_drop_zone_from_request_body(self, hooks, store, nested):
        body = json.dumps(
            {"method": "moveContentElement", "data": {"target": "colpos-0-page-1-x-top-11-side"}}
        )
        update_fields = {"pid": 1}

        hooks.move_record_after_another_element_post_process(
            "tt_content", 30, 1, 1, {}, update_fields, OperationContext(request=RequestData(body=body))
        )

        assert update_fields["tx_flux_parent"] == 11
        assert update_fields["tx_flux_column"] == "side"
        assert update_fields["sorting"] == 0

    def test_move_into_own_child_is_rejected(self, hooks, store, nested):
        context = OperationContext(cmdmap={"tt_content": {"10": {"move": -13}}})
        update_fields = {"pid": 1, "sorting": 99}
        before = snapshot(store)

        result = hooks.move_record_after_another_element_post_process(
            "tt_content", 10, 1, -13, {}, update_fields, context
        )

        assert result == {"pid": 1, "sorting": 99, "uid": 10}
        assert snapshot(store) == before
        assert context.cmdmap["tt_content"] == {}
        assert len(context.messages.errors()) == 1

    def test_other_tables_are_untouched(self, hooks):
        update_fields = {"pid": 1}
        result = hooks.move_record_after_another_element_post_process(
            "pages", 3, 1, -2, {}, update_fields, OperationContext()
        )
        assert result == {"pid": 1}


# =============================================================================
# Cache clearing
# =============================================================================


class TestClearCacheCommand:
    def test_shared_state_clears_once(self, store):
        cleared = []

        class CacheProvider(ConfigurationProvider):
            table = "pages"

            def clear_cache_command(self, command):
                cleared.append(command)

        ProviderRegistry.register(CacheProvider())
        state = CacheSweepState()
        first = TceMainHooks(store, tables=["tt_content", "pages"], cache_state=state)
        second = TceMainHooks(store, tables=["tt_content", "pages"], cache_state=state)

        first.clear_cache_command("all")
        second.clear_cache_command("pages")

        assert cleared == ["all"]

    def test_separate_states_clear_separately(self, store):
        cleared = []

        class CacheProvider(ConfigurationProvider):
            table = "tt_content"

            def clear_cache_command(self, command):
                cleared.append(command)

        ProviderRegistry.register(CacheProvider())

        TceMainHooks(store).clear_cache_command("all")
        TceMainHooks(store).clear_cache_command("all")

        assert cleared == ["all", "all"]
