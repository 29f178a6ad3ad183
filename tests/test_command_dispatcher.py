"""Tests for CommandDispatcher."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from heyfocus.services.command_dispatcher import (
    DATA_CHANGED_EVENT,
    CommandDispatcher,
)
from heyfocus.services.event_bus import EventBus


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def dispatcher(machine, event_bus):
    return CommandDispatcher(machine, event_bus=event_bus)


class TestDispatch:
    """Tests for running commands by name."""

    def test_available_commands(self):
        assert CommandDispatcher.available_commands() == [
            "add_task",
            "clear_focus",
            "clear_logs",
            "complete_task",
            "delete_task",
            "edit_task",
            "load_data",
            "move_task",
            "set_focus",
            "undo_action",
        ]

    def test_add_task(self, dispatcher):
        result = dispatcher.dispatch("add_task", {"text": "a", "status": "active"})

        assert result.success is True
        assert result.data.tasks[0].text == "a"

    def test_full_flow(self, dispatcher):
        dispatcher.dispatch("add_task", {"text": "a", "status": "active"})
        dispatcher.dispatch("add_task", {"text": "b", "status": "later"})
        dispatcher.dispatch("set_focus", {"id": 0})
        dispatcher.dispatch("edit_task", {"id": 1, "text": "b2"})
        dispatcher.dispatch("move_task", {"id": 1, "newStatus": "active"})
        result = dispatcher.dispatch("complete_task", {"id": 0})

        assert result.success
        assert [(t.text, t.is_focus) for t in result.data.tasks] == [("b2", True)]

    def test_move_task_aliases(self, dispatcher):
        dispatcher.dispatch("add_task", {"text": "a", "status": "active"})
        for key, status in (("new_status", "later"), ("newStatus", "active"), ("status", "later")):
            result = dispatcher.dispatch("move_task", {"id": 0, key: status})
            assert result.data.tasks[0].status.value == status

    def test_string_id_accepted(self, dispatcher):
        dispatcher.dispatch("add_task", {"text": "a", "status": "active"})
        assert dispatcher.dispatch("delete_task", {"id": "0"}).success

    def test_load_data_without_params(self, dispatcher):
        result = dispatcher.dispatch("load_data")
        assert result.success
        assert result.data.tasks == []


class TestErrors:
    """Rejected commands become results, not exceptions."""

    def test_domain_error(self, dispatcher):
        result = dispatcher.dispatch("complete_task", {"id": 9})

        assert result.success is False
        assert result.error == "Task not found"
        assert result.error_kind == "not_found"
        assert result.data is None

    def test_capacity_error_message(self, dispatcher):
        for n in range(5):
            dispatcher.dispatch("add_task", {"text": str(n), "status": "active"})
        result = dispatcher.dispatch("add_task", {"text": "f", "status": "active"})

        assert result.error == "Cannot have more than 5 active tasks"
        assert result.error_kind == "capacity_exceeded"

    def test_nothing_to_undo(self, dispatcher):
        result = dispatcher.dispatch("undo_action")
        assert result.error == "Nothing to undo"

    def test_not_active(self, dispatcher):
        dispatcher.dispatch("add_task", {"text": "a", "status": "later"})
        result = dispatcher.dispatch("set_focus", {"id": 0})
        assert result.error == "Task not found or not active"
        assert result.error_kind == "not_active"

    def test_unknown_command(self, dispatcher):
        result = dispatcher.dispatch("drop_tables")
        assert result.error_kind == "bad_request"
        assert "drop_tables" in result.error

    @pytest.mark.parametrize(
        "command,params",
        [
            ("add_task", {"status": "active"}),
            ("add_task", {"text": "a"}),
            ("add_task", {"text": 5, "status": "active"}),
            ("edit_task", {"id": 0}),
            ("set_focus", {}),
            ("set_focus", {"id": "zero"}),
            ("set_focus", {"id": True}),
            ("set_focus", {"id": -1}),
            ("set_focus", {"id": 1.9}),
            ("set_focus", {"id": 1.0}),
            ("set_focus", {"id": "1.0"}),
            ("move_task", {"id": 0}),
        ],
    )
    def test_bad_params(self, dispatcher, command, params):
        result = dispatcher.dispatch(command, params)
        assert result.success is False
        assert result.error_kind == "bad_request"

    def test_float_id_does_not_mutate(self, dispatcher):
        dispatcher.dispatch("add_task", {"text": "a", "status": "active"})
        dispatcher.dispatch("add_task", {"text": "b", "status": "active"})

        result = dispatcher.dispatch("set_focus", {"id": 1.9})

        assert result.error_kind == "bad_request"
        assert dispatcher.dispatch("load_data").data.focused_task() is None

    def test_invalid_status(self, dispatcher):
        result = dispatcher.dispatch("add_task", {"text": "a", "status": "soon"})
        assert result.error_kind == "invalid_status"


class TestEvents:
    """Successful mutations are broadcast as data_changed."""

    def test_mutation_emits(self, dispatcher, event_bus):
        dispatcher.dispatch("add_task", {"text": "a", "status": "active"})

        received = event_bus.get_events_since()

        assert len(received) == 1
        assert received[0].data["command"] == "add_task"
        assert received[0].data["data"]["tasks"][0]["isFocus"] is False

    def test_read_and_failure_do_not_emit(self, dispatcher, event_bus):
        dispatcher.dispatch("load_data")
        dispatcher.dispatch("undo_action")
        assert event_bus.get_events_since() == []

    def test_emit_payload(self, machine):
        bus = MagicMock()
        CommandDispatcher(machine, event_bus=bus).dispatch("add_task", {"text": "a", "status": "later"})

        bus.emit.assert_called_once()
        name, payload = bus.emit.call_args.args
        assert name == DATA_CHANGED_EVENT
        assert payload["command"] == "add_task"
        assert payload["data"]["next_id"] == 1

    def test_concurrent_commands_emit_in_commit_order(self, machine):
        """Each event carries a later post-state than the one before it."""

        class SlowBus(EventBus):
            def emit(self, event_type, data):
                time.sleep(0.001)
                return super().emit(event_type, data)

        bus = SlowBus(buffer_size=200)
        dispatcher = CommandDispatcher(machine, event_bus=bus)

        def add_many():
            for n in range(20):
                dispatcher.dispatch("add_task", {"text": str(n), "status": "later"})

        threads = [threading.Thread(target=add_many) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        events = bus.get_events_since()
        assert len(events) == 120
        assert [e.data["data"]["next_id"] for e in events] == list(range(1, 121))

    def test_without_event_bus(self, machine):
        result = CommandDispatcher(machine).dispatch("add_task", {"text": "a", "status": "active"})
        assert result.success

