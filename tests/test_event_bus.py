"""Tests for the event bus."""

from clockwork.state import EventBus, EventType, get_event_bus, reset_event_bus


class TestSubscription:

    def test_handler_receives_event(self):
        bus = EventBus()
        seen = []
        bus.on(EventType.ITEM_GAINED, seen.append)
        bus.emit(EventType.ITEM_GAINED, item="crown", number=2)
        assert seen[0].data == {"item": "crown", "number": 2}

    def test_duplicate_subscription_ignored(self):
        bus = EventBus()
        seen = []
        bus.on(EventType.ITEM_GAINED, seen.append)
        bus.on(EventType.ITEM_GAINED, seen.append)
        bus.emit(EventType.ITEM_GAINED)
        assert len(seen) == 1
        assert bus.listener_count(EventType.ITEM_GAINED) == 1

    def test_off(self):
        bus = EventBus()
        seen = []
        bus.on(EventType.ITEM_GAINED, seen.append)
        bus.off(EventType.ITEM_GAINED, seen.append)
        bus.off(EventType.ITEM_LOST, seen.append)
        bus.emit(EventType.ITEM_GAINED)
        assert seen == []

    def test_failing_handler_does_not_stop_others(self):
        """A handler that raises is logged; the next still runs."""
        bus = EventBus()
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        bus.on(EventType.ITEM_GAINED, broken)
        bus.on(EventType.ITEM_GAINED, seen.append)
        bus.emit(EventType.ITEM_GAINED)
        assert len(seen) == 1


class TestHistory:

    def test_filtered(self):
        bus = EventBus()
        bus.emit(EventType.ITEM_GAINED)
        bus.emit(EventType.ITEM_LOST)
        assert len(bus.get_history()) == 2
        assert [e.type for e in bus.get_history(EventType.ITEM_LOST)] == [EventType.ITEM_LOST]

    def test_limit(self):
        bus = EventBus()
        for n in range(150):
            bus.emit(EventType.TIME_ADVANCED, seconds=n)
        history = bus.get_history()
        assert len(history) == 100
        assert history[0].data["seconds"] == 50

    def test_clear(self):
        bus = EventBus()
        bus.on(EventType.ITEM_GAINED, lambda e: None)
        bus.emit(EventType.ITEM_GAINED)
        bus.clear()
        assert bus.get_history() == []
        assert bus.listener_count(EventType.ITEM_GAINED) == 0


class TestGlobalBus:

    def test_singleton(self):
        reset_event_bus()
        assert get_event_bus() is get_event_bus()

    def test_reset(self):
        first = get_event_bus()
        reset_event_bus()
        assert get_event_bus() is not first


class TestGameEvents:
    """Events carry the save slot and simulated time."""

    def test_stamped_with_game(self, game, bus):
        game.run("gainItem", {"item": "crown"})
        event = bus.get_history(EventType.ITEM_GAINED)[-1]
        assert event.save_id == "test"
        assert event.game_time == game.time

    def test_location_change(self, game, bus):
        game.run("move", {"location": "default"})
        event = bus.get_history(EventType.LOCATION_CHANGED)[-1]
        assert (event.data["before"], event.data["after"]) == ("station", "default")

    def test_same_location_is_silent(self, game, bus):
        game.run("move", {"location": "station"})
        assert bus.get_history(EventType.LOCATION_CHANGED) == []

    def test_npc_moved(self, game, bus):
        game.run("timeLapse", {"untilTime": 18.5})
        moves = [e.data for e in bus.get_history(EventType.NPC_MOVED)]
        assert {"npc": "tour-guide", "before": "station", "after": None} in moves
