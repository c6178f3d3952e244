# =============================================================================
# tests/unit/test_settings_storage.py
# Unit Tests for storage, event bus, connection settings and offline simulation
# =============================================================================

import json

import pytest

from marina_core.errors import InvalidSettingError
from marina_core.offline import OfflineSimulationSwitch
from marina_core.state import ConnectionSettings, EventBus, InMemoryStorage, JsonFileStorage
from marina_core.state.settings import FREQUENCY_KEY

from conftest import event_names


class TestJsonFileStorage:
    """Durable settings file"""

    def test_set_persists_to_disk(self, tmp_path):
        path = tmp_path / "settings.json"
        storage = JsonFileStorage(path)
        storage.set("dataSource", "database")

        assert json.loads(path.read_text()) == {"dataSource": "database"}

    def test_second_instance_sees_writes(self, tmp_path):
        """Reads go to disk, not an in-memory copy"""
        path = tmp_path / "settings.json"
        first = JsonFileStorage(path)
        second = JsonFileStorage(path)

        first.set("mockDataOffline", "true")
        assert second.get("mockDataOffline") == "true"

        second.remove("mockDataOffline")
        assert first.get("mockDataOffline") is None

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        storage = JsonFileStorage(path)

        assert storage.get("dataSource") is None
        storage.set("dataSource", "mock")
        assert storage.snapshot() == {"dataSource": "mock"}

    def test_clear(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "settings.json")
        storage.set("a", "1")
        storage.clear()
        assert storage.snapshot() == {}


class TestEventBus:
    """In-process broadcast"""

    def test_publish_reaches_subscribers_of_that_name(self):
        bus = EventBus()
        received = []
        bus.subscribe("syncCompleted", received.append)
        bus.publish("syncFailed", {})
        bus.publish("syncCompleted", {"manual": True})

        assert [e.detail for e in received] == [{"manual": True}]

    def test_failing_subscriber_does_not_break_publisher(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("boom")

        bus.subscribe("dataSourceChanged", broken)
        bus.subscribe("dataSourceChanged", received.append)
        bus.publish("dataSourceChanged", {"new_source": "mock"})

        assert len(received) == 1

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe("x", received.append)
        bus.subscribe("x", received.append)
        assert bus.subscriber_count("x") == 1

        bus.unsubscribe("x", received.append)
        bus.publish("x")
        assert received == []

    def test_detail_is_copied(self):
        bus = EventBus()
        detail = {"a": 1}
        event = bus.publish("x", detail)
        detail["a"] = 2
        assert event.detail == {"a": 1}


class TestConnectionSettings:
    """connectionFrequency validation and persistence"""

    def test_default_interval(self, settings):
        assert settings.get_interval_seconds() == 5

    @pytest.mark.parametrize("seconds", [5, 10, 30, 60, 300])
    def test_allowed_intervals(self, settings, storage, seconds):
        settings.set_interval_seconds(seconds)
        assert settings.get_interval_seconds() == seconds
        assert storage.get(FREQUENCY_KEY) == str(seconds)

    def test_rejects_unsupported_interval(self, settings, storage):
        with pytest.raises(InvalidSettingError) as exc_info:
            settings.set_interval_seconds(7)
        assert exc_info.value.code == "SET_001"
        assert storage.get(FREQUENCY_KEY) is None

    def test_ignores_bad_stored_value(self):
        storage = InMemoryStorage({FREQUENCY_KEY: "fast"})
        assert ConnectionSettings(storage, EventBus()).get_interval_seconds() == 5
        storage.set(FREQUENCY_KEY, "7")
        assert ConnectionSettings(storage, EventBus()).get_interval_seconds() == 5

    def test_broadcasts_change(self, settings, bus):
        settings.set_interval_seconds(30)
        assert event_names(bus) == ["connectionFrequencyChanged"]
        assert bus.history[0].detail == {"interval_seconds": 30}

    def test_custom_default_must_be_allowed(self, storage, bus):
        with pytest.raises(InvalidSettingError):
            ConnectionSettings(storage, bus, default_interval=3)


class TestOfflineSimulationSwitch:
    """mockDataOffline flag"""

    def test_off_by_default(self, simulation):
        assert not simulation.is_simulated_offline()

    def test_toggle_persists_and_broadcasts(self, simulation, storage, bus):
        simulation.set_simulated_offline(True)

        assert storage.get("mockDataOffline") == "true"
        assert OfflineSimulationSwitch(storage, bus).is_simulated_offline()
        assert event_names(bus) == ["mockDataOfflineChanged"]
        assert bus.history[0].detail == {"is_offline": True}

    def test_does_not_touch_mode(self, simulation, mode_store, bus):
        simulation.set_simulated_offline(True)
        assert "dataSourceChanged" not in event_names(bus)
        assert mode_store.is_demo_mode
