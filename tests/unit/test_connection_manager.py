# =============================================================================
# tests/unit/test_connection_manager.py
# Unit Tests for ConnectivityProber
# =============================================================================

import asyncio

import pytest

from marina_core.datasource import DataSourceMode, ForcedMode
from marina_core.offline import ConnectivityProber, ConnectivityState

from conftest import HANG, OFFLINE_STATUS, ONLINE_STATUS, event_names, unavailable


@pytest.fixture
def prober(mode_store, simulation, settings, factory, bus, clock):
    return ConnectivityProber(
        mode_store=mode_store,
        simulation=simulation,
        settings=settings,
        provider_factory=factory,
        probe_timeout=0.1,
        restored_notice_seconds=0.05,
        bus=bus,
        clock=clock,
    )


def run_probes(prober, count):
    async def _run():
        return [await prober.probe() for _ in range(count)]
    return asyncio.run(_run())


class TestProbeOutcomes:
    """Single probes and the snapshots they produce"""

    def test_starts_unknown(self, prober):
        assert prober.state is ConnectivityState.UNKNOWN
        assert not prober.is_online
        assert not prober.is_offline

    def test_success_goes_online(self, prober, clock):
        snapshot = asyncio.run(prober.probe())

        assert snapshot.state is ConnectivityState.ONLINE
        assert snapshot.is_online
        assert snapshot.last_checked_at == clock.now
        assert snapshot.latency_ms == 25
        assert snapshot.last_sync.isoformat() == ONLINE_STATUS["lastSync"]
        assert snapshot.consecutive_failures == 0

    def test_provider_error_goes_offline(self, prober, provider):
        provider.script("get_sync_status", unavailable("Database offline"))
        snapshot = asyncio.run(prober.probe())

        assert snapshot.state is ConnectivityState.OFFLINE
        assert snapshot.error == "Database offline"
        assert not snapshot.simulated

    def test_backend_reporting_offline_is_failure(self, prober, provider):
        provider.script("get_sync_status", OFFLINE_STATUS)
        assert asyncio.run(prober.probe()).state is ConnectivityState.OFFLINE

    def test_timeout_yields_snapshot(self, prober, provider):
        """A hung probe is bounded and never raises"""
        provider.script("get_sync_status", HANG)
        snapshot = asyncio.run(prober.probe())

        assert snapshot.state is ConnectivityState.OFFLINE
        assert "timed out" in snapshot.error

    def test_unexpected_exception_yields_snapshot(self, prober, provider):
        provider.script("get_sync_status", RuntimeError("socket closed"))
        snapshot = asyncio.run(prober.probe())

        assert snapshot.state is ConnectivityState.OFFLINE
        assert snapshot.error == "socket closed"

    def test_consecutive_failures(self, prober, provider):
        provider.script("get_sync_status", unavailable(), unavailable(), unavailable(), ONLINE_STATUS)
        snapshots = run_probes(prober, 4)
        assert [s.consecutive_failures for s in snapshots] == [1, 2, 3, 0]

    def test_probe_follows_mode_store(self, prober, mode_store, factory):
        asyncio.run(prober.probe())
        mode_store.set_forced_mode(ForcedMode.DATABASE)
        asyncio.run(prober.probe())
        assert factory.modes == [DataSourceMode.MOCK, DataSourceMode.DATABASE]


class TestOverlappingProbes:
    """One check in flight at a time"""

    def test_second_caller_joins_in_flight_check(self, prober, provider):
        """A slow check never lands after a newer one"""
        provider.script("get_sync_status", ONLINE_STATUS, HANG, ONLINE_STATUS)

        async def scenario():
            await prober.probe()
            slow = asyncio.ensure_future(prober.probe())
            await asyncio.sleep(0)
            joined = await prober.probe()
            return joined, await slow, await prober.probe()

        joined, slow, latest = asyncio.run(scenario())

        assert joined is slow
        assert slow.state is ConnectivityState.OFFLINE
        assert latest.state is ConnectivityState.ONLINE
        assert prober.state is ConnectivityState.ONLINE
        assert provider.calls["get_sync_status"] == 3
        assert prober.probe_count == 3

    def test_cancelled_caller_leaves_check_running(self, prober, provider):
        provider.delay = 0.02

        async def scenario():
            waiter = asyncio.ensure_future(prober.probe())
            await asyncio.sleep(0)
            waiter.cancel()
            return await prober.probe()

        snapshot = asyncio.run(scenario())
        assert snapshot.state is ConnectivityState.ONLINE
        assert provider.calls["get_sync_status"] == 1

    def test_stop_monitoring_cancels_in_flight_check(self, prober, provider):
        provider.script("get_sync_status", HANG)
        prober.probe_timeout = 5

        async def scenario():
            prober.start_monitoring()
            await asyncio.sleep(0.01)
            await prober.stop_monitoring()

        asyncio.run(scenario())
        assert prober.state is ConnectivityState.UNKNOWN


class TestOfflineSimulation:
    """Simulation flag overrides the real connection"""

    def test_simulation_forces_offline_without_network(self, prober, simulation, provider):
        simulation.set_simulated_offline(True)
        snapshot = asyncio.run(prober.probe())

        assert snapshot.state is ConnectivityState.OFFLINE
        assert snapshot.simulated
        assert provider.calls["get_sync_status"] == 0

    def test_clearing_simulation_restores(self, prober, simulation, bus):
        simulation.set_simulated_offline(True)
        asyncio.run(prober.probe())
        simulation.set_simulated_offline(False)
        snapshot = asyncio.run(prober.probe())

        assert snapshot.state is ConnectivityState.ONLINE
        assert not snapshot.simulated
        assert event_names(bus).count("connectivityRestored") == 1


class TestTransitions:
    """State machine edges and the restored notice"""

    def test_restored_fires_once(self, prober, provider, bus):
        """fail, fail, success, success -> exactly one restored signal"""
        provider.script("get_sync_status", unavailable(), unavailable(), ONLINE_STATUS)
        transitions = []
        prober.register_callback(transitions.append)

        run_probes(prober, 4)

        assert [(t.previous, t.current) for t in transitions] == [
            (ConnectivityState.UNKNOWN, ConnectivityState.OFFLINE),
            (ConnectivityState.OFFLINE, ConnectivityState.ONLINE),
        ]
        assert [t.is_restored for t in transitions] == [False, True]
        assert event_names(bus).count("connectivityRestored") == 1
        assert event_names(bus).count("connectivityChanged") == 2

    def test_unknown_to_online_is_not_restored(self, prober, bus):
        asyncio.run(prober.probe())
        assert "connectivityRestored" not in event_names(bus)
        assert not prober.restored_notice_active

    def test_restored_notice_auto_clears(self, prober, provider):
        provider.script("get_sync_status", unavailable(), ONLINE_STATUS)

        async def scenario():
            await prober.probe()
            await prober.probe()
            active = prober.restored_notice_active
            await asyncio.sleep(0.15)
            return active, prober.restored_notice_active

        assert asyncio.run(scenario()) == (True, False)

    def test_going_offline_clears_notice(self, prober, provider):
        provider.script("get_sync_status", unavailable(), ONLINE_STATUS, unavailable())

        async def scenario():
            await prober.probe()
            await prober.probe()
            before = prober.restored_notice_active
            await prober.probe()
            return before, prober.restored_notice_active

        assert asyncio.run(scenario()) == (True, False)

    def test_failing_callback_is_isolated(self, prober):
        received = []

        def broken(transition):
            raise RuntimeError("boom")

        prober.register_callback(broken)
        prober.register_callback(received.append)
        asyncio.run(prober.probe())

        assert len(received) == 1

    def test_unregister_callback(self, prober):
        received = []
        prober.register_callback(received.append)
        prober.unregister_callback(received.append)
        asyncio.run(prober.probe())
        assert received == []


class TestCadence:
    """Probe interval and monitoring loop"""

    def test_interval_follows_settings_while_online(self, prober, settings):
        asyncio.run(prober.probe())
        settings.set_interval_seconds(30)
        assert prober.current_interval() == 30

    def test_offline_interval_is_at_least_ten_seconds(self, prober, provider, settings):
        provider.script("get_sync_status", unavailable())
        asyncio.run(prober.probe())
        assert prober.current_interval() == 10

        settings.set_interval_seconds(60)
        assert prober.current_interval() == 60

    def test_setting_change_wakes_loop(self, prober, settings):
        async def scenario():
            prober.start_monitoring()
            await asyncio.sleep(0.05)
            first = prober.probe_count
            settings.set_interval_seconds(10)
            await asyncio.sleep(0.05)
            second = prober.probe_count
            await prober.stop_monitoring()
            return first, second

        first, second = asyncio.run(scenario())
        assert first == 1
        assert second == 2

    def test_stop_monitoring_unsubscribes(self, prober, bus):
        async def scenario():
            prober.start_monitoring()
            await asyncio.sleep(0)
            subscribed = bus.subscriber_count("mockDataOfflineChanged")
            await prober.stop_monitoring()
            return subscribed

        assert asyncio.run(scenario()) == 1
        assert bus.subscriber_count("mockDataOfflineChanged") == 0
        assert not prober.is_monitoring

    def test_status_display(self, prober):
        asyncio.run(prober.probe())
        display = prober.get_status_display()
        assert display["status"] == "online"
        assert display["is_online"] is True
        assert display["check_interval"] == 5
        assert display["data_source"] == "mock"
