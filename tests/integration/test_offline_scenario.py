# =============================================================================
# tests/integration/test_offline_scenario.py
# Integration Tests for outage and recovery (Runtime -> Prober -> Orchestrator -> HTTP)
# =============================================================================

import asyncio
from collections import Counter

import httpx
import pytest

from marina_core.config import MarinaConfig
from marina_core.datasource import DataSourceMode, ForcedMode
from marina_core.errors import ErrorKind
from marina_core.offline import ConnectivityState, Feed
from marina_core.runtime import MarinaRuntime
from marina_core.state import EventBus, InMemoryStorage

from conftest import event_names


class FakeBackend:
    """Marina backend that can be switched off and on"""

    def __init__(self):
        self.up = False
        self.requests = Counter()

    def __call__(self, request):
        path = request.url.path
        self.requests[path] += 1
        if not self.up:
            raise httpx.ConnectError("connection refused", request=request)

        if path == "/api/sync/status":
            return httpx.Response(200, json={"success": True, "data": {"isOnline": True, "serverLatency": 12}})
        if path == "/api/sync/operations":
            return httpx.Response(200, json={"success": True, "operations": [{"id": 7, "status": "PENDING"}]})
        if path == "/api/sync/notifications":
            return httpx.Response(200, json={"success": True, "notifications": []})
        if path == "/api/contracts":
            return httpx.Response(200, json={"contracts": [{"id": "c-live"}]})
        return httpx.Response(404, json={})


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def runtime(backend):
    bus = EventBus()
    bus.keep_history = True
    config = MarinaConfig(
        api_base_url="http://marina.test",
        probe_timeout=0.5,
        feed_timeout=0.5,
        restored_notice_seconds=0.05,
    )
    return MarinaRuntime(
        config=config,
        storage=InMemoryStorage(),
        bus=bus,
        transport=httpx.MockTransport(backend),
    )


class TestOutageAndRecovery:
    """
    Three failed probes followed by recovery.

    Expected flow:
    1. Probes fail -> OFFLINE, timer ticks suspended
    2. Backend returns -> OFFLINE -> ONLINE, restored notice shown
    3. Exactly one immediate tick refreshes all feeds
    4. Notice clears on its own
    """

    def test_recovery_triggers_exactly_one_tick(self, runtime, backend):
        runtime.mode_store.set_forced_mode(ForcedMode.DATABASE)

        async def scenario():
            for _ in range(3):
                snapshot = await runtime.prober.probe()
            assert snapshot.state is ConnectivityState.OFFLINE
            assert snapshot.consecutive_failures == 3
            assert runtime.orchestrator.trigger() is None

            backend.up = True
            await runtime.prober.probe()
            assert runtime.prober.restored_notice_active
            assert "Connectivity restored" in [b.title for b in runtime.board.view().banners]
            await asyncio.sleep(0.02)

            # Still online: no second restore, no second tick
            await runtime.prober.probe()
            await asyncio.sleep(0.1)
            restored_after = runtime.prober.restored_notice_active
            await runtime.client.aclose()
            return restored_after

        restored_after = asyncio.run(scenario())

        assert not restored_after
        assert runtime.orchestrator.tick_count == 1
        tick = runtime.orchestrator.last_result
        assert tick.success
        assert not tick.manual
        assert tick.payload(Feed.OPERATIONS) == [{"id": 7, "status": "PENDING"}]
        assert backend.requests["/api/sync/operations"] == 1
        assert backend.requests["/api/sync/notifications"] == 1
        assert event_names(runtime.bus).count("connectivityRestored") == 1
        assert event_names(runtime.bus).count("syncCompleted") == 1

    def test_manual_sync_while_offline_reports_aggregate_failure(self, runtime, backend):
        runtime.mode_store.set_forced_mode(ForcedMode.DATABASE)

        async def scenario():
            await runtime.prober.probe()
            tick = await runtime.orchestrator.sync_now()
            await runtime.client.aclose()
            return tick

        tick = asyncio.run(scenario())

        assert not tick.success
        assert tick.aggregate_failure is not None
        assert all(r.payload is not None for r in tick.results)
        assert event_names(runtime.bus).count("syncFailed") == 1
        view = runtime.board.view()
        assert [b.title for b in view.banners] == ["Offline", "Sync failed", "Locked"]

    def test_simulated_outage_over_live_backend(self, runtime, backend):
        backend.up = True
        runtime.mode_store.set_mode(DataSourceMode.DATABASE)

        async def scenario():
            await runtime.prober.probe()
            runtime.simulation.set_simulated_offline(True)
            simulated = await runtime.prober.probe()
            runtime.simulation.set_simulated_offline(False)
            restored = await runtime.prober.probe()
            await runtime.client.aclose()
            return simulated, restored

        simulated, restored = asyncio.run(scenario())

        assert simulated.simulated and simulated.state is ConnectivityState.OFFLINE
        assert restored.state is ConnectivityState.ONLINE
        assert backend.requests["/api/sync/status"] == 3


class TestDataSourceRouting:
    """Pages follow the mode store through the runtime wiring"""

    def test_demo_mode_never_touches_network(self, runtime, backend):
        runtime.mode_store.set_forced_mode(ForcedMode.MOCK)

        async def scenario():
            snapshot = await runtime.prober.probe()
            await runtime.orchestrator.sync_now()
            return snapshot

        snapshot = asyncio.run(scenario())
        assert snapshot.state is ConnectivityState.ONLINE
        assert sum(backend.requests.values()) == 0

    def test_live_page_errors_instead_of_demo_data(self, runtime, backend):
        runtime.mode_store.set_mode(DataSourceMode.DATABASE)

        async def scenario():
            from marina_core.datasource import fetch_page_data
            page = await fetch_page_data(runtime.mode_store, "contracts", provider_factory=runtime.create_provider)
            await runtime.client.aclose()
            return page

        page = asyncio.run(scenario())
        assert page.data is None
        assert page.error.kind is ErrorKind.UNAVAILABLE
        assert not page.is_demo


class TestRuntimeThread:
    """Background loop used by the Streamlit pages"""

    def test_start_run_stop(self, runtime, backend):
        backend.up = True
        runtime.start()
        try:
            assert runtime.is_running
            demo = runtime.fetch_page("contracts")
            assert demo.is_demo and len(demo.data) == 25

            runtime.mode_store.set_mode(DataSourceMode.DATABASE)
            live = runtime.fetch_page("contracts")
            assert live.data == [{"id": "c-live"}]

            tick = runtime.sync_now()
            assert tick.success and tick.manual
        finally:
            runtime.stop()

        assert not runtime.is_running
        assert not runtime.prober.is_monitoring

    def test_run_requires_start(self, runtime):
        async def noop():
            return None

        coro = noop()
        with pytest.raises(RuntimeError):
            runtime.run(coro)
        coro.close()
