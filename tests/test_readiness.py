import asyncio
import itertools

import pytest

from path_tracker.core import AuthorizationState, ReadinessAggregator

from .conftest import settle


class FailingRequester:
    async def request_permissions(self, permissions):
        raise RuntimeError("permission service unavailable")


class BlockingRequester:
    async def request_permissions(self, permissions):
        await asyncio.Event().wait()


class StaticReader:
    def __init__(self, enabled=True):
        self.enabled = enabled

    def is_location_enabled(self):
        return self.enabled


def make_aggregator(requester, reader=None):
    return ReadinessAggregator(
        requester=requester,
        reader=reader or StaticReader(),
        permissions=["ACCESS_FINE_LOCATION", "POST_NOTIFICATIONS"],
        location_permission="ACCESS_FINE_LOCATION",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("order", list(itertools.permutations(["authorization", "location", "surface"])))
async def test_eligible_only_once_all_inputs_hold(readiness, order):
    snapshots = []
    readiness.subscribe(snapshots.append)

    steps = {
        "authorization": readiness.authorization.request_authorization,
        "location": readiness.location.refresh,
        "surface": readiness.surface.mark_ready,
    }
    for index, name in enumerate(order):
        result = steps[name]()
        if asyncio.iscoroutine(result):
            await result
        # Eligible exactly when the last input arrives.
        assert readiness.eligible is (index == len(order) - 1)

    assert [s.eligible for s in snapshots] == [False, False, True]


@pytest.mark.asyncio
class TestAuthorizationGate:

    async def test_granted(self, readiness, platform):
        state = await readiness.authorization.request_authorization()

        assert state is AuthorizationState.GRANTED
        assert platform.permission_requests == [["ACCESS_FINE_LOCATION", "POST_NOTIFICATIONS"]]

    async def test_denied_is_not_retried_within_cycle(self, readiness, platform):
        platform.grant_permissions = False

        assert await readiness.authorization.request_authorization() is AuthorizationState.DENIED
        platform.grant_permissions = True
        assert await readiness.authorization.request_authorization() is AuthorizationState.DENIED

        assert len(platform.permission_requests) == 1

    async def test_new_cycle_asks_again(self, readiness, platform):
        platform.grant_permissions = False
        await readiness.authorization.request_authorization()

        platform.grant_permissions = True
        readiness.authorization.begin_cycle()

        assert await readiness.authorization.request_authorization() is AuthorizationState.GRANTED
        assert len(platform.permission_requests) == 2

    async def test_only_location_permission_decides(self):
        class PartialRequester:
            async def request_permissions(self, permissions):
                return {"ACCESS_FINE_LOCATION": True, "POST_NOTIFICATIONS": False}

        aggregator = make_aggregator(PartialRequester())
        assert await aggregator.authorization.request_authorization() is AuthorizationState.GRANTED

    async def test_requester_failure_means_denied(self):
        aggregator = make_aggregator(FailingRequester())

        assert await aggregator.authorization.request_authorization() is AuthorizationState.DENIED

    async def test_cancelled_request_leaves_state_unknown(self):
        aggregator = make_aggregator(BlockingRequester())
        task = asyncio.create_task(aggregator.authorization.request_authorization())
        await settle(0.01)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert aggregator.authorization.state is AuthorizationState.UNKNOWN
        assert not aggregator.eligible


class TestLocationAvailability:

    def test_refresh_notifies_only_on_change(self):
        reader = StaticReader(enabled=False)
        aggregator = make_aggregator(FailingRequester(), reader)
        snapshots = []
        aggregator.subscribe(snapshots.append)

        assert aggregator.location.refresh() is False
        reader.enabled = True
        assert aggregator.location.refresh() is True
        assert aggregator.location.refresh() is True

        assert [s.location_enabled for s in snapshots] == [True]

    def test_is_enabled_does_not_store(self):
        reader = StaticReader(enabled=True)
        aggregator = make_aggregator(FailingRequester(), reader)

        assert aggregator.location.is_enabled() is True
        assert aggregator.location.enabled is False


class TestSurfaceReadiness:

    def test_mark_ready_is_idempotent(self, readiness):
        snapshots = []
        readiness.subscribe(snapshots.append)

        readiness.surface.mark_ready()
        readiness.surface.mark_ready()

        assert readiness.surface.is_ready()
        assert len(snapshots) == 1


def test_snapshot_is_recomputed_not_cached(readiness):
    before = readiness.readiness
    readiness.surface.mark_ready()

    assert before.surface_ready is False
    assert readiness.readiness.surface_ready is True
