"""
Tests for feeding provider positions into the search engine.
"""
import asyncio

import pytest

from pawfinder.exceptions import FetchFailed
from pawfinder.models.search import Coordinate
from pawfinder.search.engine import NearbySearchEngine
from pawfinder.search.location import AuthorizationStatus, LocationTracker, QueueLocationProvider


@pytest.fixture
def engine(fake_gateway, clock):
    return NearbySearchEngine(fake_gateway, clock=clock)


def track(engine, *updates):
    """Run a tracker over a provider preloaded with updates."""
    async def scenario():
        provider = QueueLocationProvider()
        for update in updates:
            provider.push(update)
        provider.close()
        tracker = LocationTracker(engine, provider)
        await tracker.run()
        return tracker
    
    return asyncio.run(scenario())


class TestLocationTracker:
    """Tests for LocationTracker."""
    
    def test_latest_position_wins(self, engine, fake_gateway):
        """Test queued positions collapse to the newest one."""
        first = Coordinate(37.77, -122.41)
        second = Coordinate(37.78, -122.42)
        latest = Coordinate(37.79, -122.43)
        
        tracker = track(engine, first, second, latest)
        
        assert engine.position == latest
        assert tracker.applied == 1
        assert fake_gateway.calls == [(latest, 10.0)]
        assert tracker.status == AuthorizationStatus.AUTHORIZED
    
    def test_denied_switches_to_no_position(self, engine, fake_gateway, make_pet, origin):
        """Test losing permission clears the position and refreshes unranked."""
        fake_gateway.pets = [make_pet("a", km=30.0)]
        engine.set_position(origin)
        
        tracker = track(engine, AuthorizationStatus.DENIED)
        
        assert tracker.status == AuthorizationStatus.DENIED
        assert engine.position is None
        assert fake_gateway.calls == [(None, 10.0)]
        assert engine.result.pet_ids == ["a"]
        assert engine.result.matches[0].distance_km is None
    
    def test_restricted_behaves_like_denied(self, engine, origin):
        """Test restricted authorization also drops the position."""
        engine.set_position(origin)
        tracker = track(engine, AuthorizationStatus.RESTRICTED)
        assert tracker.status == AuthorizationStatus.RESTRICTED
        assert engine.position is None
    
    def test_authorized_waits_for_fix(self, engine, fake_gateway):
        """Test a grant alone does not trigger a fetch."""
        tracker = track(engine, AuthorizationStatus.AUTHORIZED)
        assert tracker.status == AuthorizationStatus.AUTHORIZED
        assert tracker.applied == 0
        assert fake_gateway.calls == []
    
    def test_invalid_fix_is_dropped(self, engine, fake_gateway):
        """Test out-of-range fixes never reach the engine."""
        tracker = track(engine, Coordinate(200.0, 0.0))
        assert tracker.applied == 0
        assert engine.position is None
        assert fake_gateway.calls == []
    
    def test_fetch_failure_does_not_stop_tracking(self, engine, fake_gateway, origin):
        """Test a failing refresh is reported to observers and tracking ends normally."""
        events = []
        engine.subscribe(events.append)
        fake_gateway.error = FetchFailed("offline")
        
        tracker = track(engine, origin)
        
        assert tracker.applied == 1
        assert engine.position == origin
        assert events[-1].is_error


class TestQueueLocationProvider:
    """Tests for QueueLocationProvider."""
    
    def test_updates_until_closed(self):
        """Test pushed updates are yielded in order until close."""
        async def scenario():
            provider = QueueLocationProvider()
            provider.push(Coordinate(1.0, 2.0))
            provider.push(AuthorizationStatus.DENIED)
            provider.close()
            return [update async for update in provider.updates()]
        
        assert asyncio.run(scenario()) == [Coordinate(1.0, 2.0), AuthorizationStatus.DENIED]


class TestPublication:
    """Tests for how many results a location update publishes."""
    
    def test_one_result_per_fix(self, engine, fake_gateway, make_pet, origin):
        """Test a position fix publishes exactly once, after the fetch."""
        fake_gateway.pets = [make_pet("a", km=1.0)]
        events = []
        engine.subscribe(events.append)
        
        track(engine, origin)
        
        assert len(events) == 1
        assert events[0].result.pet_ids == ["a"]
        assert events[0].result.position == origin
    
    def test_one_result_per_denial(self, engine, origin):
        """Test losing permission publishes a single unranked result."""
        engine.set_position(origin)
        events = []
        engine.subscribe(events.append)
        
        track(engine, AuthorizationStatus.DENIED)
        
        assert len(events) == 1
        assert events[0].result.position is None
