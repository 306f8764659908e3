"""
Nearby pet search engine.

Owns the search criteria and the last known user position, fetches
candidate reports from a gateway and publishes a filtered,
distance-sorted result to subscribed observers.
"""
import dataclasses
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .filters import matches
from ..exceptions import FetchFailed, InvalidCriteria, PawFinderError
from ..models.pet import PetSize, PetSpecies
from ..models.search import Coordinate, FilteredResult, PetMatch, SearchCriteria, SearchEvent
from ..utils.geo_helpers import check_coordinate, haversine_km
from ..utils.validators import validate_radius

logger = logging.getLogger(__name__)

Listener = Callable[[SearchEvent], None]

CRITERIA_FIELDS = {f.name for f in dataclasses.fields(SearchCriteria)}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NearbySearchEngine:
    """
    Location-filtered pet search for a single presentation session.
    
    Not safe for concurrent mutation from several callers. Readers may
    access `result` at any time: each recompute publishes a new
    immutable FilteredResult instead of changing the previous one.
    
    Args:
        gateway: Object with an async fetch_active_pets(center, radius_km)
        criteria: Initial criteria (defaults if None)
        clock: Callable returning the current aware datetime
    """
    
    def __init__(self, gateway, criteria: Optional[SearchCriteria] = None,
                 clock: Callable[[], datetime] = _utcnow):
        self.gateway = gateway
        self._criteria = criteria or SearchCriteria()
        self._position: Optional[Coordinate] = None
        self._candidates: tuple = ()
        self._result = FilteredResult(criteria=self._criteria)
        self._listeners: list[Listener] = []
        self._clock = clock
        self._latest_request = 0
    
    @property
    def criteria(self) -> SearchCriteria:
        return self._criteria
    
    @property
    def position(self) -> Optional[Coordinate]:
        return self._position
    
    @property
    def result(self) -> FilteredResult:
        """The last published result."""
        return self._result
    
    @property
    def candidates(self) -> tuple:
        return self._candidates
    
    # Observation
    
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for result and error events.
        
        Returns:
            Callable that unsubscribes the listener
        """
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)
    
    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)
    
    def _emit(self, event: SearchEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Search listener {listener!r} failed on {event.kind} event")
    
    def _publish(self, result: FilteredResult) -> FilteredResult:
        self._result = result
        self._emit(SearchEvent.results(result))
        return result
    
    def _fail(self, error: PawFinderError) -> None:
        self._emit(SearchEvent.failure(error))
    
    # Mutation
    
    def set_position(self, position: Optional[Coordinate], publish: bool = True) -> FilteredResult:
        """
        Replace the user position (None when there is no fix) and recompute.
        
        Args:
            position: New position, or None
            publish: If False, only store the position; the caller is
                expected to refresh, which publishes once
        
        Raises:
            InvalidCoordinate: If the position is out of range
        """
        if position is not None:
            try:
                check_coordinate(position.latitude, position.longitude)
            except PawFinderError as e:
                self._fail(e)
                raise
        
        self._position = position
        if not publish:
            return self._result
        return self._publish(self.recompute())
    
    def update_criteria(self, **changes) -> FilteredResult:
        """
        Merge a partial criteria change and recompute.
        
        Accepts radius_km, species, sizes, recent_only and reward_only.
        Species and sizes may be given as enum members or strings.
        
        Raises:
            InvalidCriteria: On unknown fields or out-of-bound values
        """
        try:
            criteria = dataclasses.replace(self._criteria, **self._coerce(changes))
        except InvalidCriteria as e:
            self._fail(e)
            raise
        
        self._criteria = criteria
        logger.info(f"Search criteria updated: {criteria.to_dict()}")
        return self._publish(self.recompute())
    
    def reset_criteria(self) -> FilteredResult:
        """Restore default criteria and recompute."""
        self._criteria = SearchCriteria()
        return self._publish(self.recompute())
    
    @staticmethod
    def _coerce(changes: dict) -> dict:
        unknown = set(changes) - CRITERIA_FIELDS
        if unknown:
            raise InvalidCriteria("criteria", f"Unknown criteria: {', '.join(sorted(unknown))}")
        
        coerced = dict(changes)
        if "radius_km" in coerced:
            coerced["radius_km"] = validate_radius(coerced["radius_km"])
        
        if coerced.get("species") is not None:
            try:
                coerced["species"] = PetSpecies.parse(coerced["species"])
            except ValueError as e:
                raise InvalidCriteria("species", str(e))
        
        if "sizes" in coerced:
            try:
                coerced["sizes"] = frozenset(PetSize.parse(s) for s in (coerced["sizes"] or ()))
            except ValueError as e:
                raise InvalidCriteria("sizes", str(e))
        
        for flag in ("recent_only", "reward_only"):
            if flag in coerced:
                coerced[flag] = bool(coerced[flag])
        
        return coerced
    
    # Computation
    
    def recompute(self, candidates=None) -> FilteredResult:
        """
        Filter and rank candidates against the current criteria and position.
        
        Pure with respect to engine state: nothing is published. Without
        a position, distances are None and candidate order is preserved.
        With a position, reports beyond the radius are dropped and the
        rest are sorted by distance, then id.
        
        Args:
            candidates: Reports to evaluate (defaults to the latest fetch)
        """
        candidates = self._candidates if candidates is None else candidates
        criteria = self._criteria
        position = self._position
        now = self._clock()
        
        found = []
        for report in candidates:
            if not report.last_seen_location.has_valid_coordinate:
                logger.debug(f"Skipping pet {report.id}: invalid last seen coordinate")
                continue
            
            distance = None
            if position is not None:
                distance = haversine_km(
                    position.latitude, position.longitude,
                    report.last_seen_location.latitude, report.last_seen_location.longitude
                )
                if distance > criteria.radius_km:
                    continue
            
            if not matches(report, criteria, now):
                continue
            
            found.append(PetMatch(report=report, distance_km=distance))
        
        if position is not None:
            found.sort(key=lambda m: (m.distance_km, m.report.id))
        
        return FilteredResult(
            matches=tuple(found),
            criteria=criteria,
            position=position,
            computed_at=now
        )
    
    async def refresh(self) -> FilteredResult:
        """
        Fetch fresh candidates around the current position and publish.
        
        Only the most recent call may publish: if another refresh was
        started while this one awaited the gateway, its outcome is
        discarded and the current result is returned unchanged.
        
        Returns:
            FilteredResult: The published (or still current) result
            
        Raises:
            FetchFailed: If the gateway fails (other errors are wrapped); the
                previous result stays published
        """
        self._latest_request += 1
        request_id = self._latest_request
        position = self._position
        
        try:
            candidates = await self.gateway.fetch_active_pets(position, self._criteria.radius_km)
        except Exception as e:
            if request_id != self._latest_request:
                logger.info(f"Discarding failure of superseded refresh #{request_id}: {e}")
                return self._result
            logger.warning(f"Refresh #{request_id} failed, keeping previous results: {e}")
            error = e if isinstance(e, FetchFailed) else FetchFailed(str(e), cause=e)
            self._fail(error)
            if error is e:
                raise
            raise error from e
        
        if request_id != self._latest_request:
            logger.info(f"Discarding superseded refresh #{request_id} ({len(candidates)} candidates)")
            return self._result
        
        self._candidates = tuple(candidates)
        logger.info(f"Refresh #{request_id} fetched {len(self._candidates)} candidates")
        return self._publish(self.recompute())
