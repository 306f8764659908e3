"""
Nearby search value objects: position, criteria and published results.

All of these are immutable so a published result can be shared with
readers while the engine computes the next one.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .pet import LostPet, PetSpecies
from ..config import DEFAULT_SEARCH_RADIUS_KM
from ..exceptions import PawFinderError


@dataclass(frozen=True)
class Coordinate:
    """A user position or search center in signed degrees."""
    latitude: float
    longitude: float
    
    def to_dict(self) -> dict:
        return {"lat": self.latitude, "lng": self.longitude}


@dataclass(frozen=True)
class SearchCriteria:
    radius_km: float = DEFAULT_SEARCH_RADIUS_KM
    species: Optional[PetSpecies] = None
    sizes: frozenset = field(default_factory=frozenset)
    recent_only: bool = False
    reward_only: bool = False
    
    def to_dict(self) -> dict:
        return {
            "radius_km": self.radius_km,
            "species": self.species.value if self.species else None,
            "sizes": sorted(size.value for size in self.sizes),
            "recent_only": self.recent_only,
            "reward_only": self.reward_only
        }


@dataclass(frozen=True)
class PetMatch:
    """A report that passed every filter, with its distance if known."""
    report: LostPet
    distance_km: Optional[float] = None
    
    def to_dict(self) -> dict:
        return {
            "pet": self.report.to_dict(),
            "distance_km": round(self.distance_km, 3) if self.distance_km is not None else None
        }


@dataclass(frozen=True)
class FilteredResult:
    matches: tuple = ()
    criteria: SearchCriteria = field(default_factory=SearchCriteria)
    position: Optional[Coordinate] = None
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    
    def __len__(self) -> int:
        return len(self.matches)
    
    def __iter__(self):
        return iter(self.matches)
    
    @property
    def ranked(self) -> bool:
        """Whether matches are sorted by distance from a known position."""
        return self.position is not None
    
    @property
    def pet_ids(self) -> list[str]:
        return [match.report.id for match in self.matches]
    
    def to_dict(self) -> dict:
        return {
            "data": [match.to_dict() for match in self.matches],
            "count": len(self.matches),
            "criteria": self.criteria.to_dict(),
            "position": self.position.to_dict() if self.position else None,
            "computed_at": self.computed_at.isoformat()
        }


@dataclass(frozen=True)
class SearchEvent:
    """What observers receive: either a new result or an error signal."""
    kind: str
    result: Optional[FilteredResult] = None
    error: Optional[PawFinderError] = None
    
    RESULTS = "results"
    ERROR = "error"
    
    @classmethod
    def results(cls, result: FilteredResult) -> "SearchEvent":
        return cls(kind=cls.RESULTS, result=result)
    
    @classmethod
    def failure(cls, error: PawFinderError) -> "SearchEvent":
        return cls(kind=cls.ERROR, error=error)
    
    @property
    def is_error(self) -> bool:
        return self.kind == self.ERROR
