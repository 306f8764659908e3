"""
Distance-independent predicates applied to each candidate report.
"""
from datetime import datetime, timedelta

from ..config import RECENT_WINDOW_DAYS
from ..models.pet import LostPet
from ..models.search import SearchCriteria

RECENT_WINDOW = timedelta(days=RECENT_WINDOW_DAYS)


def matches(report: LostPet, criteria: SearchCriteria, now: datetime) -> bool:
    """
    Decide whether a report passes every active filter.
    
    All predicates are conjunctive; default criteria accept every
    active report.
    
    Args:
        report: Candidate pet report
        criteria: Current search criteria
        now: Evaluation time for the recency filter (timezone-aware)
        
    Returns:
        bool: True if the report should be shown
    """
    if not report.is_active:
        return False
    
    if criteria.species is not None and report.species != criteria.species:
        return False
    
    if criteria.sizes and report.size not in criteria.sizes:
        return False
    
    if criteria.recent_only and now - report.last_seen_date > RECENT_WINDOW:
        return False
    
    if criteria.reward_only and not report.has_reward:
        return False
    
    return True
