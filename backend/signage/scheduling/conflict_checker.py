# backend/signage/scheduling/conflict_checker.py

"""
Assignment-time gate: may this campaign be put on this TV?

Only campaign windows are compared. A campaign reserves the TV for its
whole span, whatever its ads' own windows are.
"""

from typing import Iterable, Optional

from signage.models.campaign import Campaign
from signage.models.interval import Interval, overlaps
from signage.storage.base import SignageStore


def find_conflict(
    assigned: Iterable[Campaign],
    campaign_id: str,
    window: Interval,
) -> Optional[Campaign]:
    """
    Returns the first campaign (by id) whose window overlaps `window`,
    skipping the candidate itself so that a campaign never conflicts with
    its own existing assignment when its window is edited.
    """
    for existing in sorted(assigned, key=lambda c: c.id):
        if existing.id == campaign_id:
            continue
        if overlaps(existing.window, window):
            return existing
    return None


def check_conflict(
    store: SignageStore,
    tv_id: str,
    campaign_id: str,
    window: Interval,
) -> Optional[Campaign]:
    """
    Pure read against the store. The caller decides what to do with the
    answer (raise SchedulingConflict, skip the write).
    """
    return find_conflict(store.list_campaigns_assigned_to(tv_id), campaign_id, window)
