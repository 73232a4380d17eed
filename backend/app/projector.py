# projector.py
# Derived view of the proposals table: filter -> sort -> paginate -> alerts

import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional

from .models import AlertFlags, Proposal, ProjectionResult, ViewControls

logger = logging.getLogger(__name__)

FOLLOW_UP_STALE_DAYS = 7
RETURN_SOON_DAYS = 3
STATUS_RANK = {"pending": 0, "approved": 1, "rejected": 2}

_DAY = timedelta(days=1)


def parse_value_bound(raw: Any) -> Optional[float]:
    """Numeric filter input -> bound. Anything unusable means no bound."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return None if math.isnan(raw) else float(raw)
    s = str(raw).strip().replace(",", ".")
    if not s:
        return None
    try:
        v = float(s)
    except ValueError:
        return None
    return None if math.isnan(v) else v


def parse_date_bound(raw: Any) -> Optional[date]:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def filter_proposals(proposals: List[Proposal], controls: ViewControls) -> List[Proposal]:
    term = controls.search.lower()
    out = []
    for p in proposals:
        if term not in p.client_name.lower():
            continue
        if controls.sent_from is not None and p.sent_date < controls.sent_from:
            continue
        if controls.sent_to is not None and p.sent_date > controls.sent_to:
            continue
        if controls.min_value is not None and p.value < controls.min_value:
            continue
        if controls.max_value is not None and p.value > controls.max_value:
            continue
        out.append(p)
    return out


def _sort_value(p: Proposal, key: str):
    if key == "client_name":
        return p.client_name.casefold()
    if key == "status":
        return STATUS_RANK[p.status]
    if key == "expected_return_date":
        # missing date sorts as infinitely distant
        if p.expected_return_date is None:
            return (1, date.max)
        return (0, p.expected_return_date)
    return getattr(p, key)


def sort_proposals(proposals: List[Proposal], key: Optional[str], direction: str = "asc") -> List[Proposal]:
    """Stable sort on one column.

    Ties keep their input order in both directions, so ``desc`` is the exact
    reverse of ``asc`` whenever no two values are equal.
    """
    if key is None:
        return list(proposals)
    return sorted(proposals, key=lambda p: _sort_value(p, key), reverse=(direction == "desc"))


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total else 0


def clamp_page(page: int, pages: int) -> int:
    return min(max(page, 1), max(pages, 1))


def paginate(proposals: List[Proposal], page: int, page_size: int) -> List[Proposal]:
    start = (page - 1) * page_size
    return proposals[start:start + page_size]


def _at_midnight(d: date, now: datetime) -> datetime:
    return datetime.combine(d, time.min, tzinfo=now.tzinfo)


def classify_alerts(p: Proposal, now: datetime) -> AlertFlags:
    elapsed = abs(now - _at_midnight(p.last_follow_up, now))
    days_since = math.ceil(elapsed / _DAY)
    flags = AlertFlags(
        days_since_follow_up=days_since,
        needs_follow_up=p.status == "pending" and days_since > FOLLOW_UP_STALE_DAYS,
    )
    if p.expected_return_date is not None:
        until = math.ceil((_at_midnight(p.expected_return_date, now) - now) / _DAY)
        flags.days_until_return = until
        flags.is_overdue = until < 0
        flags.is_return_soon = 0 <= until <= RETURN_SOON_DAYS
    return flags


def project(
    proposals: List[Proposal],
    controls: ViewControls,
    now: Optional[datetime] = None,
) -> ProjectionResult:
    """Compute what the table renders for the given controls.

    The input list is never modified. Alerts depend on ``now`` and are only
    computed for the visible page.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    rows = filter_proposals(proposals, controls)
    rows = sort_proposals(rows, controls.sort_key, controls.sort_dir)
    pages = page_count(len(rows), controls.page_size)
    page = clamp_page(controls.page, pages)
    visible = paginate(rows, page, controls.page_size)
    flags: Dict[str, AlertFlags] = {p.id: classify_alerts(p, now) for p in visible}
    logger.debug(
        "projected %d/%d proposals, page %d of %d",
        len(visible), len(proposals), page, pages,
    )
    return ProjectionResult(
        visible_page=visible,
        page=page,
        page_count=pages,
        total_filtered_count=len(rows),
        alert_flags_by_id=flags,
    )
