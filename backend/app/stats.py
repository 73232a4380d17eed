# stats.py
# Dashboard totals over the whole collection

from typing import List

from .models import DashboardStats, Proposal


def compute_stats(proposals: List[Proposal]) -> DashboardStats:
    approved = [p for p in proposals if p.status == "approved"]
    return DashboardStats(
        total=len(proposals),
        approved=len(approved),
        rejected=sum(1 for p in proposals if p.status == "rejected"),
        pending=sum(1 for p in proposals if p.status == "pending"),
        total_value=sum(p.value for p in proposals),
        approved_value=sum(p.value for p in approved),
    )
