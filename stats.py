"""
stats.py
Weekly dashboard statistics and revenue reports.
"""

from __future__ import annotations

import pandas as pd

import utils
from lifecycle import refresh_statuses
from models import WeeklyStats


def _within(d, start, end) -> bool:
    return start <= d <= end


def get_weekly_stats(repo, reference_date=None, now=None) -> WeeklyStats:
    """
    Snapshot for the Monday-Sunday week containing `reference_date`.

    Membership statuses are refreshed against `now` (the real current date
    by default), never against the reference date. Member and membership
    counts are all-time; new_members, pending_renewals and total_revenue are
    limited to the week, both ends inclusive.
    """
    week_start, week_end = utils.week_bounds(reference_date)

    refresh_statuses(repo, now)

    members = repo.get_members()
    memberships = repo.get_memberships()
    payments = repo.get_payments()

    pending_renewals = sum(
        1 for ms in memberships
        if ms.status == "active" and _within(ms.renewal_date, week_start, week_end)
    )
    new_members = sum(1 for m in members if _within(m.join_date, week_start, week_end))
    total_revenue = sum(
        p.amount for p in payments
        if p.status == "completed" and _within(p.payment_date, week_start, week_end)
    )

    return WeeklyStats(
        week_start=week_start,
        week_end=week_end,
        total_members=len(members),
        active_members=sum(1 for m in members if m.is_active),
        inactive_members=sum(1 for m in members if not m.is_active),
        active_memberships=sum(1 for ms in memberships if ms.status == "active"),
        expired_memberships=sum(1 for ms in memberships if ms.status == "expired"),
        pending_renewals=pending_renewals,
        total_revenue=float(total_revenue),
        new_members=new_members,
        fulltime_members=sum(1 for m in members if m.member_type == "fulltime"),
        onetime_members=sum(1 for m in members if m.member_type == "onetime"),
    )


def revenue_by_month(repo) -> pd.DataFrame:
    rows = [
        {"month": p.payment_date.strftime("%Y-%m"), "amount": p.amount}
        for p in repo.get_payments()
        if p.status == "completed"
    ]
    if not rows:
        return pd.DataFrame(columns=["month", "revenue"])
    df = pd.DataFrame(rows)
    df = df.groupby("month", as_index=False)["amount"].sum().rename(columns={"amount": "revenue"})
    return df.sort_values("month", ascending=False).reset_index(drop=True)
