"""
lifecycle.py
Membership status derivation (active -> expired) and renewal, including the
renewal that every completed payment triggers.
"""

from __future__ import annotations

import dataclasses
from uuid import uuid4

import utils
from errors import InvalidInput, NotFound
from log import get_logger
from models import TERM_MONTHS, Membership, Payment

logger = get_logger(__name__)


def _renewed(membership: Membership, now) -> Membership:
    end = utils.add_months(now, TERM_MONTHS)
    return dataclasses.replace(membership, end_date=end, renewal_date=end, status="active")


def refresh_statuses(repo, now=None) -> int:
    """
    Flip active memberships whose end_date is before `now` to expired.
    Returns how many changed; nothing is written when none did.
    """
    today = utils.as_date(now)
    memberships = repo.get_memberships()
    changed = 0
    for i, ms in enumerate(memberships):
        if ms.status == "active" and ms.end_date < today:
            memberships[i] = dataclasses.replace(ms, status="expired")
            changed += 1
    if changed:
        repo.save_memberships(memberships)
        logger.info("memberships expired count=%d as_of=%s", changed, today)
    return changed


def renew_membership(repo, membership_id: str, now=None) -> Membership:
    today = utils.as_date(now)
    memberships = repo.get_memberships()
    index = next((i for i, ms in enumerate(memberships) if ms.id == membership_id), None)
    if index is None:
        raise NotFound("Membership", membership_id)

    memberships[index] = _renewed(memberships[index], today)
    repo.save_memberships(memberships)
    logger.info("membership renewed id=%s ends=%s", membership_id, memberships[index].end_date)
    return memberships[index]


def record_payment(repo, membership_id: str, member_id: str, amount, payment_method: str,
                   notes: str | None = None, now=None) -> Payment:
    """
    Record a completed payment and renew its membership for one month from
    `now`. The amount is not checked against the monthly due; any positive
    amount renews a full term. Payment and renewal are written together.
    """
    errors = utils.validate_payment_inputs(amount, payment_method)
    if errors:
        raise InvalidInput(" ".join(errors))

    today = utils.as_date(now)
    memberships = repo.get_memberships()
    index = next((i for i, ms in enumerate(memberships) if ms.id == membership_id), None)
    if index is None:
        raise NotFound("Membership", membership_id)
    membership = memberships[index]
    if membership.member_id != member_id:
        raise InvalidInput(f"Membership {membership_id} does not belong to member {member_id}.")

    amount = float(amount)
    if amount != membership.monthly_amount:
        logger.warning(
            "payment amount %.2f differs from monthly amount %.2f for membership %s",
            amount, membership.monthly_amount, membership_id,
        )

    payment = Payment(
        id=str(uuid4()),
        membership_id=membership_id,
        member_id=member_id,
        amount=amount,
        payment_date=today,
        payment_method=payment_method,
        status="completed",
        notes=(notes or "").strip() or None,
    )
    memberships[index] = _renewed(membership, today)

    payments = repo.store.load("payments")
    payments.append(payment.to_record())
    repo.store.save_many({
        "payments": payments,
        "memberships": [ms.to_record() for ms in memberships],
    })
    logger.info(
        "payment recorded id=%s member=%s amount=%.2f method=%s renewed_to=%s",
        payment.id, member_id, amount, payment_method, memberships[index].end_date,
    )
    return payment
