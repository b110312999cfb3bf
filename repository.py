"""
repository.py
CRUD for members, memberships and payments over a Store, with generated
ids and cascade-on-delete.
"""

from __future__ import annotations

import dataclasses
from uuid import uuid4

import utils
from errors import InvalidInput, MembershipExists, NotFound
from log import get_logger
from models import TERM_MONTHS, EmergencyContact, Member, Membership, Payment

logger = get_logger(__name__)

MEMBER_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "date_of_birth",
    "address",
    "emergency_contact",
    "member_type",
    "is_active",
)
IMMUTABLE_MEMBER_FIELDS = ("id", "join_date")


def _emergency_contact(value) -> EmergencyContact | None:
    if value is None or isinstance(value, EmergencyContact):
        return value
    if isinstance(value, dict):
        return EmergencyContact(
            name=value.get("name", ""),
            phone=value.get("phone", ""),
            relationship=value.get("relationship", ""),
        )
    raise InvalidInput("Emergency contact must be a mapping with name, phone and relationship.")


def member_fields(data: dict, contact: EmergencyContact | None = None) -> dict:
    """
    Normalize member form data. The emergency contact may come nested
    (`emergency_contact`) or as the flat emergency_contact_* form fields;
    flat fields are merged over `contact` (the stored one, on edits).
    """
    fields = {k: v for k, v in data.items() if not k.startswith("emergency_contact")}
    if "emergency_contact" in data:
        fields["emergency_contact"] = _emergency_contact(data["emergency_contact"])
    elif any(k.startswith("emergency_contact_") for k in data):
        base = contact or EmergencyContact("", "", "")
        fields["emergency_contact"] = EmergencyContact(
            name=data.get("emergency_contact_name", base.name),
            phone=data.get("emergency_contact_phone", base.phone),
            relationship=data.get("emergency_contact_relationship", base.relationship),
        )
    return fields


class Repository:
    def __init__(self, store):
        self.store = store

    # ---------- Members ----------

    def get_members(self) -> list[Member]:
        return [Member.from_record(r) for r in self.store.load("members")]

    def get_member(self, member_id: str) -> Member | None:
        return next((m for m in self.get_members() if m.id == member_id), None)

    def add_member(self, data: dict, today=None) -> Member:
        """
        Values are stored as given; validation only rejects blank required
        fields.
        """
        fields = member_fields(data)
        errors = utils.validate_member_inputs(fields)
        if errors:
            raise InvalidInput(" ".join(errors))

        member = Member(
            id=str(uuid4()),
            first_name=fields["first_name"],
            last_name=fields["last_name"],
            email=fields.get("email") or "",
            phone=fields["phone"],
            date_of_birth=fields.get("date_of_birth", ""),
            address=fields.get("address", ""),
            emergency_contact=fields["emergency_contact"],
            join_date=utils.as_date(today),
            is_active=True,
            member_type=fields["member_type"],
        )
        records = self.store.load("members")
        records.append(member.to_record())
        self.store.save("members", records)
        logger.info("member added id=%s type=%s", member.id, member.member_type)
        return member

    def update_member(self, member_id: str, **changes) -> Member:
        members = self.get_members()
        index = next((i for i, m in enumerate(members) if m.id == member_id), None)
        if index is None:
            raise NotFound("Member", member_id)

        fields = member_fields(changes, members[index].emergency_contact)
        locked = [k for k in fields if k in IMMUTABLE_MEMBER_FIELDS]
        if locked:
            raise InvalidInput(f"Cannot change {', '.join(locked)}.")
        unknown = [k for k in fields if k not in MEMBER_FIELDS]
        if unknown:
            raise InvalidInput(f"Unknown member fields: {', '.join(unknown)}.")
        errors = utils.validate_member_inputs(fields, partial=True)
        if errors:
            raise InvalidInput(" ".join(errors))

        members[index] = dataclasses.replace(members[index], **fields)
        self.store.save("members", [m.to_record() for m in members])
        return members[index]

    def deactivate_member(self, member_id: str) -> Member:
        return self.update_member(member_id, is_active=False)

    def reactivate_member(self, member_id: str) -> Member:
        return self.update_member(member_id, is_active=True)

    def delete_member(self, member_id: str) -> bool:
        """
        Remove the member plus every membership and payment pointing at it.
        All three collections are written in one transaction.
        """
        members = self.store.load("members")
        kept = [r for r in members if r["id"] != member_id]
        if len(kept) == len(members):
            return False

        memberships = self.store.load("memberships")
        payments = self.store.load("payments")
        kept_memberships = [r for r in memberships if r["member_id"] != member_id]
        kept_payments = [r for r in payments if r["member_id"] != member_id]

        self.store.save_many({
            "members": kept,
            "memberships": kept_memberships,
            "payments": kept_payments,
        })
        logger.info(
            "member deleted id=%s memberships=%d payments=%d",
            member_id,
            len(memberships) - len(kept_memberships),
            len(payments) - len(kept_payments),
        )
        return True

    def search_members(self, term: str = "", member_type: str | None = None,
                       is_active: bool | None = None) -> list[Member]:
        term = term.strip().lower()
        found = []
        for m in self.get_members():
            if term and term not in m.full_name.lower() and term not in m.phone.lower():
                continue
            if member_type and m.member_type != member_type:
                continue
            if is_active is not None and m.is_active != is_active:
                continue
            found.append(m)
        return found

    # ---------- Memberships ----------

    def get_memberships(self) -> list[Membership]:
        return [Membership.from_record(r) for r in self.store.load("memberships")]

    def get_membership(self, membership_id: str) -> Membership | None:
        return next((m for m in self.get_memberships() if m.id == membership_id), None)

    def get_membership_by_member_id(self, member_id: str) -> Membership | None:
        return next((m for m in self.get_memberships() if m.member_id == member_id), None)

    def create_membership(self, member_id: str, monthly_amount: float, today=None) -> Membership:
        errors = utils.validate_amount(monthly_amount)
        if errors:
            raise InvalidInput(" ".join(errors))
        if self.get_member(member_id) is None:
            raise NotFound("Member", member_id)
        if self.get_membership_by_member_id(member_id) is not None:
            raise MembershipExists(member_id)

        start = utils.as_date(today)
        end = utils.add_months(start, TERM_MONTHS)
        membership = Membership(
            id=str(uuid4()),
            member_id=member_id,
            start_date=start,
            end_date=end,
            monthly_amount=float(monthly_amount),
            status="active",
            renewal_date=end,
        )
        records = self.store.load("memberships")
        records.append(membership.to_record())
        self.store.save("memberships", records)
        logger.info("membership created id=%s member=%s ends=%s", membership.id, member_id, end)
        return membership

    def save_memberships(self, memberships: list[Membership]) -> None:
        self.store.save("memberships", [m.to_record() for m in memberships])

    # ---------- Payments ----------

    def get_payments(self) -> list[Payment]:
        return [Payment.from_record(r) for r in self.store.load("payments")]

    def get_payments_by_member_id(self, member_id: str) -> list[Payment]:
        return [p for p in self.get_payments() if p.member_id == member_id]

    # ---------- Combined views ----------

    def get_members_with_memberships(self) -> list[tuple[Member, Membership | None]]:
        by_member: dict[str, Membership] = {}
        for ms in self.get_memberships():
            by_member.setdefault(ms.member_id, ms)
        return [(m, by_member.get(m.id)) for m in self.get_members()]
