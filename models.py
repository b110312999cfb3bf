"""
models.py
Domain dataclasses (members, memberships, payments, weekly stats) and the
value sets they draw from.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from datetime import date

MEMBER_TYPES = ("fulltime", "onetime")
MEMBERSHIP_STATUSES = ("active", "expired", "pending")
PAYMENT_METHODS = ("cash", "card", "bank_transfer", "check")
PAYMENT_STATUSES = ("completed", "pending", "failed")

# Length of one paid membership term
TERM_MONTHS = 1


@dataclass(frozen=True)
class EmergencyContact:
    name: str
    phone: str
    relationship: str


@dataclass(frozen=True)
class Member:
    id: str
    first_name: str
    last_name: str
    phone: str
    date_of_birth: str
    address: str
    emergency_contact: EmergencyContact
    join_date: date
    is_active: bool
    member_type: str  # 'fulltime' or 'onetime'
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["join_date"] = self.join_date.isoformat()
        return rec

    @classmethod
    def from_record(cls, rec: dict) -> "Member":
        return cls(
            id=rec["id"],
            first_name=rec["first_name"],
            last_name=rec["last_name"],
            phone=rec["phone"],
            date_of_birth=rec["date_of_birth"],
            address=rec["address"],
            emergency_contact=EmergencyContact(**rec["emergency_contact"]),
            join_date=date.fromisoformat(rec["join_date"]),
            is_active=bool(rec["is_active"]),
            member_type=rec["member_type"],
            email=rec.get("email", ""),
        )


@dataclass(frozen=True)
class Membership:
    id: str
    member_id: str
    start_date: date
    end_date: date
    monthly_amount: float
    status: str  # 'active', 'expired' or 'pending'
    renewal_date: date

    def to_record(self) -> dict:
        rec = asdict(self)
        for key in ("start_date", "end_date", "renewal_date"):
            rec[key] = rec[key].isoformat()
        return rec

    @classmethod
    def from_record(cls, rec: dict) -> "Membership":
        return cls(
            id=rec["id"],
            member_id=rec["member_id"],
            start_date=date.fromisoformat(rec["start_date"]),
            end_date=date.fromisoformat(rec["end_date"]),
            monthly_amount=float(rec["monthly_amount"]),
            status=rec["status"],
            renewal_date=date.fromisoformat(rec["renewal_date"]),
        )


@dataclass(frozen=True)
class Payment:
    id: str
    membership_id: str
    member_id: str
    amount: float
    payment_date: date
    payment_method: str  # cash/card/bank_transfer/check
    status: str
    notes: str | None = None

    def to_record(self) -> dict:
        rec = asdict(self)
        rec["payment_date"] = self.payment_date.isoformat()
        return rec

    @classmethod
    def from_record(cls, rec: dict) -> "Payment":
        return cls(
            id=rec["id"],
            membership_id=rec["membership_id"],
            member_id=rec["member_id"],
            amount=float(rec["amount"]),
            payment_date=date.fromisoformat(rec["payment_date"]),
            payment_method=rec["payment_method"],
            status=rec["status"],
            notes=rec.get("notes"),
        )


@dataclass(frozen=True)
class WeeklyStats:
    week_start: date
    week_end: date
    total_members: int
    active_members: int
    inactive_members: int
    active_memberships: int
    expired_memberships: int
    pending_renewals: int
    total_revenue: float
    new_members: int
    fulltime_members: int
    onetime_members: int
