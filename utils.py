"""
utils.py
Validation, dates, exports, display formatting, sample data.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta

import pandas as pd

from config import settings
from models import MEMBER_TYPES, PAYMENT_METHODS

PHONE_RE = re.compile(r"^\+?[\d\s\-()]+$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def parse_iso(d: str) -> date:
    return date.fromisoformat(d)


def as_date(value: date | datetime | str | None) -> date:
    """
    Normalize "now"-style arguments: None means today, datetimes are
    truncated to their calendar date, strings are parsed as ISO dates.
    """
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return parse_iso(value)
    return value


def add_months(start: date, months: int) -> date:
    """
    Add months while keeping day in valid range (e.g., Jan 31 + 1 month => Feb 28/29).
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    # last day of target month
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = next_month - timedelta(days=1)
    day = min(start.day, last_day.day)
    return date(y, m, day)


def week_bounds(reference: date | datetime | str | None = None) -> tuple[date, date]:
    """Monday and Sunday of the week containing `reference`."""
    ref = as_date(reference)
    monday = ref - timedelta(days=ref.weekday())
    return monday, monday + timedelta(days=6)


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(phone)) and len(re.sub(r"\D", "", phone)) >= 10


def validate_member_inputs(fields: dict, partial: bool = False) -> list[str]:
    """
    Check member form fields. With partial=True only the fields present are
    checked (used for edits).
    """
    errors: list[str] = []

    def present(key: str) -> bool:
        return key in fields or not partial

    for key, label in (("first_name", "First name"), ("last_name", "Last name"), ("phone", "Phone")):
        if present(key) and not str(fields.get(key) or "").strip():
            errors.append(f"{label} is required.")

    phone = str(fields.get("phone") or "").strip()
    if phone and not is_valid_phone(phone):
        errors.append("Please enter a valid phone number.")

    email = str(fields.get("email") or "").strip()
    if email and not EMAIL_RE.match(email):
        errors.append("Please enter a valid email address.")

    if present("emergency_contact"):
        contact = fields.get("emergency_contact")
        if contact is None:
            errors.append("Emergency contact is required.")
        else:
            for attr in ("name", "phone", "relationship"):
                if not str(getattr(contact, attr, "") or "").strip():
                    errors.append(f"Emergency contact {attr} is required.")

    if present("member_type") and fields.get("member_type") not in MEMBER_TYPES:
        errors.append(f"Member type must be one of: {', '.join(MEMBER_TYPES)}.")
    return errors


def validate_amount(amount) -> list[str]:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return ["Amount must be numeric."]
    if not math.isfinite(value) or value <= 0:
        return ["Amount must be a finite number > 0."]
    return []


def validate_payment_inputs(amount, method: str) -> list[str]:
    errors = validate_amount(amount)
    if method not in PAYMENT_METHODS:
        errors.append(f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}.")
    return errors


def members_to_csv_bytes(members) -> bytes:
    rows = []
    for m in members:
        rows.append({
            "id": m.id,
            "first_name": m.first_name,
            "last_name": m.last_name,
            "email": m.email,
            "phone": m.phone,
            "date_of_birth": m.date_of_birth,
            "address": m.address,
            "emergency_contact_name": m.emergency_contact.name,
            "emergency_contact_phone": m.emergency_contact.phone,
            "emergency_contact_relationship": m.emergency_contact.relationship,
            "join_date": m.join_date.isoformat(),
            "is_active": m.is_active,
            "member_type": m.member_type,
        })
    df = pd.DataFrame(rows)
    return df.to_csv(index=False).encode("utf-8")


def payments_to_csv_bytes(payments) -> bytes:
    df = pd.DataFrame([p.to_record() for p in payments])
    return df.to_csv(index=False).encode("utf-8")


def format_currency(amount: float) -> str:
    return f"{settings.CURRENCY_CODE} {float(amount):,.2f}"


def format_date(value) -> str:
    try:
        return as_date(value).strftime("%b %d, %Y")
    except ValueError:
        return str(value)


SAMPLE_MEMBERS = [
    {
        "first_name": "John",
        "last_name": "Doe",
        "phone": "+1234567890",
        "date_of_birth": "1980-05-15",
        "address": "123 Church St, City, State 12345",
        "emergency_contact_name": "Jane Doe",
        "emergency_contact_phone": "+1234567891",
        "emergency_contact_relationship": "Spouse",
        "member_type": "fulltime",
    },
    {
        "first_name": "Mary",
        "last_name": "Smith",
        "phone": "+1234567892",
        "date_of_birth": "1975-08-22",
        "address": "456 Faith Ave, City, State 12345",
        "emergency_contact_name": "Bob Smith",
        "emergency_contact_phone": "+1234567893",
        "emergency_contact_relationship": "Husband",
        "member_type": "onetime",
    },
]


def insert_sample_data(repo) -> int:
    """
    Add two sample members, each with a monthly membership, when there are
    no members yet. Returns the number of members added.
    """
    if repo.get_members():
        return 0
    for data in SAMPLE_MEMBERS:
        member = repo.add_member(data)
        repo.create_membership(member.id, settings.SAMPLE_MONTHLY_AMOUNT)
    return len(SAMPLE_MEMBERS)
