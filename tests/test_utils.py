import io
import pandas as pd
import pytest
from datetime import date, datetime
from unittest.mock import patch

import utils
from models import EmergencyContact
from tests.conftest import member_data

# run via: pytest tests/test_utils.py -v


class TestAddMonths:

    @pytest.mark.parametrize("start, expected", [
        (date(2026, 1, 15), date(2026, 2, 15)),
        (date(2026, 1, 31), date(2026, 2, 28)),
        (date(2028, 1, 31), date(2028, 2, 29)),
        (date(2026, 12, 10), date(2027, 1, 10)),
        (date(2026, 3, 31), date(2026, 4, 30)),
    ])
    def test_one_month(self, start, expected):
        assert utils.add_months(start, 1) == expected


class TestAsDate:

    def test_none_is_today(self):
        with patch("utils.date") as fake_date:
            fake_date.today.return_value = date(2026, 3, 15)
            assert utils.as_date(None) == date(2026, 3, 15)

    def test_datetime_truncated(self):
        assert utils.as_date(datetime(2026, 3, 15, 18, 30)) == date(2026, 3, 15)

    def test_iso_string(self):
        assert utils.as_date("2026-03-15") == date(2026, 3, 15)


class TestWeekBounds:

    def test_midweek(self):
        assert utils.week_bounds(date(2026, 3, 11)) == (date(2026, 3, 9), date(2026, 3, 15))

    def test_monday_and_sunday(self):
        assert utils.week_bounds(date(2026, 3, 9))[0] == date(2026, 3, 9)
        assert utils.week_bounds(date(2026, 3, 15))[0] == date(2026, 3, 9)

    def test_spans_year_end(self):
        assert utils.week_bounds(date(2026, 1, 1)) == (date(2025, 12, 29), date(2026, 1, 4))


class TestValidation:

    def _fields(self, **overrides):
        fields = {
            "first_name": "John",
            "last_name": "Doe",
            "phone": "+1234567890",
            "emergency_contact": EmergencyContact("Jane", "+1234567891", "Spouse"),
            "member_type": "fulltime",
        }
        fields.update(overrides)
        return fields

    def test_valid(self):
        assert utils.validate_member_inputs(self._fields()) == []

    def test_short_phone(self):
        assert "Please enter a valid phone number." in utils.validate_member_inputs(self._fields(phone="12345"))

    def test_bad_email(self):
        assert utils.validate_member_inputs(self._fields(email="nope")) == ["Please enter a valid email address."]

    def test_missing_contact(self):
        fields = self._fields()
        del fields["emergency_contact"]
        assert utils.validate_member_inputs(fields) == ["Emergency contact is required."]

    def test_partial_checks_only_given_fields(self):
        assert utils.validate_member_inputs({"is_active": False}, partial=True) == []
        assert utils.validate_member_inputs({"last_name": ""}, partial=True) == ["Last name is required."]

    @pytest.mark.parametrize("amount, ok", [(50, True), ("12.5", True), (0, False), (-3, False), ("x", False), ("nan", False), (float("inf"), False)])
    def test_amount(self, amount, ok):
        assert (utils.validate_amount(amount) == []) is ok

    def test_payment_method(self):
        assert utils.validate_payment_inputs(50, "cash") == []
        assert len(utils.validate_payment_inputs(0, "paypal")) == 2


class TestFormatting:

    def test_currency(self):
        with patch.object(utils.settings, "CURRENCY_CODE", "KES"):
            assert utils.format_currency(1234.5) == "KES 1,234.50"

    def test_date(self):
        assert utils.format_date(date(2026, 3, 9)) == "Mar 09, 2026"

    def test_date_unparseable_passthrough(self):
        assert utils.format_date("soon") == "soon"


class TestExports:

    def test_members_csv(self, repo):
        repo.add_member(member_data(), today=date(2026, 3, 9))
        df = pd.read_csv(io.BytesIO(utils.members_to_csv_bytes(repo.get_members())))
        assert df.loc[0, "first_name"] == "John"
        assert df.loc[0, "emergency_contact_relationship"] == "Spouse"
        assert df.loc[0, "join_date"] == "2026-03-09"

    def test_payments_csv(self, repo, member, membership):
        from lifecycle import record_payment
        record_payment(repo, membership.id, member.id, 50, "cash", now=date(2026, 1, 9))
        df = pd.read_csv(io.BytesIO(utils.payments_to_csv_bytes(repo.get_payments())))
        assert df.loc[0, "amount"] == 50.0
        assert df.loc[0, "payment_method"] == "cash"


class TestSampleData:

    def test_inserts_once(self, repo):
        assert utils.insert_sample_data(repo) == 2
        assert utils.insert_sample_data(repo) == 0
        members = repo.get_members()
        assert [m.first_name for m in members] == ["John", "Mary"]
        assert {m.member_type for m in members} == {"fulltime", "onetime"}
        for m in members:
            assert repo.get_membership_by_member_id(m.id).monthly_amount == 50.0
