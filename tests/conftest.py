import pytest
from datetime import date

from db import Store
from repository import Repository

# A Wednesday; its week runs Mon 2026-03-09 .. Sun 2026-03-15
WEEK_REF = date(2026, 3, 11)
WEEK_START = date(2026, 3, 9)
WEEK_END = date(2026, 3, 15)


def member_data(first_name="John", last_name="Doe", member_type="fulltime", **overrides):
    data = {
        "first_name": first_name,
        "last_name": last_name,
        "phone": "+1234567890",
        "date_of_birth": "1980-05-15",
        "address": "123 Church St, City, State 12345",
        "emergency_contact_name": "Jane Doe",
        "emergency_contact_phone": "+1234567891",
        "emergency_contact_relationship": "Spouse",
        "member_type": member_type,
    }
    data.update(overrides)
    return data


@pytest.fixture()
def store(tmp_path):
    return Store(tmp_path / "members.db")


@pytest.fixture()
def repo(store):
    return Repository(store)


@pytest.fixture()
def member(repo):
    return repo.add_member(member_data(), today=date(2026, 1, 5))


@pytest.fixture()
def membership(repo, member):
    return repo.create_membership(member.id, 50, today=date(2026, 1, 5))
