"""
errors.py
Error kinds raised by the core (repository, lifecycle, stats, db).
"""

from __future__ import annotations


class CoreError(Exception):
    """Base class; the UI catches this and shows the message."""


class NotFound(CoreError):
    def __init__(self, kind: str, ident: str):
        super().__init__(f"{kind} not found: {ident}")
        self.kind = kind
        self.ident = ident


class InvalidInput(CoreError):
    pass


class MembershipExists(InvalidInput):
    def __init__(self, member_id: str):
        super().__init__(f"Member {member_id} already has a membership.")
        self.member_id = member_id


class StorageError(CoreError):
    pass
