"""Sync engine for PyVeloce - pull/push of UI definitions."""

from .engine import SyncEngine
from .members import Member, MemberFilter, MemberType
from .report import RecordResult, RecordStatus, SyncReport

__all__ = [
    "SyncEngine",
    "Member",
    "MemberFilter",
    "MemberType",
    "RecordResult",
    "RecordStatus",
    "SyncReport",
]
