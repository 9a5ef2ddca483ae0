"""Response tracking: models, fingerprints and storage.

Public API:
- TrackerRepository: SQLite storage for buffers, event markers and responses
- ApplicationRecord: a stored response
- CandidateRecord: a parsed response not yet stored
- StatusTag, RoleTag, GradeTag: closed tag enums
- StatsWindow, Stats: windowed aggregation types
- compute_fingerprint: dedup key of a response

TrackerService lives in ``hh_tracker.tracker.service``; it depends on the
parser, which in turn depends on these models.
"""

from hh_tracker.tracker.fingerprint import compute_fingerprint
from hh_tracker.tracker.models import (
    UNKNOWN,
    ApplicationRecord,
    CandidateRecord,
    GradeTag,
    RoleTag,
    Stats,
    StatsWindow,
    StatusTag,
)
from hh_tracker.tracker.repository import TrackerRepository

__all__ = [
    "UNKNOWN",
    "ApplicationRecord",
    "CandidateRecord",
    "GradeTag",
    "RoleTag",
    "Stats",
    "StatsWindow",
    "StatusTag",
    "TrackerRepository",
    "compute_fingerprint",
]
