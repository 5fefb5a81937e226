"""Shared utilities: datetime and identifier helpers."""

from caseflow.shared.utils.datetime import ensure_utc, hours_between, utc_now
from caseflow.shared.utils.identifiers import generate_cuid, unique_ids

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "hours_between",
    "unique_ids",
    "utc_now",
]
