"""Shared domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DayKey:
    """Identifies a single user's calendar day."""

    user_id: str
    date_key: str
