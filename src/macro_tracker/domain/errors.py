"""Domain errors."""


class MacroTrackerError(Exception):
    """Base error for the macro tracker."""


class MissingIdentifierError(MacroTrackerError, ValueError):
    """Raised when a user id or date key is missing."""


class InvalidDateKeyError(MacroTrackerError, ValueError):
    """Raised when a date key is not a YYYY-MM-DD calendar date."""


class InvalidEntryError(MacroTrackerError, ValueError):
    """Raised when a food or workout entry is missing required fields."""


class SavedWorkoutLimitError(MacroTrackerError):
    """Raised when a user already has the maximum number of saved workouts."""


def require_identifiers(
    operation: str, user_id: str | None, date_key: str | None
) -> None:
    """Fail fast when either identifier is empty."""
    if not user_id or not str(user_id).strip():
        raise MissingIdentifierError(f"{operation}: missing user_id")
    if not date_key or not str(date_key).strip():
        raise MissingIdentifierError(f"{operation}: missing date_key")


def require_user_id(operation: str, user_id: str | None) -> None:
    """Fail fast when the user id is empty."""
    if not user_id or not str(user_id).strip():
        raise MissingIdentifierError(f"{operation}: missing user_id")
