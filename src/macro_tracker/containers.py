"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from macro_tracker.adapters.supabase_day_repository import SupabaseDayRepository
from macro_tracker.adapters.supabase_entry_repository import SupabaseEntryRepository
from macro_tracker.adapters.supabase_saved_workout_repository import (
    SupabaseSavedWorkoutRepository,
)
from macro_tracker.adapters.supabase_target_repository import (
    SupabaseTargetRepository,
)
from macro_tracker.config import Settings
from macro_tracker.services.dates import DateKeyResolver
from macro_tracker.services.days import DayService
from macro_tracker.services.entries import EntryRepository, EntryService
from macro_tracker.services.events import EventBus
from macro_tracker.services.saved_workouts import (
    SavedWorkoutRepository,
    SavedWorkoutService,
)
from macro_tracker.services.targets import (
    TargetRepository,
    TargetResolver,
    TargetService,
)
from macro_tracker.services.totals import DayRepository, TotalsEngine


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    events: EventBus
    dates: DateKeyResolver
    totals_engine: TotalsEngine
    target_service: TargetService
    entry_service: EntryService
    day_service: DayService
    saved_workout_service: SavedWorkoutService


def build_services(
    settings: Settings,
    entry_repository: EntryRepository,
    day_repository: DayRepository,
    target_repository: TargetRepository,
    saved_workout_repository: SavedWorkoutRepository,
) -> AppContainer:
    """Wire services around the given repositories."""
    events = EventBus()
    dates = DateKeyResolver(settings.default_timezone)
    totals_engine = TotalsEngine(
        entry_reader=entry_repository,
        day_repository=day_repository,
        events=events,
    )
    resolver = TargetResolver(
        day_repository=day_repository,
        target_repository=target_repository,
    )
    target_service = TargetService(
        resolver=resolver,
        totals_engine=totals_engine,
        events=events,
    )
    day_service = DayService(
        repository=day_repository,
        resolver=resolver,
        totals_engine=totals_engine,
        dates=dates,
        default_targets=settings.default_targets(),
        new_day_locked=settings.new_day_locked,
    )
    entry_service = EntryService(
        repository=entry_repository,
        totals_engine=totals_engine,
        days=day_service,
        dates=dates,
    )
    saved_workout_service = SavedWorkoutService(
        repository=saved_workout_repository,
        entry_service=entry_service,
        max_saved=settings.max_saved_workouts,
    )
    return AppContainer(
        settings=settings,
        events=events,
        dates=dates,
        totals_engine=totals_engine,
        target_service=target_service,
        entry_service=entry_service,
        day_service=day_service,
        saved_workout_service=saved_workout_service,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    return build_services(
        resolved_settings,
        entry_repository=SupabaseEntryRepository(supabase_client),
        day_repository=SupabaseDayRepository(supabase_client),
        target_repository=SupabaseTargetRepository(supabase_client),
        saved_workout_repository=SupabaseSavedWorkoutRepository(supabase_client),
    )
