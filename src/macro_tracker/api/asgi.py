"""ASGI entrypoint for the macro tracker API."""

import logging

from macro_tracker.api.app import create_app
from macro_tracker.config import Settings
from macro_tracker.containers import build_container

settings = Settings()
app = create_app(build_container(settings))
logging.getLogger(__name__).info(
    "Macro tracker ready (environment=%s, timezone=%s)",
    settings.environment,
    settings.default_timezone,
)
