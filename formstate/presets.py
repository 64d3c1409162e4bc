"""Preconfigured controllers for the application's common forms."""

from typing import Any, Optional

from tzlocal import get_localzone_name

from formstate.config import AutoSaveHandler, AutoSaveOptions
from formstate.controller import FormController, create_form
from formstate.schemas import CONTACT_SCHEMA, COACH_SEARCH_SCHEMA, PROFILE_SCHEMA


def _local_timezone() -> str:
    """IANA name of the local zone, e.g. "Europe/Berlin"."""
    return get_localzone_name() or "UTC"


def contact_form(**overrides: Any) -> FormController:
    """Contact form validated while typing, with a 500 ms quiet period."""
    options = dict(
        schema=CONTACT_SCHEMA,
        initial_data={
            "name": "",
            "email": "",
            "subject": "",
            "message": "",
            "category": "general",
            "priority": "normal",
        },
        validate_on_change=True,
        debounce_ms=500,
    )
    options.update(overrides)
    return create_form(**options)


def profile_form(on_auto_save: Optional[AutoSaveHandler] = None, **overrides: Any) -> FormController:
    """Profile editor; auto-saves two seconds after the last edit when given a callback."""
    options = dict(
        schema=PROFILE_SCHEMA,
        initial_data={
            "firstName": "",
            "lastName": "",
            "email": "",
            "phone": "",
            "bio": "",
            "location": "",
            "timezone": _local_timezone(),
            "language": "English",
            "visibility": "public",
        },
        validate_on_change=True,
        validate_on_blur=True,
        debounce_ms=300,
        auto_save=AutoSaveOptions(
            enabled=on_auto_save is not None,
            on_auto_save=on_auto_save,
            interval_ms=2000,
        ),
    )
    options.update(overrides)
    return create_form(**options)


def search_form(**overrides: Any) -> FormController:
    """Coach search filters; validated only on submit."""
    options = dict(
        schema=COACH_SEARCH_SCHEMA,
        initial_data={
            "query": "",
            "specializations": [],
            "languages": [],
            "location": "",
            "priceRange": {"min": None, "max": None},
            "availability": "any",
            "rating": None,
            "experience": "any",
        },
        validate_on_change=False,
        validate_on_blur=False,
        debounce_ms=500,
    )
    options.update(overrides)
    return create_form(**options)


__all__ = [
    "contact_form",
    "profile_form",
    "search_form",
]
