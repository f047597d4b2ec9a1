"""Facet definitions and field bindings for each listing screen.

Usage:
    from edufilter.screens import create_controller

    controller = create_controller("tutors", role="student", entities=tutors)
    controller.set_facet_value("rating", "4")
"""

from typing import Any, Callable, Dict, Optional
from datetime import datetime

from edufilter.filters.controller import FilterPanelController, to_records
from edufilter.filters.presets import PresetStore, namespace_for
from edufilter.screens import conversations, resources, sessions, students, tutors
from edufilter.screens.base import ScreenConfig

SCREENS: Dict[str, ScreenConfig] = {
    module.CONFIG.name: module.CONFIG
    for module in (tutors, students, resources, sessions, conversations)
}


def get_screen(name: str) -> ScreenConfig:
    """
    Look up a screen configuration.

    Raises:
        ValueError: If no screen has that name.
    """
    if name not in SCREENS:
        raise ValueError(f"Unknown screen '{name}'. Available: {', '.join(sorted(SCREENS))}")
    return SCREENS[name]


def create_controller(
    screen: str,
    role: str,
    entities: Any = None,
    store: Optional[PresetStore] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> FilterPanelController:
    """
    Build the filter panel controller for a screen.

    Args:
        screen: Screen name ('tutors', 'students', 'resources', 'sessions',
                'conversations').
        role: Viewing user's role ('student' or 'tutor').
        entities: Records already fetched by the screen. Facet options that
                  come from the data (subjects, tutors, students) are built
                  from them. None starts the controller in the loading state.
        store: Preset store shared by the screens.
        now: Clock for relative date facets.

    Returns:
        Controller with presets namespaced to this role and screen.

    Raises:
        ValueError: If the screen is unknown or not shown to that role.
    """
    config = get_screen(screen)
    if role not in config.roles:
        raise ValueError(f"Screen '{screen}' is not available to role '{role}'")

    records = to_records(entities) if entities is not None else None
    return FilterPanelController(
        facets=config.build_facets(records or []),
        bindings=config.bindings,
        keyword_fields=config.keyword_fields,
        entities=records,
        store=store,
        namespace=namespace_for(role, screen),
        now=now,
    )


def refresh_controller(controller: FilterPanelController, screen: str, entities: Any) -> int:
    """
    Feed a refreshed entity collection to an existing controller.

    Data-derived facet options are rebuilt first so selections made while
    the screen was loading are checked against the new options.

    Returns:
        New match count.
    """
    records = to_records(entities)
    controller.set_facets(get_screen(screen).build_facets(records))
    return controller.set_entities(records)


__all__ = [
    "SCREENS",
    "ScreenConfig",
    "get_screen",
    "create_controller",
    "refresh_controller",
]
