"""Tutoring session facets (tutor dashboard)."""

from typing import Any, List, Mapping, Sequence

from edufilter.filters.facets import (
    ALL_VALUE,
    DateRangeFacet,
    Facet,
    FacetOption,
    MatchMode,
    SingleSelectFacet,
    options_from_values,
)
from edufilter.screens.base import ScreenConfig, field, texts

SCREEN = "sessions"

SESSION_STATUSES = [
    ("scheduled", "Scheduled"),
    ("in_progress", "In progress"),
    ("completed", "Completed"),
    ("cancelled", "Cancelled"),
]

SESSION_TYPES = [
    ("presencial", "In person"),
    ("virtual", "Virtual"),
]


def build_facets(sessions: Sequence[Mapping[str, Any]]) -> List[Facet]:
    """Facets for the session list."""
    return [
        SingleSelectFacet(
            id="status",
            label="Status",
            placeholder="Select status",
            options=[FacetOption(ALL_VALUE, "All statuses", ALL_VALUE)]
            + [FacetOption(key, label, key) for key, label in SESSION_STATUSES],
        ),
        SingleSelectFacet(
            id="subject",
            label="Subject",
            placeholder="Select subject",
            options=options_from_values(
                (s.get("subject_name") for s in sessions), all_label="All subjects"
            ),
        ),
        SingleSelectFacet(
            id="session_type",
            label="Session type",
            placeholder="Select type",
            options=[FacetOption(ALL_VALUE, "All types", ALL_VALUE)]
            + [FacetOption(key, label, key) for key, label in SESSION_TYPES],
        ),
        DateRangeFacet(id="date", label="Date"),
        SingleSelectFacet(
            id="duration",
            label="Duration",
            placeholder="Select duration",
            match=MatchMode.IN_RANGE,
            options=[
                FacetOption(ALL_VALUE, "Any duration", ALL_VALUE),
                FacetOption("short", "Short (< 30 min)", "short", maximum=29),
                FacetOption("medium", "Medium (30-90 min)", "medium", minimum=30, maximum=90),
                FacetOption("long", "Long (> 90 min)", "long", minimum=91),
            ],
        ),
        SingleSelectFacet(
            id="participants",
            label="Participants",
            placeholder="Select participants",
            match=MatchMode.IN_RANGE,
            options=[
                FacetOption(ALL_VALUE, "Any amount", ALL_VALUE),
                FacetOption("low", "Few (1-3)", "low", minimum=1, maximum=3),
                FacetOption("medium", "Some (4-8)", "medium", minimum=4, maximum=8),
                FacetOption("high", "Many (9+)", "high", minimum=9),
            ],
        ),
    ]


BINDINGS = {
    "status": field("status"),
    "subject": field("subject_name"),
    "session_type": field("session_type"),
    "date": field("start_time"),
    "duration": field("duration_minutes"),
    "participants": field("participant_count"),
}


CONFIG = ScreenConfig(
    name=SCREEN,
    roles=("tutor",),
    build_facets=build_facets,
    bindings=BINDINGS,
    keyword_fields=texts("title", "subject_name"),
)
