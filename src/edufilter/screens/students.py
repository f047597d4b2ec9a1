"""Student roster facets (tutor dashboard)."""

from datetime import timedelta
from typing import Any, List, Mapping, Sequence, Set

from edufilter.filters.facets import (
    ALL_VALUE,
    Facet,
    FacetOption,
    MatchMode,
    SingleSelectFacet,
    options_from_values,
)
from edufilter.filters.values import parse_timestamp
from edufilter.screens.base import ScreenConfig, field, flatten, texts, utc_now

SCREEN = "students"

# A student counts as new while their last session is this recent
NEW_STUDENT_DAYS = 30

ACTIVITY_WINDOWS = [
    ("week", "Last week", 7),
    ("month", "Last month", 30),
    ("quarter", "Last quarter", 90),
    ("year", "Last year", 365),
]


def student_status(student: Mapping[str, Any]) -> Set[str]:
    """Status tags: 'active' or 'inactive', plus 'new' for recent students."""
    tags = set()
    total = student.get("total_sessions") or 0
    tags.add("active" if total > 0 else "inactive")

    last_session = parse_timestamp(student.get("last_session"))
    if last_session is None or last_session > utc_now() - timedelta(days=NEW_STUDENT_DAYS):
        tags.add("new")
    return tags


def build_facets(students: Sequence[Mapping[str, Any]]) -> List[Facet]:
    """Facets for the student roster."""
    return [
        SingleSelectFacet(
            id="status",
            label="Status",
            placeholder="Select status",
            options=[
                FacetOption(ALL_VALUE, "All statuses", ALL_VALUE),
                FacetOption("active", "Active", "active"),
                FacetOption("inactive", "Inactive", "inactive"),
                FacetOption("new", "New", "new"),
            ],
        ),
        SingleSelectFacet(
            id="subject",
            label="Subject",
            placeholder="Select subject",
            options=options_from_values(flatten(students, "subjects"), all_label="All subjects"),
        ),
        SingleSelectFacet(
            id="sessions",
            label="Completed sessions",
            placeholder="Select minimum sessions",
            match=MatchMode.AT_LEAST,
            options=[FacetOption(ALL_VALUE, "Any amount", ALL_VALUE)]
            + [FacetOption(str(n), f"{n}+ session{'s' if n > 1 else ''}", str(n)) for n in (10, 5, 1)],
        ),
        SingleSelectFacet(
            id="rating",
            label="Rating",
            placeholder="Select minimum rating",
            match=MatchMode.AT_LEAST,
            options=[FacetOption(ALL_VALUE, "Any rating", ALL_VALUE)]
            + [FacetOption(str(n), f"{n}+ stars", str(n)) for n in (4, 3, 2, 1)],
        ),
        SingleSelectFacet(
            id="last_activity",
            label="Last activity",
            placeholder="Select period",
            match=MatchMode.WITHIN_DAYS,
            options=[FacetOption(ALL_VALUE, "Any period", ALL_VALUE)]
            + [FacetOption(key, label, key, maximum=days) for key, label, days in ACTIVITY_WINDOWS],
        ),
        SingleSelectFacet(
            id="progress",
            label="Progress",
            placeholder="Select progress level",
            options=[
                FacetOption(ALL_VALUE, "Any progress", ALL_VALUE),
                FacetOption("beginner", "Beginner", "beginner"),
                FacetOption("intermediate", "Intermediate", "intermediate"),
                FacetOption("advanced", "Advanced", "advanced"),
            ],
        ),
    ]


BINDINGS = {
    "status": student_status,
    "subject": field("subjects"),
    "sessions": field("completed_sessions"),
    "rating": field("average_rating"),
    "last_activity": field("last_session"),
    "progress": field("progress_level"),
}


CONFIG = ScreenConfig(
    name=SCREEN,
    roles=("tutor",),
    build_facets=build_facets,
    bindings=BINDINGS,
    keyword_fields=texts("name", "email"),
)
