"""Tutor directory facets (student dashboard)."""

from typing import Any, List, Mapping, Sequence

from edufilter.filters.facets import (
    ALL_VALUE,
    Facet,
    FacetOption,
    MatchMode,
    SearchFacet,
    SingleSelectFacet,
    options_from_values,
)
from edufilter.screens.base import ScreenConfig, field, flatten

SCREEN = "tutors"

# Minimum completed sessions for each experience level
EXPERIENCE_LEVELS = [
    ("expert", "Expert", 100),
    ("advanced", "Advanced", 50),
    ("intermediate", "Intermediate", 20),
    ("beginner", "Beginner", 5),
]

AVAILABILITY_SLOTS = [
    ("morning", "Morning"),
    ("afternoon", "Afternoon"),
    ("evening", "Evening"),
    ("weekend", "Weekend"),
]


def _rating_options() -> List[FacetOption]:
    options = [FacetOption(ALL_VALUE, "Any rating", ALL_VALUE)]
    for stars in (4, 3, 2, 1):
        options.append(FacetOption(str(stars), f"{stars}+ star{'s' if stars > 1 else ''}", str(stars)))
    return options


def build_facets(tutors: Sequence[Mapping[str, Any]]) -> List[Facet]:
    """Facets for the tutor directory, with subjects and locations taken from the data."""
    locations = sorted({t["location"] for t in tutors if t.get("location")})

    return [
        SingleSelectFacet(
            id="subject",
            label="Subject",
            placeholder="Select subject",
            options=options_from_values(flatten(tutors, "subjects"), all_label="All subjects"),
        ),
        SingleSelectFacet(
            id="rating",
            label="Rating",
            placeholder="Select minimum rating",
            match=MatchMode.AT_LEAST,
            options=_rating_options(),
        ),
        SingleSelectFacet(
            id="experience",
            label="Experience",
            placeholder="Select experience level",
            match=MatchMode.AT_LEAST,
            options=[FacetOption(ALL_VALUE, "Any experience", ALL_VALUE)]
            + [FacetOption(key, label, key, minimum=floor) for key, label, floor in EXPERIENCE_LEVELS],
        ),
        SingleSelectFacet(
            id="sessions",
            label="Completed sessions",
            placeholder="Select minimum sessions",
            match=MatchMode.AT_LEAST,
            options=[FacetOption(ALL_VALUE, "Any amount", ALL_VALUE)]
            + [FacetOption(str(n), f"{n}+ sessions", str(n)) for n in (50, 25, 10, 5)],
        ),
        SearchFacet(
            id="location",
            label="Location",
            placeholder="Search by location...",
            suggestions=[FacetOption(loc, loc, loc) for loc in locations],
        ),
        SingleSelectFacet(
            id="availability",
            label="Availability",
            placeholder="Select availability",
            options=[FacetOption(ALL_VALUE, "Any availability", ALL_VALUE)]
            + [FacetOption(key, label, key) for key, label in AVAILABILITY_SLOTS],
        ),
    ]


BINDINGS = {
    "subject": field("subjects"),
    "rating": field("average_rating"),
    "experience": field("completed_sessions"),
    "sessions": field("completed_sessions"),
    "location": field("location"),
    "availability": field("availability"),
}


def keyword_fields(tutor: Mapping[str, Any]) -> List[str]:
    return [tutor.get("name") or ""] + list(tutor.get("subjects") or [])


CONFIG = ScreenConfig(
    name=SCREEN,
    roles=("student",),
    build_facets=build_facets,
    bindings=BINDINGS,
    keyword_fields=keyword_fields,
)
