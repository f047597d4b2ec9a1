"""Shared resource library facets (student and tutor dashboards)."""

from typing import Any, List, Mapping, Sequence, Set

from edufilter.filters.facets import (
    ALL_VALUE,
    DateRangeFacet,
    Facet,
    FacetOption,
    MatchMode,
    MultiSelectFacet,
    SearchFacet,
    SingleSelectFacet,
    options_from_values,
)
from edufilter.screens.base import ScreenConfig, field, texts

SCREEN = "resources"

MB = 1024 * 1024

FILE_TYPES = [
    ("pdf", "PDF"),
    ("doc", "Word document"),
    ("docx", "Word document (docx)"),
    ("ppt", "Presentation"),
    ("pptx", "Presentation (pptx)"),
    ("image", "Image"),
    ("video", "Video"),
    ("other", "Other"),
]


def file_categories(resource: Mapping[str, Any]) -> Set[str]:
    """Classify a resource's MIME type or extension into file-type option values."""
    file_type = (resource.get("file_type") or "").lower()
    tags = set()
    if "pdf" in file_type:
        tags.add("pdf")
    if "doc" in file_type:
        tags.update({"doc", "docx"})
    if "ppt" in file_type or "presentation" in file_type:
        tags.update({"ppt", "pptx"})
    if "image" in file_type or "jpg" in file_type or "jpeg" in file_type or "png" in file_type:
        tags.add("image")
    if "video" in file_type or "mp4" in file_type:
        tags.add("video")
    return tags or {"other"}


def build_facets(resources: Sequence[Mapping[str, Any]]) -> List[Facet]:
    """Facets for the resource library."""
    tutors = sorted({r["tutor_name"] for r in resources if r.get("tutor_name")})

    return [
        SingleSelectFacet(
            id="subject",
            label="Subject",
            placeholder="Select subject",
            options=options_from_values(
                (r.get("subject_name") for r in resources), all_label="All subjects"
            ),
        ),
        MultiSelectFacet(
            id="file_type",
            label="File type",
            placeholder="Select types",
            options=[FacetOption(key, label, key) for key, label in FILE_TYPES],
        ),
        SearchFacet(
            id="tutor",
            label="Tutor",
            placeholder="Search by tutor...",
            suggestions=[FacetOption(name, name, name) for name in tutors],
        ),
        DateRangeFacet(id="date", label="Published"),
        SingleSelectFacet(
            id="size",
            label="Size",
            placeholder="Select size",
            match=MatchMode.IN_RANGE,
            options=[
                FacetOption(ALL_VALUE, "Any size", ALL_VALUE),
                FacetOption("small", "Small (< 1MB)", "small", maximum=MB - 1),
                FacetOption("medium", "Medium (1-10MB)", "medium", minimum=MB, maximum=10 * MB),
                FacetOption("large", "Large (> 10MB)", "large", minimum=10 * MB + 1),
            ],
        ),
        SingleSelectFacet(
            id="popularity",
            label="Popularity",
            placeholder="Select popularity",
            match=MatchMode.IN_RANGE,
            options=[
                FacetOption(ALL_VALUE, "Any popularity", ALL_VALUE),
                FacetOption("high", "Very popular", "high", minimum=50),
                FacetOption("medium", "Popular", "medium", minimum=10, maximum=49),
                FacetOption("low", "Less popular", "low", minimum=0, maximum=9),
            ],
        ),
    ]


BINDINGS = {
    "subject": field("subject_name"),
    "file_type": file_categories,
    "tutor": field("tutor_name"),
    "date": field("created_at"),
    "size": field("file_size"),
    "popularity": field("download_count"),
}


CONFIG = ScreenConfig(
    name=SCREEN,
    roles=("student", "tutor"),
    build_facets=build_facets,
    bindings=BINDINGS,
    keyword_fields=texts("title", "description", "tutor_name", "subject_name"),
)
