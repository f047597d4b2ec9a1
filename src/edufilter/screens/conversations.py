"""Conversation list facets (tutor messages).

Each conversation record carries the viewing tutor's id under ``tutor_id``
and its messages under ``messages`` so the status and content bindings can
look at individual messages.
"""

from typing import Any, List, Mapping, Sequence, Set

from edufilter.filters.facets import (
    ALL_VALUE,
    DateRangeFacet,
    Facet,
    FacetOption,
    SearchFacet,
    SingleSelectFacet,
    ToggleFacet,
)
from edufilter.screens.base import ScreenConfig, field, texts

SCREEN = "conversations"

SUGGESTION_LABEL_LENGTH = 50


def message_status(conversation: Mapping[str, Any]) -> Set[str]:
    """Status tags derived from the conversation's messages."""
    me = conversation.get("tutor_id")
    tags = set()
    for message in conversation.get("messages") or []:
        incoming = message.get("sender_id") != me
        if incoming:
            tags.add("read" if message.get("is_read") else "unread")
        else:
            tags.add("sent")
        if message.get("receiver_id") == me:
            tags.add("received")
    return tags


def content_types(conversation: Mapping[str, Any]) -> Set[str]:
    """Kinds of content found in the conversation's messages."""
    tags = set()
    for message in conversation.get("messages") or []:
        content = (message.get("content") or "").lower()
        if "file" in content or "document" in content:
            tags.add("file")
        if "image" in content or "photo" in content:
            tags.add("image")
        if "http" not in content and "file" not in content:
            tags.add("text")
    return tags


def message_contents(conversation: Mapping[str, Any]) -> List[str]:
    return [m.get("content") or "" for m in conversation.get("messages") or []]


def _preview(text: str) -> str:
    if len(text) > SUGGESTION_LABEL_LENGTH:
        return text[:SUGGESTION_LABEL_LENGTH] + "..."
    return text


def build_facets(conversations: Sequence[Mapping[str, Any]]) -> List[Facet]:
    """Facets for the conversation list, with students and messages taken from the data."""
    students = {}
    contents = {}
    for conversation in conversations:
        if conversation.get("student_id"):
            students[conversation["student_id"]] = conversation.get("student_name") or conversation["student_id"]
        for content in message_contents(conversation):
            if content:
                contents.setdefault(content, _preview(content))

    return [
        SingleSelectFacet(
            id="status",
            label="Status",
            placeholder="Select status",
            options=[
                FacetOption(ALL_VALUE, "All", ALL_VALUE),
                FacetOption("unread", "Unread", "unread"),
                FacetOption("read", "Read", "read"),
                FacetOption("sent", "Sent", "sent"),
                FacetOption("received", "Received", "received"),
            ],
        ),
        SingleSelectFacet(
            id="student",
            label="Student",
            placeholder="Select student",
            options=[FacetOption(ALL_VALUE, "All students", ALL_VALUE)]
            + [FacetOption(str(sid), name, sid) for sid, name in sorted(students.items(), key=lambda kv: kv[1])],
        ),
        DateRangeFacet(id="date", label="Date range"),
        SingleSelectFacet(
            id="content_type",
            label="Content type",
            placeholder="Select type",
            options=[
                FacetOption(ALL_VALUE, "All", ALL_VALUE),
                FacetOption("text", "Text", "text"),
                FacetOption("file", "File", "file"),
                FacetOption("image", "Image", "image"),
            ],
        ),
        SingleSelectFacet(
            id="priority",
            label="Priority",
            placeholder="Select priority",
            options=[
                FacetOption(ALL_VALUE, "All", ALL_VALUE),
                FacetOption("high", "High", "high"),
                FacetOption("normal", "Normal", "normal"),
                FacetOption("low", "Low", "low"),
            ],
        ),
        SearchFacet(
            id="search_content",
            label="Search messages",
            placeholder="Search in messages...",
            suggestions=[FacetOption(content, label, content) for content, label in contents.items()],
        ),
        ToggleFacet(id="unread_only", label="Unread", placeholder="Only conversations with unread messages"),
    ]


BINDINGS = {
    "status": message_status,
    "student": field("student_id"),
    "date": field("last_message_time"),
    "content_type": content_types,
    "priority": field("priority"),
    "search_content": message_contents,
    "unread_only": lambda c: (c.get("unread_count") or 0) > 0,
}


CONFIG = ScreenConfig(
    name=SCREEN,
    roles=("tutor",),
    build_facets=build_facets,
    bindings=BINDINGS,
    keyword_fields=texts("student_name", "last_message"),
)
