"""Shared screen configuration types and binding helpers."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Tuple

from edufilter.filters.facets import Facet
from edufilter.filters.predicates import Binding, KeywordFields


@dataclass(frozen=True)
class ScreenConfig:
    """Everything a listing screen hands to its filter panel."""

    name: str
    roles: Tuple[str, ...]
    build_facets: Callable[[Sequence[Any]], List[Facet]]
    bindings: Mapping[str, Binding]
    keyword_fields: KeywordFields


def field(name: str) -> Binding:
    """Binding that reads one key of a record."""
    return lambda record: record.get(name)


def texts(*names: str) -> KeywordFields:
    """Keyword fields reading several string keys of a record."""
    return lambda record: [record.get(n) or "" for n in names]


def flatten(records: Iterable[Mapping], name: str) -> List[Any]:
    """Collect a list-valued key across records."""
    values = []
    for record in records:
        values.extend(record.get(name) or [])
    return values


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
