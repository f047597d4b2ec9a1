"""Facet definitions for listing screens.

Each screen declares its filterable dimensions as a static list of facets.
There is one facet class per kind so the evaluator and the UI can dispatch on
``facet.kind``. Select facets carry a ``match`` mode that decides how the
selected option is compared against an entity's bound field.

Usage:
    from edufilter.filters.facets import SingleSelectFacet, FacetOption, MatchMode

    rating = SingleSelectFacet(
        id="rating",
        label="Rating",
        match=MatchMode.AT_LEAST,
        options=[
            FacetOption("4", "4+ stars", "4"),
            FacetOption("3", "3+ stars", "3"),
        ],
    )
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, List, Optional, Tuple

from edufilter.config.logging_config import get_logger
from edufilter.filters.errors import FacetConfigError

logger = get_logger("facets")


# Selecting this value on a single-select facet imposes no constraint
ALL_VALUE = "all"


class FacetKind(str, Enum):
    """Kinds of filterable dimension."""

    SINGLE_SELECT = "single-select"
    MULTI_SELECT = "multi-select"
    FREE_TEXT_SEARCH = "free-text-search"
    DATE_RANGE = "date-range"
    BOOLEAN_TOGGLE = "boolean-toggle"


class MatchMode(str, Enum):
    """How a selected option is compared against the bound field."""

    EQUALS = "equals"
    AT_LEAST = "at_least"
    IN_RANGE = "in_range"
    WITHIN_DAYS = "within_days"


# Names used by older screen configs
_KIND_ALIASES = {
    "select": FacetKind.SINGLE_SELECT,
    "multiselect": FacetKind.MULTI_SELECT,
    "search": FacetKind.FREE_TEXT_SEARCH,
    "date": FacetKind.DATE_RANGE,
    "toggle": FacetKind.BOOLEAN_TOGGLE,
}


@dataclass(frozen=True)
class FacetOption:
    """One selectable value of a facet.

    ``minimum`` and ``maximum`` are inclusive bounds used by the
    ``at_least``, ``in_range`` and ``within_days`` match modes. When they are
    not given, the option value itself is read as the number.
    """

    id: str
    label: str
    value: Any
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def is_all(self) -> bool:
        return self.value == ALL_VALUE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FacetOption":
        """Create from dictionary."""
        value = data["value"]
        return cls(
            id=str(data.get("id", value)),
            label=str(data.get("label", value)),
            value=value,
            minimum=data.get("minimum"),
            maximum=data.get("maximum"),
        )


@dataclass(frozen=True)
class Facet:
    """Base facet. ``label`` and ``placeholder`` are display metadata only."""

    KIND: ClassVar[Optional[FacetKind]] = None

    id: str
    label: str = ""
    placeholder: str = ""

    @property
    def kind(self) -> Any:
        return self.KIND

    @property
    def state_keys(self) -> Tuple[str, ...]:
        """Keys this facet owns in the active filter state."""
        return (self.id,)

    @property
    def title(self) -> str:
        return self.label or self.id.replace("_", " ").title()


def _same_value(left: Any, right: Any) -> bool:
    return left == right or str(left) == str(right)


@dataclass(frozen=True)
class _OptionFacet(Facet):
    """Shared behaviour of single- and multi-select facets."""

    SUPPORTED_MATCHES: ClassVar[FrozenSet[MatchMode]] = frozenset()

    options: Tuple[FacetOption, ...] = ()
    match: MatchMode = MatchMode.EQUALS

    def __post_init__(self):
        options = tuple(
            opt if isinstance(opt, FacetOption) else FacetOption.from_dict(opt)
            for opt in (self.options or ())
        )
        object.__setattr__(self, "options", options)

        if not options:
            raise FacetConfigError(f"Facet '{self.id}' ({self.kind.value}) requires options")

        seen = set()
        for opt in options:
            key = str(opt.value)
            if key in seen:
                raise FacetConfigError(
                    f"Facet '{self.id}' has duplicate option value '{opt.value}'"
                )
            seen.add(key)

        try:
            match = MatchMode(self.match)
        except ValueError:
            raise FacetConfigError(f"Facet '{self.id}' has unknown match mode '{self.match}'")
        if match not in self.SUPPORTED_MATCHES:
            raise FacetConfigError(
                f"Facet '{self.id}' ({self.kind.value}) does not support match mode '{match.value}'"
            )
        object.__setattr__(self, "match", match)

    def option_for(self, value: Any) -> Optional[FacetOption]:
        """Find the option whose value equals ``value``."""
        for opt in self.options:
            if _same_value(opt.value, value):
                return opt
        return None

    def label_for(self, value: Any) -> str:
        opt = self.option_for(value)
        return opt.label if opt else str(value)


@dataclass(frozen=True)
class SingleSelectFacet(_OptionFacet):
    """Exactly one option may be selected."""

    KIND = FacetKind.SINGLE_SELECT
    SUPPORTED_MATCHES = frozenset(MatchMode)


@dataclass(frozen=True)
class MultiSelectFacet(_OptionFacet):
    """Any number of options; an entity matches if any selected option does."""

    KIND = FacetKind.MULTI_SELECT
    SUPPORTED_MATCHES = frozenset({MatchMode.EQUALS, MatchMode.IN_RANGE})


@dataclass(frozen=True)
class SearchFacet(Facet):
    """Case-insensitive substring search, with optional suggestions."""

    KIND = FacetKind.FREE_TEXT_SEARCH

    suggestions: Tuple[FacetOption, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self,
            "suggestions",
            tuple(
                opt if isinstance(opt, FacetOption) else FacetOption.from_dict(opt)
                for opt in (self.suggestions or ())
            ),
        )


@dataclass(frozen=True)
class DateRangeFacet(Facet):
    """Independent optional from/to bounds stored under ``{id}_from``/``{id}_to``."""

    KIND = FacetKind.DATE_RANGE

    @property
    def from_key(self) -> str:
        return f"{self.id}_from"

    @property
    def to_key(self) -> str:
        return f"{self.id}_to"

    @property
    def state_keys(self) -> Tuple[str, ...]:
        return (self.from_key, self.to_key)


@dataclass(frozen=True)
class ToggleFacet(Facet):
    """Active when checked; unchecked imposes no constraint."""

    KIND = FacetKind.BOOLEAN_TOGGLE


@dataclass(frozen=True)
class UnsupportedFacet(Facet):
    """Placeholder for a facet loaded with a kind this engine does not know.

    The evaluator treats it as always matching.
    """

    raw_kind: str = ""

    @property
    def kind(self) -> Any:
        return self.raw_kind


FACET_CLASSES = {
    FacetKind.SINGLE_SELECT: SingleSelectFacet,
    FacetKind.MULTI_SELECT: MultiSelectFacet,
    FacetKind.FREE_TEXT_SEARCH: SearchFacet,
    FacetKind.DATE_RANGE: DateRangeFacet,
    FacetKind.BOOLEAN_TOGGLE: ToggleFacet,
}


def resolve_kind(raw: Any) -> Optional[FacetKind]:
    """Map a kind name (or legacy alias) to a FacetKind, or None if unknown."""
    if isinstance(raw, FacetKind):
        return raw
    try:
        return FacetKind(raw)
    except ValueError:
        return _KIND_ALIASES.get(str(raw).lower())


def facet_from_dict(data: Dict[str, Any]) -> Facet:
    """
    Build a facet from a plain dictionary.

    Unknown kinds produce an UnsupportedFacet and a warning rather than an
    error, so one bad entry cannot hide a whole screen.

    Args:
        data: Dict with 'id', 'kind' (or 'type'), and optional 'label',
              'placeholder', 'options', 'match', 'suggestions'.

    Returns:
        The facet instance.
    """
    raw_kind = data.get("kind", data.get("type"))
    kind = resolve_kind(raw_kind)
    common = {
        "id": data["id"],
        "label": data.get("label", data.get("title", "")),
        "placeholder": data.get("placeholder", ""),
    }

    if kind is None:
        logger.warning(f"Facet '{data['id']}' has unknown kind '{raw_kind}'; it will match everything")
        return UnsupportedFacet(raw_kind=str(raw_kind), **common)

    if kind in (FacetKind.SINGLE_SELECT, FacetKind.MULTI_SELECT):
        return FACET_CLASSES[kind](
            options=data.get("options") or (),
            match=data.get("match", MatchMode.EQUALS),
            **common,
        )
    if kind == FacetKind.FREE_TEXT_SEARCH:
        return SearchFacet(suggestions=data.get("suggestions") or data.get("options") or (), **common)
    return FACET_CLASSES[kind](**common)


def validate_facets(facets: Iterable[Facet]) -> List[Facet]:
    """
    Check that facet ids and the state keys they own are unique.

    Args:
        facets: Facet definition list for one screen.

    Returns:
        The facets as a list.

    Raises:
        FacetConfigError: On duplicate ids or colliding state keys.
    """
    facets = list(facets)
    ids = set()
    keys = set()

    for facet in facets:
        if facet.id in ids:
            raise FacetConfigError(f"Duplicate facet id '{facet.id}'")
        ids.add(facet.id)
        for key in facet.state_keys:
            if key in keys:
                raise FacetConfigError(f"Facet '{facet.id}' state key '{key}' collides with another facet")
            keys.add(key)

    return facets


def options_from_values(values: Iterable[Any], all_label: Optional[str] = None) -> List[FacetOption]:
    """
    Build options from distinct values, optionally led by an "all" option.

    Args:
        values: Raw values, duplicates and empty values are dropped.
        all_label: Label for a leading "all" option, or None to omit it.

    Returns:
        Sorted list of FacetOption.
    """
    distinct = sorted({v for v in values if v not in (None, "")}, key=str)
    options = [FacetOption(id=ALL_VALUE, label=all_label, value=ALL_VALUE)] if all_label else []
    options.extend(FacetOption(id=str(v), label=str(v), value=v) for v in distinct)
    return options
