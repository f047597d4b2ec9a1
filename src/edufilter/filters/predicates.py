"""Predicate evaluation for faceted filtering.

An entity is included when it satisfies every active facet (AND across
facets). Facets absent from the state impose no constraint. Within a
multi-select facet any selected option is enough (OR within the facet).

Configuration problems never hide results: an unknown facet kind or a
selected value that is not one of the facet's options is logged once and
treated as matching (fail-open).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from edufilter.config.logging_config import get_logger
from edufilter.filters.facets import (
    ALL_VALUE,
    DateRangeFacet,
    Facet,
    FacetKind,
    FacetOption,
    MatchMode,
)
from edufilter.filters.values import as_values, is_missing, parse_bound, parse_timestamp, to_number

logger = get_logger("predicates")

Binding = Callable[[Any], Any]
KeywordFields = Callable[[Any], Iterable[Any]]


class _Missing:
    def __repr__(self):
        return "MISSING"


# Returned by a binding when the entity has no value for the facet
MISSING = _Missing()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def read_field(entity: Any, name: str) -> Any:
    """Read a field from a mapping or an object, MISSING if absent."""
    if isinstance(entity, Mapping):
        return entity.get(name, MISSING)
    return getattr(entity, name, MISSING)


def _default_keyword_fields(entity: Any) -> Iterable[Any]:
    if isinstance(entity, Mapping):
        return [v for v in entity.values() if isinstance(v, str)]
    return [v for v in vars(entity).values() if isinstance(v, str)]


def _same_value(left: Any, right: Any) -> bool:
    return left == right or str(left) == str(right)


class PredicateEvaluator:
    """
    Decide entity inclusion for one screen's facets.

    Args:
        facets: Facet definitions for the screen.
        bindings: Facet id to function reading the comparable value from an
                  entity. Facets without a binding read the field named
                  after the facet id.
        keyword_fields: Function returning the strings the basic keyword
                        search looks at. Defaults to every string field.
        now: Clock used by 'within_days' facets, returns naive UTC.
    """

    def __init__(
        self,
        facets: Sequence[Facet],
        bindings: Optional[Mapping[str, Binding]] = None,
        keyword_fields: Optional[KeywordFields] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.facets = list(facets)
        self.bindings = dict(bindings or {})
        self.keyword_fields = keyword_fields or _default_keyword_fields
        self.now = now or _utc_now
        self._reported = set()

    def _report(self, facet_id: str, message: str) -> None:
        """Log a configuration problem once per facet and message."""
        key = (facet_id, message)
        if key not in self._reported:
            self._reported.add(key)
            logger.warning(f"Facet '{facet_id}': {message}; not filtering on it")

    def bind(self, facet: Facet, entity: Any) -> Any:
        """Read the facet's comparable value from an entity."""
        binding = self.bindings.get(facet.id)
        try:
            value = binding(entity) if binding else read_field(entity, facet.id)
        except (KeyError, AttributeError, TypeError, ValueError, IndexError) as e:
            logger.debug(f"Binding for '{facet.id}' failed: {e}")
            return MISSING
        return MISSING if is_missing(value) else value

    # -------------------------------------------------------------------------
    # Per-kind matching
    # -------------------------------------------------------------------------

    def _match_option(self, facet: Facet, option: FacetOption, value: Any, now: datetime) -> bool:
        match = facet.match
        candidates = as_values(value)

        if match == MatchMode.EQUALS:
            return any(_same_value(v, option.value) for v in candidates)

        if match == MatchMode.AT_LEAST:
            floor = option.minimum if option.minimum is not None else to_number(option.value)
            if floor is None:
                self._report(facet.id, f"option '{option.id}' has no numeric floor")
                return True
            numbers = [to_number(v) for v in candidates]
            return any(n is not None and n >= floor for n in numbers)

        if match == MatchMode.IN_RANGE:
            low, high = option.minimum, option.maximum
            if low is None and high is None:
                self._report(facet.id, f"option '{option.id}' has no range bounds")
                return True
            numbers = [to_number(v) for v in candidates]
            return any(
                n is not None and (low is None or n >= low) and (high is None or n <= high)
                for n in numbers
            )

        if match == MatchMode.WITHIN_DAYS:
            days = option.maximum if option.maximum is not None else to_number(option.value)
            if days is None:
                self._report(facet.id, f"option '{option.id}' has no day window")
                return True
            cutoff = now - timedelta(days=days)
            stamps = [parse_timestamp(v) for v in candidates]
            return any(ts is not None and ts > cutoff for ts in stamps)

        self._report(facet.id, f"unknown match mode '{match}'")
        return True

    def _match_single(self, facet: Facet, selected: Any, entity: Any, now: datetime) -> bool:
        if _same_value(selected, ALL_VALUE):
            return True
        option = facet.option_for(selected)
        if option is None:
            self._report(facet.id, f"selected value '{selected}' is not an option")
            return True
        if option.is_all:
            return True
        value = self.bind(facet, entity)
        if value is MISSING:
            return False
        return self._match_option(facet, option, value, now)

    def _match_multi(self, facet: Facet, selected: Any, entity: Any, now: datetime) -> bool:
        options = []
        for choice in as_values(selected):
            option = facet.option_for(choice)
            if option is None:
                self._report(facet.id, f"selected value '{choice}' is not an option")
            elif not option.is_all:
                options.append(option)
        if not options:
            return True
        value = self.bind(facet, entity)
        if value is MISSING:
            return False
        return any(self._match_option(facet, option, value, now) for option in options)

    def _match_search(self, facet: Facet, selected: Any, entity: Any) -> bool:
        needle = str(selected).casefold()
        if not needle.strip():
            return True
        value = self.bind(facet, entity)
        if value is MISSING:
            return False
        return any(needle in str(v).casefold() for v in as_values(value) if v is not None)

    def _bound(self, facet: Facet, raw: Any):
        if raw is None:
            return None
        try:
            return parse_bound(raw)
        except ValueError:
            self._report(facet.id, f"date bound {raw!r} is not a date")
            return None

    def _match_dates(self, facet: DateRangeFacet, state: Mapping, entity: Any) -> bool:
        start = self._bound(facet, state.get(facet.from_key))
        end = self._bound(facet, state.get(facet.to_key))
        if start is None and end is None:
            return True
        value = self.bind(facet, entity)
        if value is MISSING:
            return False
        stamp = parse_timestamp(value)
        if stamp is None:
            return False

        if start is not None:
            left = stamp if isinstance(start, datetime) else stamp.date()
            if left < start:
                return False
        if end is not None:
            left = stamp if isinstance(end, datetime) else stamp.date()
            if left > end:
                return False
        return True

    def _match_toggle(self, facet: Facet, selected: Any, entity: Any) -> bool:
        if not selected:
            return True
        value = self.bind(facet, entity)
        if value is MISSING:
            return False
        return bool(value)

    def match_facet(self, facet: Facet, state: Mapping, entity: Any, now: Optional[datetime] = None) -> bool:
        """Check one facet. Facets with no entry in the state always match."""
        if not any(key in state for key in facet.state_keys):
            return True
        now = now or self.now()
        kind = facet.kind

        if kind == FacetKind.SINGLE_SELECT:
            return self._match_single(facet, state.get(facet.id), entity, now)
        if kind == FacetKind.MULTI_SELECT:
            return self._match_multi(facet, state.get(facet.id), entity, now)
        if kind == FacetKind.FREE_TEXT_SEARCH:
            return self._match_search(facet, state.get(facet.id), entity)
        if kind == FacetKind.DATE_RANGE:
            return self._match_dates(facet, state, entity)
        if kind == FacetKind.BOOLEAN_TOGGLE:
            return self._match_toggle(facet, state.get(facet.id), entity)

        self._report(facet.id, f"unknown kind '{kind}'")
        return True

    # -------------------------------------------------------------------------
    # Entity-level evaluation
    # -------------------------------------------------------------------------

    def matches_keyword(self, entity: Any, keyword: Optional[str]) -> bool:
        """Basic keyword search shared by every screen."""
        if not keyword or not keyword.strip():
            return True
        needle = keyword.strip().casefold()
        try:
            fields = self.keyword_fields(entity)
        except (KeyError, AttributeError, TypeError) as e:
            logger.debug(f"Keyword fields failed: {e}")
            return False
        return any(needle in str(f).casefold() for f in fields if f is not None)

    def matches(
        self,
        entity: Any,
        state: Mapping,
        keyword: Optional[str] = None,
        skip: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Check whether an entity passes the keyword search and all facets.

        Args:
            entity: Record to test.
            state: Active filter state (FilterState or plain mapping).
            keyword: Basic keyword search text.
            skip: Facet id to leave out of the check.
            now: Evaluation time for relative date facets.
        """
        now = now or self.now()
        if not self.matches_keyword(entity, keyword):
            return False
        for facet in self.facets:
            if facet.id == skip:
                continue
            if not self.match_facet(facet, state, entity, now):
                return False
        return True

    def filter(self, entities: Iterable[Any], state: Mapping, keyword: Optional[str] = None) -> List[Any]:
        """Return the matching entities in input order."""
        now = self.now()
        return [e for e in entities if self.matches(e, state, keyword, now=now)]

    def option_counts(
        self,
        entities: Iterable[Any],
        state: Mapping,
        facet_id: str,
        keyword: Optional[str] = None,
    ) -> Dict[Any, int]:
        """
        Count matches per option of one facet.

        Each count is the number of entities that would match if only that
        option were selected on the facet, with every other facet unchanged.

        Returns:
            Dict of option value to count. Empty for facets without options.
        """
        facet = next((f for f in self.facets if f.id == facet_id), None)
        if facet is None or facet.kind not in (FacetKind.SINGLE_SELECT, FacetKind.MULTI_SELECT):
            return {}

        now = self.now()
        base = [e for e in entities if self.matches(e, state, keyword, skip=facet_id, now=now)]

        counts = {}
        for option in facet.options:
            if option.is_all:
                counts[option.value] = len(base)
                continue
            probe = {facet.id: option.value}
            counts[option.value] = sum(
                1 for e in base if self._match_option_probe(facet, probe, e, now)
            )
        return counts

    def _match_option_probe(self, facet: Facet, probe: Mapping, entity: Any, now: datetime) -> bool:
        if facet.kind == FacetKind.MULTI_SELECT:
            return self._match_multi(facet, probe[facet.id], entity, now)
        return self._match_single(facet, probe[facet.id], entity, now)


def matches(
    entity: Any,
    facets: Sequence[Facet],
    state: Mapping,
    bindings: Optional[Mapping[str, Binding]] = None,
    keyword: Optional[str] = None,
) -> bool:
    """Check a single entity against the active state."""
    return PredicateEvaluator(facets, bindings).matches(entity, state, keyword)


def filter_entities(
    entities: Iterable[Any],
    facets: Sequence[Facet],
    state: Mapping,
    bindings: Optional[Mapping[str, Binding]] = None,
    keyword: Optional[str] = None,
    keyword_fields: Optional[KeywordFields] = None,
) -> List[Any]:
    """Return the subset of entities matching the active state."""
    return PredicateEvaluator(facets, bindings, keyword_fields).filter(entities, state, keyword)
