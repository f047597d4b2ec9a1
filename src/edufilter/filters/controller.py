"""Filter panel controller.

One controller is built per listing screen. It owns the screen's active
filter state, re-evaluates the current entity collection on every edit, and
talks to the preset store on explicit save/load/delete.

Usage:
    controller = FilterPanelController(
        facets=tutor_facets(tutors),
        bindings=TUTOR_BINDINGS,
        entities=tutors,
        store=PresetStore(),
        namespace=namespace_for("student", "tutors"),
    )
    controller.set_facet_value("subject", "Math")
    controller.results_count
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from edufilter.config import config
from edufilter.config.logging_config import get_logger
from edufilter.filters.facets import (
    ALL_VALUE,
    DateRangeFacet,
    Facet,
    FacetKind,
    FacetOption,
    validate_facets,
)
from edufilter.filters.filter_state import FilterState
from edufilter.filters.predicates import (
    MISSING,
    Binding,
    KeywordFields,
    PredicateEvaluator,
)
from edufilter.filters.presets import Preset, PresetStore
from edufilter.filters.values import as_values, is_vacuous, parse_bound

logger = get_logger("controller")

SCALAR_TYPES = (str, int, float, bool)

# Reasons shown next to a disabled "save preset" action
REASON_BLANK_NAME = "Enter a name for the preset"
REASON_NO_FILTERS = "No active filters to save"
REASON_NOT_PERSISTED = "Preset saved for this session only; it could not be written to storage"


@dataclass
class FilterChip:
    """One removable active-filter chip."""

    key: str
    label: str
    display_value: str


@dataclass
class PresetSaveResult:
    """Outcome of a save_preset call."""

    saved: bool
    preset: Optional[Preset] = None
    reason: Optional[str] = None


def to_records(entities: Any) -> List[Any]:
    """Entity list from a sequence or DataFrame; empty DataFrame cells become None."""
    if entities is None:
        return []
    if isinstance(entities, pd.DataFrame):
        frame = entities.astype(object)
        return frame.where(entities.notna(), None).to_dict("records")
    return list(entities)


class FilterPanelController:
    """
    Orchestrates facets, filter state, evaluation and presets for a screen.

    Args:
        facets: Facet definitions for the screen.
        bindings: Facet id to field-reading function.
        keyword_fields: Strings the basic keyword search looks at.
        entities: Initial entity collection (sequence or DataFrame). When
                  None the controller starts in the loading state.
        store: Preset store. Without one, presets are disabled.
        namespace: Preset namespace for this role and screen.
        now: Clock for relative date facets.
    """

    def __init__(
        self,
        facets: Sequence[Facet],
        bindings: Optional[Mapping[str, Binding]] = None,
        keyword_fields: Optional[KeywordFields] = None,
        entities: Any = None,
        store: Optional[PresetStore] = None,
        namespace: Optional[str] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.evaluator = PredicateEvaluator([], bindings, keyword_fields, now)
        self.store = store
        self.namespace = namespace
        self.state = FilterState()
        self.keyword = ""
        self.set_facets(facets)

        self._entities: List[Any] = []
        self._results: List[Any] = []
        self.loading = entities is None
        if entities is not None:
            self.set_entities(entities)

    # -------------------------------------------------------------------------
    # Entity collection
    # -------------------------------------------------------------------------

    def set_facets(self, facets: Sequence[Facet]) -> None:
        """
        Replace the facet definitions, e.g. after options were rebuilt from
        refreshed data. Active values are kept; values for facets that no
        longer exist are dropped.
        """
        self.facets = validate_facets(facets)
        self.evaluator.facets = self.facets
        self._facets_by_id: Dict[str, Facet] = {f.id: f for f in self.facets}
        self._owners: Dict[str, Facet] = {}
        for facet in self.facets:
            for key in facet.state_keys:
                self._owners[key] = facet

        for key in [k for k in self.state if k not in self._owners]:
            self.state.remove(key)

    def begin_loading(self) -> None:
        """Mark the entity collection as being fetched."""
        self.loading = True

    def set_entities(self, entities: Any) -> int:
        """
        Replace the entity collection and recompute.

        Edits made while loading are already in the state and are applied
        here.

        Returns:
            New match count.
        """
        self._entities = to_records(entities)
        self.loading = False
        return self._recompute()

    def _recompute(self) -> Optional[int]:
        if self.loading:
            return None
        self._results = self.evaluator.filter(self._entities, self.state, self.keyword)
        logger.debug(
            f"Recomputed {self.namespace or 'filters'}: {len(self._results)}/{len(self._entities)} "
            f"with {self.state.active_filter_count} active filter(s)"
        )
        return len(self._results)

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def facet(self, facet_id: str) -> Optional[Facet]:
        return self._facets_by_id.get(facet_id)

    def _coerce(self, facet: Facet, key: str, value: Any) -> Any:
        """
        Validate a value's shape for a facet and normalize it.

        Raises:
            ValueError: If the value does not fit the facet kind.
        """
        if is_vacuous(value):
            return None
        kind = facet.kind

        if kind == FacetKind.SINGLE_SELECT:
            if not isinstance(value, SCALAR_TYPES):
                raise ValueError(f"expected a single value, got {type(value).__name__}")
            return None if value == ALL_VALUE else value

        if kind == FacetKind.MULTI_SELECT:
            values = as_values(value)
            if not all(isinstance(v, SCALAR_TYPES) for v in values):
                raise ValueError("expected a collection of values")
            return frozenset(v for v in values if v != ALL_VALUE and not is_vacuous(v))

        if kind == FacetKind.FREE_TEXT_SEARCH:
            if not isinstance(value, str):
                raise ValueError(f"expected text, got {type(value).__name__}")
            return value

        if kind == FacetKind.DATE_RANGE:
            return parse_bound(value)

        if kind == FacetKind.BOOLEAN_TOGGLE:
            if not isinstance(value, bool):
                raise ValueError(f"expected a boolean, got {type(value).__name__}")
            return True if value else None

        # Unknown kinds keep whatever scalar they were given
        return value

    def set_facet_value(self, key: str, value: Any) -> Optional[int]:
        """
        Set one facet's value and recompute.

        Args:
            key: Facet id, or '{id}_from' / '{id}_to' for date ranges.
            value: New value. Empty values clear the facet.

        Returns:
            Match count, or None while loading.
        """
        facet = self._owners.get(key)
        if facet is None:
            logger.warning(f"Ignoring value for unknown filter '{key}'")
            return self._recompute()

        try:
            normalized = self._coerce(facet, key, value)
        except ValueError as e:
            logger.warning(f"Ignoring invalid value for '{key}': {e}")
            return self._recompute()

        self.state.set(key, normalized)
        return self._recompute()

    def remove_filter(self, key: str) -> Optional[int]:
        """Remove one active filter (chip removal)."""
        self.state.remove(key)
        return self._recompute()

    def set_keyword(self, text: Optional[str]) -> Optional[int]:
        """Set the basic keyword search."""
        self.keyword = text or ""
        return self._recompute()

    def clear_all(self) -> Optional[int]:
        """Remove every facet constraint. The keyword search is kept."""
        self.state.clear()
        return self._recompute()

    def replace_state(self, filters: Mapping[str, Any]) -> Optional[int]:
        """Replace the whole state, validating each entry."""
        self.state.clear()
        for key, value in filters.items():
            facet = self._owners.get(key)
            if facet is None:
                logger.warning(f"Ignoring value for unknown filter '{key}'")
                continue
            try:
                self.state.set(key, self._coerce(facet, key, value))
            except ValueError as e:
                logger.warning(f"Ignoring invalid value for '{key}': {e}")
        return self._recompute()

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def results(self) -> List[Any]:
        return list(self._results)

    @property
    def results_count(self) -> Optional[int]:
        """Match count, or None while loading."""
        return None if self.loading else len(self._results)

    @property
    def total_count(self) -> int:
        return len(self._entities)

    @property
    def active_filter_count(self) -> int:
        return self.state.active_filter_count

    @property
    def show_no_results(self) -> bool:
        """True when active filters leave nothing to show."""
        return not self.loading and len(self._results) == 0 and self.active_filter_count > 0

    def summary(self) -> str:
        return self.state.get_summary(self.facets)

    def results_frame(self) -> pd.DataFrame:
        """Matching records as a DataFrame."""
        records = [
            r if isinstance(r, Mapping) else vars(r)
            for r in self._results
        ]
        return pd.DataFrame.from_records(records)

    def _display_value(self, facet: Facet, value: Any) -> str:
        if facet.kind in (FacetKind.SINGLE_SELECT, FacetKind.MULTI_SELECT):
            return ", ".join(facet.label_for(v) for v in sorted(as_values(value), key=str))
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        if value is True:
            return facet.placeholder or facet.title
        return str(value)

    def chips(self) -> List[FilterChip]:
        """Active filters as removable chips, in facet order."""
        chips = []
        for facet in self.facets:
            for key in facet.state_keys:
                if key not in self.state:
                    continue
                label = facet.title
                if isinstance(facet, DateRangeFacet):
                    label = f"{facet.title} ({'from' if key == facet.from_key else 'to'})"
                chips.append(FilterChip(key, label, self._display_value(facet, self.state.get(key))))
        return chips

    def option_counts(self, facet_id: str) -> Dict[Any, int]:
        """Per-option match counts for a select facet."""
        if self.loading:
            return {}
        return self.evaluator.option_counts(self._entities, self.state, facet_id, self.keyword)

    def suggestions(self, facet_id: str, query: str, limit: Optional[int] = None) -> List[FacetOption]:
        """
        Auto-complete suggestions for a search facet.

        Uses the facet's configured suggestions, or distinct values bound from
        the current entities when none are configured.

        Args:
            facet_id: Search facet id.
            query: Text typed so far.
            limit: Maximum suggestions, defaults to the configured limit.

        Returns:
            Options whose label contains the query, case-insensitive.
        """
        facet = self.facet(facet_id)
        if facet is None or facet.kind != FacetKind.FREE_TEXT_SEARCH or not query:
            return []
        limit = limit or config.app.suggestion_limit

        candidates = list(facet.suggestions)
        if not candidates:
            seen = set()
            for entity in self._entities:
                value = self.evaluator.bind(facet, entity)
                if value is MISSING:
                    continue
                for v in as_values(value):
                    text = str(v)
                    if text and text not in seen:
                        seen.add(text)
                        candidates.append(FacetOption(id=text, label=text, value=text))

        needle = query.casefold()
        matches = [opt for opt in candidates if needle in opt.label.casefold()]
        return matches[:limit]

    # -------------------------------------------------------------------------
    # Presets
    # -------------------------------------------------------------------------

    @property
    def presets(self) -> List[Preset]:
        if self.store is None or self.namespace is None:
            return []
        return self.store.list(self.namespace)

    def can_save_preset(self, name: Optional[str]) -> Optional[str]:
        """
        Check whether the current state can be saved.

        Returns:
            None if saving is allowed, otherwise the reason it is not.
        """
        if not name or not name.strip():
            return REASON_BLANK_NAME
        if self.state.is_empty:
            return REASON_NO_FILTERS
        return None

    def save_preset(self, name: Optional[str]) -> PresetSaveResult:
        """Save the current state under a name."""
        reason = self.can_save_preset(name)
        if reason:
            return PresetSaveResult(saved=False, reason=reason)

        preset = Preset.from_state(name, self.state)
        if self.store is None or self.namespace is None:
            return PresetSaveResult(saved=True, preset=preset, reason=REASON_NOT_PERSISTED)

        persisted = self.store.save(self.namespace, preset)
        logger.info(f"Saved preset '{preset.name}' in {self.namespace}")
        return PresetSaveResult(
            saved=True,
            preset=preset,
            reason=None if persisted else REASON_NOT_PERSISTED,
        )

    def apply_preset(self, preset: Union[Preset, str]) -> Optional[int]:
        """
        Replace the state with a preset's filters.

        Args:
            preset: Preset, or the id of a preset in this namespace.

        Returns:
            Match count after applying. Unknown ids leave the state unchanged.
        """
        if isinstance(preset, str):
            found = self.store.get(self.namespace, preset) if self.store and self.namespace else None
            if found is None:
                logger.warning(f"Preset '{preset}' not found in {self.namespace}")
                return self._recompute()
            preset = found

        return self.replace_state(FilterState.from_dict(preset.filters, self.facets).values)

    def delete_preset(self, preset_id: str) -> bool:
        """Delete a preset from this namespace."""
        if self.store is None or self.namespace is None:
            return False
        return self.store.delete(self.namespace, preset_id)
