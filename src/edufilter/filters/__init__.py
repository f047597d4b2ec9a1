"""Faceted filter engine.

Provides facet definitions, the active filter state, the predicate
evaluator, the preset store and the per-screen filter panel controller.

Usage:
    from edufilter.filters import (
        FilterPanelController,
        SingleSelectFacet,
        PresetStore,
    )

    controller = FilterPanelController(facets, bindings, entities=records)
    controller.set_facet_value("subject", "Math")
    visible = controller.results
"""

from .errors import (
    FilterError,
    FacetConfigError,
    PresetStoreError,
)

from .facets import (
    ALL_VALUE,
    FacetKind,
    MatchMode,
    FacetOption,
    Facet,
    SingleSelectFacet,
    MultiSelectFacet,
    SearchFacet,
    DateRangeFacet,
    ToggleFacet,
    UnsupportedFacet,
    facet_from_dict,
    validate_facets,
    options_from_values,
)

from .filter_state import FilterState

from .predicates import (
    MISSING,
    PredicateEvaluator,
    matches,
    filter_entities,
)

from .values import parse_timestamp

from .presets import (
    Preset,
    PresetStore,
    namespace_for,
    parse_payload,
)

from .controller import (
    FilterChip,
    FilterPanelController,
    PresetSaveResult,
)


__all__ = [
    # Errors
    "FilterError",
    "FacetConfigError",
    "PresetStoreError",
    # Facets
    "ALL_VALUE",
    "FacetKind",
    "MatchMode",
    "FacetOption",
    "Facet",
    "SingleSelectFacet",
    "MultiSelectFacet",
    "SearchFacet",
    "DateRangeFacet",
    "ToggleFacet",
    "UnsupportedFacet",
    "facet_from_dict",
    "validate_facets",
    "options_from_values",
    # State
    "FilterState",
    # Evaluation
    "MISSING",
    "PredicateEvaluator",
    "matches",
    "filter_entities",
    "parse_timestamp",
    # Presets
    "Preset",
    "PresetStore",
    "namespace_for",
    "parse_payload",
    # Controller
    "FilterChip",
    "FilterPanelController",
    "PresetSaveResult",
]
